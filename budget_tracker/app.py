"""Streamlit page for the budget tracker.

This module is the composition root: it owns the single
:class:`~budget_tracker.store.BudgetStore` of the session (kept in
``st.session_state``), turns widget events into store operations and renders
the store's derived views.

To run the page from the command line::

    streamlit run budget_tracker/app.py

or use ``run_budget_tracker.py`` at the project root.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, List, Optional

import streamlit as st

# Add project root to path so the page also runs as a plain script
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from budget_tracker import analytics, notifications
from budget_tracker import visualization as viz
from budget_tracker.actions import (
    action_result_message,
    describe_action,
    execute_action,
    request_clear_month,
    request_delete,
)
from budget_tracker.config import CURRENCIES, RECENT_EXPENSE_LIMIT, ensure_data_directories
from budget_tracker.errors import BudgetTrackerError
from budget_tracker.formatting import (
    category_icon,
    escape_currency_for_markdown,
    format_currency,
    format_expense_date,
    format_percentage,
    month_name,
)
from budget_tracker.log import get_logger
from budget_tracker.models import Currency, Expense, ExpenseId, PendingAction, get_currency
from budget_tracker.storage import StateStorage
from budget_tracker.store import BudgetStore, MutationResult

logger = get_logger(__name__)

STORE_KEY = 'budget_store'
NOTICES_KEY = 'notices'
PENDING_KEY = 'pending_action'

_NOTICE_ICONS = {
    notifications.SUCCESS: '✅',
    notifications.WARNING: '⚠️',
    notifications.ERROR: '❌',
}


# ============================================================================
# Session helpers
# ============================================================================

def get_store() -> BudgetStore:
    """Return the session's store, creating it on first use."""
    store = st.session_state.get(STORE_KEY)
    if store is None:
        ensure_data_directories()
        store = BudgetStore(StateStorage())
        st.session_state[STORE_KEY] = store
        logger.info("Budget store loaded from %s", store.storage.path)
    return store


def queue_notice(notice: Optional[notifications.Notice]) -> None:
    """Keep a message until the next render so it survives Streamlit reruns."""
    if notice is None:
        return
    st.session_state.setdefault(NOTICES_KEY, []).append(notice)


def _queue_result(result: MutationResult, notice: Optional[notifications.Notice]) -> None:
    queue_notice(notice)
    if not result.persisted:
        queue_notice(notifications.persistence_warning(result.persistence_error))


def _flush_notices() -> None:
    notices: List[notifications.Notice] = st.session_state.get(NOTICES_KEY, [])
    for message, severity in notices:
        st.toast(message, icon=_NOTICE_ICONS.get(severity))
    st.session_state[NOTICES_KEY] = []


def _currency(store: BudgetStore) -> Currency:
    return get_currency(store.state.selected_currency)


def _money(store: BudgetStore, amount: float) -> str:
    currency = _currency(store)
    return format_currency(amount, currency.code, currency.symbol)


# ============================================================================
# Event handlers
# ============================================================================

def handle_set_budget(store: BudgetStore, raw_amount: Any) -> bool:
    try:
        result = store.set_budget(raw_amount)
    except BudgetTrackerError as exc:
        queue_notice((str(exc), notifications.ERROR))
        return False
    _queue_result(result, notifications.budget_set_message(store.state.monthly_budget, _currency(store)))
    return True


def handle_add_expense(store: BudgetStore, raw_amount: Any, category: Optional[str], description: str) -> bool:
    try:
        result = store.add_expense(raw_amount, category, description)
    except BudgetTrackerError as exc:
        queue_notice((str(exc), notifications.ERROR))
        return False
    _queue_result(result, notifications.expense_added_message(result.expense, _currency(store)))
    queue_notice(notifications.budget_warning_message(result.warning_level))
    return True


def handle_currency_change(store: BudgetStore, code: str) -> bool:
    try:
        result = store.change_currency(code)
    except BudgetTrackerError as exc:
        queue_notice((str(exc), notifications.ERROR))
        return False
    _queue_result(result, notifications.currency_changed_message(_currency(store)))
    return True


def handle_import(store: BudgetStore, payload: Any) -> bool:
    try:
        result = store.import_data(payload)
    except BudgetTrackerError as exc:
        queue_notice((f"Error importing data: {exc}", notifications.ERROR))
        return False
    _queue_result(result, ("Data imported successfully", notifications.SUCCESS))
    return True


def request_delete_action(store: BudgetStore, expense_id: ExpenseId) -> None:
    st.session_state[PENDING_KEY] = request_delete(store, expense_id)


def request_clear_action(store: BudgetStore) -> None:
    action = request_clear_month(store)
    if action is None:
        queue_notice(("No expenses to clear", notifications.WARNING))
    st.session_state[PENDING_KEY] = action


def confirm_pending(store: BudgetStore) -> Optional[MutationResult]:
    action: Optional[PendingAction] = st.session_state.get(PENDING_KEY)
    st.session_state[PENDING_KEY] = None
    if action is None:
        return None
    result = execute_action(store, action)
    _queue_result(result, action_result_message(action, result))
    return result


def cancel_pending() -> None:
    st.session_state[PENDING_KEY] = None


# ============================================================================
# Rendering
# ============================================================================

def render_sidebar(store: BudgetStore) -> None:
    st.sidebar.header("Settings")
    # Keep the widget in sync when an import changed the currency
    if st.session_state.get('currency_select') != store.state.selected_currency:
        st.session_state['currency_select'] = store.state.selected_currency
    st.sidebar.selectbox(
        "Currency",
        options=list(CURRENCIES),
        format_func=lambda code: f"{CURRENCIES[code]['symbol']} {code} - {CURRENCIES[code]['name']}",
        key='currency_select',
        on_change=lambda: handle_currency_change(store, st.session_state['currency_select']),
    )

    st.sidebar.divider()
    st.sidebar.subheader("Backup")
    st.sidebar.download_button(
        "⬇ Export data",
        data=store.export_data(),
        file_name=store.export_filename(),
        mime="application/json",
    )
    uploaded = st.sidebar.file_uploader("Import data", type=["json"], key='import_file')
    if uploaded is not None and st.sidebar.button("Import"):
        handle_import(store, uploaded.getvalue())
        st.rerun()


def render_budget_setup(store: BudgetStore) -> None:
    currency = _currency(store)
    with st.form("budget_form", clear_on_submit=True):
        raw = st.text_input(
            f"Monthly budget ({currency.symbol})",
            placeholder=f"Enter your monthly budget in {currency.code}",
        )
        if st.form_submit_button("Set budget"):
            handle_set_budget(store, raw)
            st.rerun()


def render_overview(store: BudgetStore) -> None:
    used = store.budget_used_percentage()
    cols = st.columns(4)
    cols[0].metric("Total budget", _money(store, store.state.monthly_budget))
    cols[1].metric("Total spent", _money(store, store.total_spent()))
    cols[2].metric("Remaining", _money(store, store.remaining_budget()))
    cols[3].metric("Budget used", format_percentage(used))
    st.plotly_chart(viz.create_budget_progress_chart(used), use_container_width=True)


def render_expense_form(store: BudgetStore) -> None:
    currency = _currency(store)
    with st.form("expense_form", clear_on_submit=True):
        cols = st.columns([1, 1, 2])
        amount = cols[0].text_input(f"Amount ({currency.symbol})", placeholder="0.00")
        category = cols[1].selectbox(
            "Category",
            options=store.state.categories,
            index=None,
            placeholder="Select category",
            format_func=lambda name: f"{category_icon(name)} {name}",
        )
        description = cols[2].text_input("Description", placeholder="Optional")
        if st.form_submit_button("Add expense"):
            handle_add_expense(store, amount, category, description)
            st.rerun()


def render_pending_action(store: BudgetStore) -> None:
    action: Optional[PendingAction] = st.session_state.get(PENDING_KEY)
    if action is None:
        return
    st.warning(escape_currency_for_markdown(describe_action(store, action)))
    yes, no = st.columns(2)
    yes.button("Yes, delete", type="primary", on_click=confirm_pending, args=(store,))
    no.button("Cancel", on_click=cancel_pending)


def delete_button_key(index: int, expense: Expense) -> str:
    """Widget key for a row's delete button.

    Imported data can hold repeated ids, so the row position is part of the key.
    """
    return f"delete_{index}_{expense.id}"


def render_recent_expenses(store: BudgetStore) -> None:
    st.subheader("Recent expenses")
    expenses = store.current_month_expenses()
    if not expenses:
        st.info("No expenses recorded yet. Add your first expense above to get started.")
        return

    for index, expense in enumerate(expenses[:RECENT_EXPENSE_LIMIT]):
        info, amount, action = st.columns([4, 2, 1])
        info.markdown(f"**{category_icon(expense.category)} {expense.category}**")
        if expense.description:
            info.caption(expense.description)
        info.caption(format_expense_date(expense.date))
        amount.markdown(escape_currency_for_markdown(_money(store, expense.amount)))
        action.button(
            "🗑",
            key=delete_button_key(index, expense),
            help="Delete expense",
            on_click=request_delete_action,
            args=(store, expense.id),
        )

    st.button("Clear this month", on_click=request_clear_action, args=(store,))


def render_category_breakdown(store: BudgetStore) -> None:
    st.subheader("Category breakdown")
    breakdown = analytics.category_breakdown(store.category_totals(), store.total_spent())
    if breakdown.empty:
        st.info("No spending data available. Add some expenses to see category breakdown.")
        return
    chart_col, legend_col = st.columns([3, 2])
    chart_col.plotly_chart(viz.create_category_pie_chart(breakdown), use_container_width=True)
    legend = breakdown.assign(
        Category=breakdown['Icon'] + ' ' + breakdown['Category'],
        Amount=breakdown['Amount'].map(lambda value: _money(store, value)),
        Share=breakdown['Share'].map(lambda value: f"{value:.1f}% of total spending"),
    )[['Category', 'Amount', 'Share']]
    legend_col.dataframe(legend, hide_index=True, use_container_width=True)

    cumulative = analytics.daily_cumulative_spending(store.current_month_expenses())
    st.plotly_chart(
        viz.create_cumulative_spending_chart(cumulative, store.state.monthly_budget),
        use_container_width=True,
    )


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Budget Tracker", page_icon="💰", layout="wide")
    store = get_store()

    st.title("💰 Budget Tracker")
    st.caption(month_name(store.clock()))

    render_sidebar(store)
    _flush_notices()
    render_pending_action(store)

    render_budget_setup(store)
    render_overview(store)
    render_expense_form(store)

    left, right = st.columns(2)
    with left:
        render_recent_expenses(store)
    with right:
        render_category_breakdown(store)


if __name__ == "__main__":  # pragma: no cover
    main()
