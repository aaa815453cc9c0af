"""Confirmation flow for destructive actions.

A confirmation prompt holds a :class:`PendingAction` value instead of a
callback. The page keeps it in session state, shows
:func:`describe_action`, and on confirmation hands it to
:func:`execute_action`.
"""

from __future__ import annotations

from typing import Optional

from .formatting import format_currency
from .models import ActionKind, ExpenseId, PendingAction, get_currency
from .notifications import SUCCESS, WARNING, Notice
from .store import BudgetStore, MutationResult


def request_delete(store: BudgetStore, expense_id: ExpenseId) -> Optional[PendingAction]:
    """Ask to delete an expense; returns None if the expense no longer exists."""
    if store.find_expense(expense_id) is None:
        return None
    return PendingAction(ActionKind.DELETE_EXPENSE, str(expense_id))


def request_clear_month(store: BudgetStore) -> Optional[PendingAction]:
    """Ask to clear the current month; returns None if there is nothing to clear."""
    if not store.current_month_expenses():
        return None
    return PendingAction(ActionKind.CLEAR_MONTH)


def describe_action(store: BudgetStore, action: PendingAction) -> str:
    if action.kind is ActionKind.DELETE_EXPENSE:
        expense = store.find_expense(action.target_id)
        if expense is None:
            return "This expense has already been removed."
        currency = get_currency(store.state.selected_currency)
        amount = format_currency(expense.amount, currency.code, currency.symbol)
        return f"Are you sure you want to delete the {expense.category} expense of {amount}?"
    count = len(store.current_month_expenses())
    return f"Are you sure you want to delete all {count} expenses for this month?"


def execute_action(store: BudgetStore, action: PendingAction) -> MutationResult:
    if action.kind is ActionKind.DELETE_EXPENSE:
        return store.delete_expense(action.target_id)
    if action.kind is ActionKind.CLEAR_MONTH:
        return store.clear_current_month_expenses()
    raise ValueError(f"Unsupported action: {action.kind}")


def action_result_message(action: PendingAction, result: MutationResult) -> Notice:
    if action.kind is ActionKind.DELETE_EXPENSE:
        return ("Expense deleted", SUCCESS) if result.changed else ("Expense was already removed", WARNING)
    return ("All expenses cleared", SUCCESS) if result.changed else ("No expenses to clear", WARNING)
