"""Budget store: owns the budget state, mutates it and derives aggregates.

Every mutating operation persists the whole state afterwards. A failed write
never undoes the mutation; it is logged and reported on the returned
:class:`MutationResult` so the page can warn the user.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import CRITICAL_THRESHOLD, CURRENCIES, ELEVATED_THRESHOLD
from .errors import InvalidAmount, InvalidFormat, MissingCategory, PersistenceFailure, UnknownCategory, UnknownCurrency
from .log import get_logger
from .models import (
    BudgetState,
    Expense,
    ExpenseId,
    WarningLevel,
    format_timestamp,
    month_key,
    new_expense_id,
    parse_amount,
    utc_now,
)
from .storage import StateStorage

logger = get_logger(__name__)


@dataclass
class MutationResult:
    changed: bool = True
    persistence_error: Optional[PersistenceFailure] = None

    @property
    def persisted(self) -> bool:
        return self.persistence_error is None


@dataclass
class AddExpenseResult(MutationResult):
    expense: Optional[Expense] = None
    warning_level: WarningLevel = WarningLevel.NORMAL


@dataclass
class ClearResult(MutationResult):
    removed: List[Expense] = field(default_factory=list)


class BudgetStore:
    """Single-session owner of the budget state.

    Args:
        storage: Backend the state is loaded from and saved to.
        clock: Returns the current time; injected so "current month" can be
            pinned in tests.
        id_factory: Produces ids for new expenses.
    """

    def __init__(
        self,
        storage: Optional[StateStorage] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], ExpenseId] = new_expense_id,
    ):
        self.storage = storage if storage is not None else StateStorage()
        self.clock = clock
        self.id_factory = id_factory
        self.state = self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> BudgetState:
        """Read the stored state, shallow-merged over defaults."""
        data = self.storage.load()
        if data is None:
            return BudgetState()
        return BudgetState.from_dict(data, strict=False)

    def _persist(self) -> Optional[PersistenceFailure]:
        try:
            self.storage.save(self.state.to_dict())
        except PersistenceFailure as exc:
            logger.warning("State kept in memory only: %s", exc)
            return exc
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_budget(self, amount: Any) -> MutationResult:
        try:
            self.state.monthly_budget = parse_amount(amount)
        except InvalidAmount as exc:
            raise InvalidAmount("Please enter a valid budget amount") from exc
        logger.info("Monthly budget set to %.2f", self.state.monthly_budget)
        return MutationResult(persistence_error=self._persist())

    def add_expense(self, amount: Any, category: Optional[str], description: Optional[str] = '') -> AddExpenseResult:
        value = parse_amount(amount)
        if not category:
            raise MissingCategory("Please select a category")
        if category not in self.state.categories:
            raise UnknownCategory(f"Unknown category: {category}")

        expense = Expense(
            id=self.id_factory(),
            amount=value,
            category=category,
            description=(description or '').strip(),
            date=self.clock(),
        )
        self.state.expenses.insert(0, expense)
        logger.info("Added %.2f expense for %s", value, category)
        error = self._persist()
        return AddExpenseResult(
            persistence_error=error,
            expense=expense,
            warning_level=self.budget_warning_level(),
        )

    def delete_expense(self, expense_id: ExpenseId) -> MutationResult:
        """Remove the expense with ``expense_id``; unknown ids are a no-op.

        Ids are compared by their string form so ids coming back from form
        widgets match numeric ids from imported data.
        """
        wanted = str(expense_id)
        remaining = [e for e in self.state.expenses if str(e.id) != wanted]
        changed = len(remaining) != len(self.state.expenses)
        self.state.expenses = remaining
        return MutationResult(changed=changed, persistence_error=self._persist())

    def clear_current_month_expenses(self) -> ClearResult:
        current = month_key(self.clock())
        removed = [e for e in self.state.expenses if month_key(e.date) == current]
        self.state.expenses = [e for e in self.state.expenses if month_key(e.date) != current]
        if removed:
            logger.info("Cleared %d expenses for %04d-%02d", len(removed), *current)
        return ClearResult(changed=bool(removed), removed=removed, persistence_error=self._persist())

    def change_currency(self, code: str) -> MutationResult:
        if code not in CURRENCIES:
            raise UnknownCurrency(f"Unsupported currency: {code}")
        self.state.selected_currency = code
        return MutationResult(persistence_error=self._persist())

    def import_data(self, raw: Any) -> MutationResult:
        """Merge JSON text, bytes or an already-parsed object over the state.

        Raises:
            InvalidFormat: If the input is not a budget-shaped JSON object.
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode('utf-8')
            except UnicodeDecodeError as exc:
                raise InvalidFormat("Invalid file format") from exc
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise InvalidFormat("Invalid file format") from exc
        try:
            self.state = self.state.merged(raw, strict=True)
        except InvalidFormat as exc:
            logger.warning("Rejected import: %s", exc)
            raise
        logger.info("Imported fields: %s", ', '.join(sorted(map(str, raw))))
        return MutationResult(persistence_error=self._persist())

    def export_data(self) -> str:
        return json.dumps(self.state.to_dict(), indent=2, ensure_ascii=False)

    def export_filename(self) -> str:
        return f"budget-data-{format_timestamp(self.clock())[:10]}.json"

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def current_month_expenses(self) -> List[Expense]:
        current = month_key(self.clock())
        return [e for e in self.state.expenses if month_key(e.date) == current]

    def total_spent(self) -> float:
        return sum(e.amount for e in self.current_month_expenses())

    def remaining_budget(self) -> float:
        return self.state.monthly_budget - self.total_spent()

    def budget_used_percentage(self) -> float:
        if self.state.monthly_budget == 0:
            return 0.0
        return self.total_spent() / self.state.monthly_budget * 100

    def category_totals(self) -> List[Tuple[str, float]]:
        """Current-month totals per category, largest first.

        Ties keep the order in which categories were first encountered.
        """
        totals: Dict[str, float] = {}
        for expense in self.current_month_expenses():
            totals[expense.category] = totals.get(expense.category, 0.0) + expense.amount
        return sorted(totals.items(), key=lambda item: item[1], reverse=True)

    def budget_warning_level(self) -> WarningLevel:
        used = self.budget_used_percentage()
        if self.remaining_budget() < 0:
            return WarningLevel.EXCEEDED
        if used >= CRITICAL_THRESHOLD:
            return WarningLevel.CRITICAL
        if used >= ELEVATED_THRESHOLD:
            return WarningLevel.ELEVATED
        return WarningLevel.NORMAL

    def find_expense(self, expense_id: ExpenseId) -> Optional[Expense]:
        wanted = str(expense_id)
        return next((e for e in self.state.expenses if str(e.id) == wanted), None)
