"""Domain types for the budget tracker and their JSON representation.

The persisted layout uses camelCase keys (``monthlyBudget``,
``selectedCurrency``) so that files written by the browser version of the
tracker can be imported unchanged.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config import CURRENCIES, DEFAULT_CATEGORIES, DEFAULT_CURRENCY
from .errors import InvalidAmount, InvalidFormat
from .log import get_logger

logger = get_logger(__name__)

ExpenseId = Union[str, int, float]


class WarningLevel(str, Enum):
    """Informational tier derived from the share of budget consumed."""

    NORMAL = 'normal'
    ELEVATED = 'elevated'
    CRITICAL = 'critical'
    EXCEEDED = 'exceeded'


class ActionKind(str, Enum):
    DELETE_EXPENSE = 'delete_expense'
    CLEAR_MONTH = 'clear_month'


@dataclass(frozen=True)
class PendingAction:
    """A destructive action awaiting user confirmation."""

    kind: ActionKind
    target_id: Optional[str] = None


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


def get_currency(code: str) -> Optional[Currency]:
    info = CURRENCIES.get(code)
    if info is None:
        return None
    return Currency(code=info['code'], symbol=info['symbol'], name=info['name'])


def new_expense_id() -> str:
    return uuid.uuid4().hex


def parse_amount(value: Any) -> float:
    """Convert user or JSON input into a positive finite amount.

    Raises:
        InvalidAmount: If the value is empty, non-numeric, non-finite or <= 0.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount("Please enter a valid amount")
    if isinstance(value, str):
        cleaned = value.strip().replace(',', '')
        if not cleaned:
            raise InvalidAmount("Please enter a valid amount")
        try:
            value = float(cleaned)
        except ValueError as exc:
            raise InvalidAmount("Please enter a valid amount") from exc
    if not isinstance(value, (int, float)):
        raise InvalidAmount("Please enter a valid amount")
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        raise InvalidAmount("Please enter a valid amount")
    return number


def _truncate_ms(value: datetime) -> datetime:
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision we persist."""
    return _truncate_ms(datetime.now(timezone.utc))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC datetime, or ``None``.

    Sub-millisecond digits are dropped so parsed values survive a save.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return _truncate_ms(value.replace(tzinfo=timezone.utc))
        return _truncate_ms(value.astimezone(timezone.utc))
    if not isinstance(value, str):
        return None
    ts = pd.to_datetime(value, errors='coerce', utc=True)
    if pd.isna(ts):
        return None
    return _truncate_ms(ts.to_pydatetime())


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way the persisted layout expects (``...000Z``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S') + f".{value.microsecond // 1000:03d}Z"


def month_key(value: datetime) -> Tuple[int, int]:
    """Calendar (year, month) of a timestamp, evaluated in UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.year, value.month


@dataclass(frozen=True)
class Expense:
    id: ExpenseId
    amount: float
    category: str
    description: str
    date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'category': self.category,
            'description': self.description,
            'date': format_timestamp(self.date),
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'Expense':
        """Build an expense from its JSON form.

        Raises:
            InvalidFormat: If a required field is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise InvalidFormat("Expense entries must be objects")
        try:
            amount = parse_amount(data.get('amount'))
        except InvalidAmount as exc:
            raise InvalidFormat(f"Expense has an invalid amount: {data.get('amount')!r}") from exc
        category = data.get('category')
        if not isinstance(category, str) or not category:
            raise InvalidFormat("Expense is missing a category")
        description = data.get('description') or ''
        if not isinstance(description, str):
            raise InvalidFormat("Expense description must be text")
        date = parse_timestamp(data.get('date'))
        if date is None:
            raise InvalidFormat(f"Expense has an invalid date: {data.get('date')!r}")
        expense_id = data.get('id')
        if expense_id is None or isinstance(expense_id, bool) or not isinstance(expense_id, (str, int, float)):
            expense_id = new_expense_id()
        return cls(
            id=expense_id,
            amount=amount,
            category=category,
            description=description,
            date=date,
        )


def _parse_budget(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidFormat("monthlyBudget must be a number")
    number = float(value)
    if not math.isfinite(number) or number < 0:
        raise InvalidFormat("monthlyBudget must be a non-negative number")
    return number


def _parse_expenses(value: Any) -> List[Expense]:
    if not isinstance(value, list):
        raise InvalidFormat("expenses must be a list")
    return [Expense.from_dict(item) for item in value]


def _parse_stored_expenses(value: Any) -> List[Expense]:
    """Like ``_parse_expenses`` but drops malformed entries instead of the whole list."""
    if not isinstance(value, list):
        raise InvalidFormat("expenses must be a list")
    expenses = []
    for index, item in enumerate(value):
        try:
            expenses.append(Expense.from_dict(item))
        except InvalidFormat as exc:
            logger.warning("Skipping stored expense #%d: %s", index, exc)
    return expenses


def _parse_categories(value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(c, str) and c for c in value):
        raise InvalidFormat("categories must be a list of names")
    return list(value)


def _parse_currency(value: Any) -> str:
    if not isinstance(value, str) or value not in CURRENCIES:
        raise InvalidFormat(f"Unsupported currency: {value!r}")
    return value


# persisted key -> (attribute, parser)
_FIELDS = {
    'monthlyBudget': ('monthly_budget', _parse_budget),
    'expenses': ('expenses', _parse_expenses),
    'categories': ('categories', _parse_categories),
    'selectedCurrency': ('selected_currency', _parse_currency),
}

# used instead of the strict parser when loading stored state
_LENIENT_PARSERS = {
    'expenses': _parse_stored_expenses,
}


@dataclass
class BudgetState:
    """The persisted root object."""

    monthly_budget: float = 0.0
    expenses: List[Expense] = field(default_factory=list)
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    selected_currency: str = DEFAULT_CURRENCY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monthlyBudget': self.monthly_budget,
            'expenses': [e.to_dict() for e in self.expenses],
            'categories': list(self.categories),
            'selectedCurrency': self.selected_currency,
        }

    def merged(self, data: Any, strict: bool = True) -> 'BudgetState':
        """Return a copy with the fields present in ``data`` overwritten.

        The merge is shallow: a field present in ``data`` replaces the
        current value wholesale, absent fields are retained and unknown keys
        are ignored.

        Args:
            data: Parsed JSON object.
            strict: When True an invalid field raises ``InvalidFormat``;
                otherwise the field keeps its current value and a warning is
                logged. Malformed expense entries are then skipped one by one.

        Raises:
            InvalidFormat: If ``data`` is not an object, or a field is
                invalid and ``strict`` is set.
        """
        if not isinstance(data, Mapping):
            raise InvalidFormat("Budget data must be a JSON object")
        values = {
            'monthly_budget': self.monthly_budget,
            'expenses': list(self.expenses),
            'categories': list(self.categories),
            'selected_currency': self.selected_currency,
        }
        for key, (attribute, parser) in _FIELDS.items():
            if key not in data:
                continue
            parse = parser if strict else _LENIENT_PARSERS.get(key, parser)
            try:
                values[attribute] = parse(data[key])
            except InvalidFormat as exc:
                if strict:
                    raise
                logger.warning("Ignoring stored field %s: %s", key, exc)
        return BudgetState(**values)

    @classmethod
    def from_dict(cls, data: Any, strict: bool = True) -> 'BudgetState':
        return cls().merged(data, strict=strict)
