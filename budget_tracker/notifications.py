"""User-facing messages for store results.

The page decides how to show them (toast, banner); this module only maps
results to ``(message, severity)`` pairs.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .formatting import format_currency
from .models import Currency, Expense, WarningLevel

Notice = Tuple[str, str]

SUCCESS = 'success'
WARNING = 'warning'
ERROR = 'error'

_WARNING_MESSAGES = {
    WarningLevel.EXCEEDED: ("⚠️ Warning: You have exceeded your monthly budget!", ERROR),
    WarningLevel.CRITICAL: ("⚠️ Warning: You are close to your budget limit!", WARNING),
    WarningLevel.ELEVATED: ("💡 Info: You have used 75% of your budget", WARNING),
}


def budget_warning_message(level: WarningLevel) -> Optional[Notice]:
    """Message to show after an expense is added, or None when spending is normal."""
    return _WARNING_MESSAGES.get(level)


def budget_set_message(amount: float, currency: Currency) -> Notice:
    return f"Monthly budget set to {format_currency(amount, currency.code, currency.symbol)}", SUCCESS


def expense_added_message(expense: Expense, currency: Currency) -> Notice:
    amount = format_currency(expense.amount, currency.code, currency.symbol)
    return f"Added {amount} expense for {expense.category}", SUCCESS


def currency_changed_message(currency: Currency) -> Notice:
    return f"Currency changed to {currency.name}", SUCCESS


def persistence_warning(error: Exception) -> Notice:
    return f"{error}. Changes are kept for this session only.", ERROR
