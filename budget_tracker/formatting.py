"""Formatting utilities for currency, dates and text display."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from .config import CATEGORY_COLORS, CATEGORY_ICONS, CURRENCIES, DEFAULT_COLOR, DEFAULT_ICON

# Prefix used by en-US style currency formatting. Codes without an entry fall
# back to ``symbol + fixed-2-decimal amount``.
_CURRENCY_PREFIXES = {
    'USD': '$',
    'EUR': '€',
    'PLN': 'PLN ',
    'MAD': 'MAD ',
}


def format_currency(amount: Union[float, int], code: str = 'USD', symbol: Optional[str] = None) -> str:
    """Format an amount in the given currency.

    Args:
        amount: The amount to format
        code: ISO currency code
        symbol: Symbol for the fallback format; defaults to the configured
            symbol for ``code`` or the code itself

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.5, 'USD')
        '$1,234.50'
        >>> format_currency(-10, 'EUR')
        '-€10.00'
        >>> format_currency(5, 'XYZ', symbol='¤')
        '¤5.00'
    """
    prefix = _CURRENCY_PREFIXES.get(code)
    if prefix is None:
        if symbol is None:
            symbol = CURRENCIES.get(code, {}).get('symbol', code)
        return f"{symbol}{amount:.2f}"
    sign = '-' if amount < 0 else ''
    return f"{sign}{prefix}{abs(amount):,.2f}"


def escape_currency_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown does not treat them as LaTeX.

    Example:
        >>> escape_currency_for_markdown('$1,234.56')
        '\\\\$1,234.56'
    """
    return text.replace("$", "\\$")


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_expense_date(value: datetime) -> str:
    """Render a timestamp like ``Jan 3, 2025, 10:00 AM``."""
    hour = value.strftime('%I:%M %p')
    return f"{value.strftime('%b')} {value.day}, {value.year}, {hour}"


def month_name(value: datetime) -> str:
    """Render a month header like ``January 2025``."""
    return value.strftime('%B %Y')


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)


def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_COLOR)
