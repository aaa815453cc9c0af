"""Tabular views over the store's derived data.

These helpers turn store output into pandas objects for the page and the
charts. They hold no business rules of their own: totals and ordering come
from :class:`~budget_tracker.store.BudgetStore`.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import pandas as pd

from .formatting import category_color, category_icon
from .models import Expense

EXPENSE_COLUMNS = ['id', 'date', 'category', 'description', 'amount']


def expenses_dataframe(expenses: Iterable[Expense]) -> pd.DataFrame:
    """One row per expense, in the order given."""
    rows = [
        {
            'id': str(e.id),
            'date': pd.Timestamp(e.date),
            'category': e.category,
            'description': e.description,
            'amount': float(e.amount),
        }
        for e in expenses
    ]
    if not rows:
        return pd.DataFrame(columns=EXPENSE_COLUMNS)
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def category_breakdown(totals: Sequence[Tuple[str, float]], total_spent: float) -> pd.DataFrame:
    """Legend rows for the category chart.

    Args:
        totals: ``(category, total)`` pairs, already sorted by the store.
        total_spent: Sum over the current month.

    Returns:
        DataFrame with Category, Icon, Color, Amount and Share (percent of
        total spending) columns, in the order of ``totals``.
    """
    columns = ['Category', 'Icon', 'Color', 'Amount', 'Share']
    if not totals:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(list(totals), columns=['Category', 'Amount'])
    df['Icon'] = df['Category'].map(category_icon)
    df['Color'] = df['Category'].map(category_color)
    df['Share'] = (df['Amount'] / total_spent * 100) if total_spent > 0 else 0.0
    return df[columns]


def daily_cumulative_spending(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Running total of spending per calendar day.

    Returns:
        DataFrame indexed by ``Day`` with a single ``Spent`` column.
    """
    df = expenses_dataframe(expenses)
    if df.empty:
        return pd.DataFrame(columns=['Spent'], index=pd.Index([], name='Day'))
    days = pd.to_datetime(df['date'], utc=True).dt.tz_localize(None).dt.normalize()
    daily = df.groupby(days)['amount'].sum().sort_index()
    daily.index.name = 'Day'
    return daily.cumsum().to_frame('Spent')

