"""Configuration management for the budget tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

# Base project root - assumes this file is in budget_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directory holding one JSON document per storage key
DATA_DIR = Path(os.getenv("BUDGET_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))

# Key under which the whole budget state is stored
STORAGE_KEY = os.getenv("BUDGET_TRACKER_STORAGE_KEY", "budgetTrackerData")

LOG_LEVEL = os.getenv("BUDGET_TRACKER_LOG_LEVEL", "INFO").upper()

CURRENCIES: Dict[str, Dict[str, str]] = {
    'USD': {'symbol': '$', 'code': 'USD', 'name': 'US Dollar'},
    'EUR': {'symbol': '€', 'code': 'EUR', 'name': 'Euro'},
    'PLN': {'symbol': 'zł', 'code': 'PLN', 'name': 'Polish Złoty'},
    'MAD': {'symbol': 'DH', 'code': 'MAD', 'name': 'Moroccan Dirham'},
}
DEFAULT_CURRENCY = 'USD'

DEFAULT_CATEGORIES: List[str] = [
    'Food',
    'Transportation',
    'Housing',
    'Utilities',
    'Entertainment',
    'Healthcare',
    'Shopping',
    'Other',
]

CATEGORY_COLORS: Dict[str, str] = {
    'Food': '#FF6384',
    'Transportation': '#36A2EB',
    'Housing': '#FFCE56',
    'Utilities': '#4BC0C0',
    'Entertainment': '#9966FF',
    'Healthcare': '#FF9F40',
    'Shopping': '#FF6384',
    'Other': '#C9CBCF',
}
DEFAULT_COLOR = '#C9CBCF'

CATEGORY_ICONS: Dict[str, str] = {
    'Food': '🍽️',
    'Transportation': '🚗',
    'Housing': '🏠',
    'Utilities': '⚡',
    'Entertainment': '🎬',
    'Healthcare': '🏥',
    'Shopping': '🛍️',
    'Other': '📝',
}
DEFAULT_ICON = '📝'

# Budget usage thresholds (percent)
CRITICAL_THRESHOLD = 90.0
ELEVATED_THRESHOLD = 75.0
# Progress bar styling thresholds (percent)
PROGRESS_WARNING_THRESHOLD = 80.0
PROGRESS_DANGER_THRESHOLD = 100.0

RECENT_EXPENSE_LIMIT = 10


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
