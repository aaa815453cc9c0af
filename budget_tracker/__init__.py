"""Top‑level package for the Budget Tracker.

The primary modules are:

* ``store`` – the budget store: load, mutate, persist and derive totals
* ``storage`` – local JSON key-value storage for the budget state
* ``analytics`` / ``visualization`` – pandas views and Plotly figures
* ``app`` – a Streamlit page that ties everything together

To run the page from the command line you can execute:

```bash
streamlit run budget_tracker/app.py
```
"""

from .errors import (  # noqa: F401  # re-exported for convenience
    BudgetTrackerError,
    InvalidAmount,
    InvalidFormat,
    MissingCategory,
    PersistenceFailure,
    UnknownCategory,
    UnknownCurrency,
)
from .models import BudgetState, Expense, PendingAction, WarningLevel  # noqa: F401
from .storage import StateStorage  # noqa: F401
from .store import BudgetStore  # noqa: F401

__all__ = [
    "BudgetStore",
    "BudgetState",
    "Expense",
    "PendingAction",
    "WarningLevel",
    "StateStorage",
    "BudgetTrackerError",
    "InvalidAmount",
    "InvalidFormat",
    "MissingCategory",
    "PersistenceFailure",
    "UnknownCategory",
    "UnknownCurrency",
]
