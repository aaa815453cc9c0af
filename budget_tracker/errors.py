"""Error kinds raised by the budget store and its storage backend."""

from __future__ import annotations


class BudgetTrackerError(Exception):
    """Base class for every recoverable budget tracker error.

    ``str(error)`` is a user-facing message suitable for a toast.
    """


class InvalidAmount(BudgetTrackerError, ValueError):
    """Amount is missing, non-numeric, non-finite or not positive."""


class MissingCategory(BudgetTrackerError, ValueError):
    """Expense category is empty or unset."""


class UnknownCategory(MissingCategory):
    """Expense category is not one of the configured categories."""


class UnknownCurrency(BudgetTrackerError, ValueError):
    """Currency code is outside the supported set."""


class InvalidFormat(BudgetTrackerError, ValueError):
    """Imported data cannot be read as a budget state."""


class PersistenceFailure(BudgetTrackerError, OSError):
    """Writing the state to storage failed.

    The in-memory mutation that preceded the write still stands.
    """
