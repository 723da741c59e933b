"""Exception types raised at the edges of the expense tracker.

The aggregation and filtering functions never raise on well-typed input;
only record validation, import parsing and the remote store do.
"""

from __future__ import annotations


class ExpenseTrackerError(Exception):
    """Base class for all expense tracker errors."""


class InvalidExpenseError(ExpenseTrackerError, ValueError):
    """A record is missing a required field or holds an unusable value."""


class ImportFormatError(ExpenseTrackerError, ValueError):
    """An import payload does not have the expected JSON array shape."""


class RemoteStoreError(ExpenseTrackerError):
    """The remote store was unreachable or rejected the operation."""
