"""Application state container for the expense collection.

:class:`ExpenseBook` owns the in-memory list of expenses for one running
application.  The list is only ever replaced as a whole: add appends,
delete filters out, import merges.  Each mutation is applied to the list
as it is *after* the persistence call returns, so back-to-back operations
never overwrite each other with a stale copy.

When the remote store fails, the book applies the change locally, marks
itself offline and queues a notification for the UI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import ImportFormatError, InvalidExpenseError
from .filtering import CriteriaLike, filter_expenses
from .formatting import generate_id
from .models import Expense
from .persistence import ExpenseRepository, Outcome
from .reports import PeriodSummary, build_report
from .transfer import dump_expenses, export_filename, merge_imported, parse_import_payload, write_export

logger = logging.getLogger(__name__)

SUCCESS = "success"
INFO = "info"
WARNING = "warning"
ERROR = "error"

_LOG_LEVELS = {
    SUCCESS: logging.INFO,
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}

OFFLINE_MESSAGE = "Working offline: changes are saved on this device only"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import: ``imported``, ``nothing_new`` or ``rejected``."""

    status: str
    added: int = 0
    reason: Optional[str] = None


class ExpenseBook:
    """Holds the expense collection and mediates every change to it."""

    def __init__(self, repository: ExpenseRepository) -> None:
        self.repository = repository
        self.expenses: List[Expense] = []
        self.is_loading = True
        self.offline = False
        self.notifications: List[Notification] = []

    # -- lifecycle -------------------------------------------------------

    def open(self) -> "ExpenseBook":
        self.repository.open()
        self.load()
        return self

    def close(self) -> None:
        self.repository.close()

    def __enter__(self) -> "ExpenseBook":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- notifications ---------------------------------------------------

    def notify(self, level: str, message: str) -> None:
        logger.log(_LOG_LEVELS.get(level, logging.INFO), message)
        self.notifications.append(Notification(level, message))

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    def _track_outcome(self, outcome: Outcome[Any]) -> None:
        if outcome.degraded:
            if not self.offline:
                self.notify(WARNING, OFFLINE_MESSAGE)
            self.offline = True
        else:
            self.offline = False

    def _replace(self, expenses: List[Expense]) -> None:
        self.expenses = expenses
        self.repository.mirror(expenses)

    # -- operations ------------------------------------------------------

    def load(self) -> List[Expense]:
        outcome = self.repository.load()
        self._track_outcome(outcome)
        self.expenses = list(outcome.value or [])
        self.is_loading = False
        logger.info("Loaded %d expenses (%s)", len(self.expenses), outcome.status)
        return self.expenses

    def add(self, fields: Mapping[str, Any]) -> Optional[Expense]:
        """Add an expense built from id-less ``fields``.

        Returns the stored record, or ``None`` when ``fields`` is invalid.
        """
        try:
            local_copy = Expense.from_dict({**fields, "id": generate_id()})
        except InvalidExpenseError as exc:
            self.notify(ERROR, f"Failed to add expense: {exc}")
            return None

        outcome = self.repository.add(fields)
        self._track_outcome(outcome)
        expense = outcome.value if outcome.ok and outcome.value is not None else local_copy
        self._replace(self.expenses + [expense])
        self.notify(SUCCESS, "Expense added successfully")
        return expense

    def delete(self, expense_id: str) -> bool:
        """Remove ``expense_id``; returns whether it was in the collection."""
        outcome = self.repository.delete(expense_id)
        self._track_outcome(outcome)
        remaining = [expense for expense in self.expenses if expense.id != expense_id]
        removed = len(remaining) != len(self.expenses)
        self._replace(remaining)
        if removed:
            self.notify(SUCCESS, "Expense deleted successfully")
        else:
            self.notify(INFO, "Expense was already removed")
        return removed

    def import_expenses(self, payload: Union[str, bytes, List[Any]]) -> ImportResult:
        """Merge an import payload into the collection.

        A malformed payload is rejected as a whole and leaves the
        collection untouched.
        """
        try:
            incoming = parse_import_payload(payload)
        except ImportFormatError as exc:
            self.notify(ERROR, f"Failed to import expenses: {exc}")
            return ImportResult("rejected", reason=str(exc))

        outcome = self.repository.import_many(incoming)
        self._track_outcome(outcome)

        merged, added = merge_imported(self.expenses, incoming)
        if added == 0:
            self.notify(INFO, "No new expenses to import")
            return ImportResult("nothing_new")
        self._replace(merged)
        self.notify(SUCCESS, f"Imported {added} expenses successfully")
        return ImportResult("imported", added=added)

    def export_payload(
        self,
        now: Optional[Union[date, datetime]] = None,
        announce: bool = True,
    ) -> Tuple[str, str]:
        """Return ``(filename, json_text)`` for a download of all expenses."""
        outcome = self.repository.export_all()
        self._track_outcome(outcome)
        expenses = outcome.value if outcome.value is not None else self.expenses
        payload = dump_expenses(expenses)
        if announce:
            self.notify(SUCCESS, "Expenses exported successfully")
        return export_filename(now), payload

    def export_to(self, directory: Path, now: Optional[Union[date, datetime]] = None) -> Optional[Path]:
        outcome = self.repository.export_all()
        self._track_outcome(outcome)
        expenses = outcome.value if outcome.value is not None else self.expenses
        try:
            target = write_export(expenses, directory, now)
        except OSError as exc:
            self.notify(ERROR, f"Failed to export expenses: {exc}")
            return None
        self.notify(SUCCESS, "Expenses exported successfully")
        return target

    # -- views -----------------------------------------------------------

    def filter(self, criteria: CriteriaLike = None) -> List[Expense]:
        return filter_expenses(self.expenses, criteria)

    def report(self, now: Union[date, datetime]) -> Dict[str, PeriodSummary]:
        return build_report(self.expenses, now)
