"""Two-tier persistence: remote store first, local cache second.

Every operation returns an :class:`Outcome` instead of raising.  The
outcome says where the value came from:

* ``remote`` - the remote store answered.
* ``fallback`` - the remote store failed (or is not configured) and the
  value was served from the local cache.
* ``failed`` - nothing could serve the request; ``reason`` explains why and
  the caller is expected to apply its own local-only path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, Sequence, TypeVar

from .config import STORAGE_KEY
from .db import RemoteStore
from .errors import InvalidExpenseError, RemoteStoreError
from .local_cache import LocalCache
from .models import Expense

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMOTE = "remote"
FALLBACK = "fallback"
FAILED = "failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    status: str
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def remote(cls, value: T) -> "Outcome[T]":
        return cls(REMOTE, value)

    @classmethod
    def fallback(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(FALLBACK, value, reason)

    @classmethod
    def failed(cls, reason: str) -> "Outcome[T]":
        return cls(FAILED, None, reason)

    @property
    def ok(self) -> bool:
        return self.status == REMOTE

    @property
    def degraded(self) -> bool:
        return self.status != REMOTE


class ExpenseRepository:
    """Load and mutate expenses against a remote store with a cache mirror.

    ``remote`` may be ``None`` for a purely local session; every call then
    behaves as if the remote store were unreachable.
    """

    def __init__(self, remote: Optional[RemoteStore], cache: LocalCache, storage_key: str = STORAGE_KEY) -> None:
        self.remote = remote
        self.cache = cache
        self.storage_key = storage_key

    # -- lifecycle -------------------------------------------------------

    def open(self) -> None:
        self.cache.open()

    def close(self) -> None:
        self.cache.close()

    # -- local cache -----------------------------------------------------

    def read_cache(self) -> Optional[List[Expense]]:
        """Cached collection, or ``None`` when nothing usable is cached."""
        try:
            raw = self.cache.get(self.storage_key)
        except OSError as exc:
            logger.error("Failed to read local cache: %s", exc)
            return None
        if raw is None:
            return None
        if not isinstance(raw, list):
            logger.warning("Local cache entry %r is not a list; ignored", self.storage_key)
            return None
        expenses: List[Expense] = []
        for item in raw:
            try:
                expenses.append(Expense.from_dict(item))
            except InvalidExpenseError as exc:
                logger.warning("Skipping cached expense: %s", exc)
        return expenses

    def mirror(self, expenses: Sequence[Expense]) -> None:
        """Write ``expenses`` to the local cache; failures are only logged."""
        try:
            self.cache.set(self.storage_key, [expense.to_dict() for expense in expenses])
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save expenses to local cache: %s", exc)

    # -- operations ------------------------------------------------------

    def load(self) -> Outcome[List[Expense]]:
        reason = "remote store not configured"
        if self.remote is not None:
            try:
                expenses = self.remote.fetch_all()
            except RemoteStoreError as exc:
                reason = str(exc)
                logger.warning("Loading from remote store failed, using local cache: %s", exc)
            else:
                self.mirror(expenses)
                return Outcome.remote(expenses)
        cached = self.read_cache()
        return Outcome.fallback(cached if cached is not None else [], reason)

    def add(self, fields: Mapping[str, Any]) -> Outcome[Expense]:
        if self.remote is None:
            return Outcome.failed("remote store not configured")
        try:
            return Outcome.remote(self.remote.insert(fields))
        except (RemoteStoreError, InvalidExpenseError) as exc:
            logger.warning("Adding expense remotely failed: %s", exc)
            return Outcome.failed(str(exc))

    def delete(self, expense_id: str) -> Outcome[bool]:
        if self.remote is None:
            return Outcome.failed("remote store not configured")
        try:
            return Outcome.remote(self.remote.delete(expense_id))
        except RemoteStoreError as exc:
            logger.warning("Deleting expense %s remotely failed: %s", expense_id, exc)
            return Outcome.failed(str(exc))

    def import_many(self, expenses: Sequence[Expense]) -> Outcome[int]:
        if self.remote is None:
            return Outcome.failed("remote store not configured")
        try:
            return Outcome.remote(self.remote.insert_many(expenses))
        except RemoteStoreError as exc:
            logger.warning("Importing %d expenses remotely failed: %s", len(expenses), exc)
            return Outcome.failed(str(exc))

    def export_all(self) -> Outcome[List[Expense]]:
        reason = "remote store not configured"
        if self.remote is not None:
            try:
                return Outcome.remote(self.remote.fetch_all())
            except RemoteStoreError as exc:
                reason = str(exc)
                logger.warning("Exporting from remote store failed, using local cache: %s", exc)
        cached = self.read_cache()
        if cached is None:
            return Outcome.failed(reason)
        return Outcome.fallback(cached, reason)
