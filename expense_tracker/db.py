"""SQLite-backed remote store for expenses.

The store plays the role of the hosted backend: it assigns ids to new
records and is the source of truth whenever it can be reached.  All
``sqlite3`` failures are re-raised as :class:`RemoteStoreError` so the
persistence layer can fall back to the local cache.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Union

import pandas as pd

from .errors import InvalidExpenseError, RemoteStoreError
from .models import Expense

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    amount REAL NOT NULL,
    category TEXT,
    description TEXT,
    date TEXT NOT NULL,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_expense_date ON expenses (date);
CREATE INDEX IF NOT EXISTS ix_expense_category ON expenses (category);
"""

SELECT_SQL = "SELECT id, amount, category, description, date FROM expenses ORDER BY rowid ASC"

INSERT_SQL = (
    "INSERT OR IGNORE INTO expenses (id, amount, category, description, date, created_at) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)


class RemoteStore(Protocol):
    """Operations the persistence layer needs from a remote backend."""

    def fetch_all(self) -> List[Expense]: ...

    def insert(self, fields: Mapping[str, Any]) -> Expense: ...

    def delete(self, expense_id: str) -> bool: ...

    def insert_many(self, expenses: Sequence[Expense]) -> int: ...


class SqliteExpenseStore:
    """Remote store implementation on top of a SQLite database file."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)
        self._initialised = False

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (sqlite3.Error, OSError) as exc:
            raise RemoteStoreError(f"Cannot open expense database {self.db_path}: {exc}") from exc
        try:
            yield conn
        except (sqlite3.Error, pd.errors.DatabaseError) as exc:
            raise RemoteStoreError(f"Expense database error: {exc}") from exc
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        self._initialised = True

    def ensure_schema(self) -> None:
        """Create the tables on first use."""
        if not self._initialised:
            self.init_db()

    def fetch_all(self) -> List[Expense]:
        self.ensure_schema()
        with self.connect() as conn:
            df = pd.read_sql_query(SELECT_SQL, conn)
        expenses: List[Expense] = []
        for row in df.to_dict("records"):
            try:
                expenses.append(Expense.from_dict(row))
            except InvalidExpenseError as exc:
                logger.warning("Skipping unreadable stored expense: %s", exc)
        return expenses

    def insert(self, fields: Mapping[str, Any]) -> Expense:
        """Persist a new expense and return it with its assigned id."""
        self.ensure_schema()
        expense = Expense.from_dict({**fields, "id": uuid.uuid4().hex})
        with self.connect() as conn:
            conn.execute(INSERT_SQL, _row(expense))
            conn.commit()
        return expense

    def delete(self, expense_id: str) -> bool:
        self.ensure_schema()
        with self.connect() as conn:
            cursor = conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            conn.commit()
            return cursor.rowcount > 0

    def insert_many(self, expenses: Sequence[Expense]) -> int:
        """Insert records whose id is not stored yet; return how many were new."""
        self.ensure_schema()
        if not expenses:
            return 0
        with self.connect() as conn:
            before_changes = conn.total_changes
            conn.executemany(INSERT_SQL, [_row(expense) for expense in expenses])
            conn.commit()
            return conn.total_changes - before_changes

    def clear(self) -> None:
        self.ensure_schema()
        with self.connect() as conn:
            conn.execute("DELETE FROM expenses")
            conn.commit()

    def summarise(self) -> Dict[str, Any]:
        """Row count and date span of the stored expenses."""
        self.ensure_schema()
        with self.connect() as conn:
            row = conn.execute("SELECT COUNT(*), MIN(date), MAX(date) FROM expenses").fetchone()
        count, first, last = row if row else (0, None, None)
        return {"count": count or 0, "first_date": first, "last_date": last}


def _row(expense: Expense, created_at: Optional[str] = None) -> tuple:
    return (
        expense.id,
        expense.amount,
        expense.category,
        expense.description,
        expense.date,
        created_at or datetime.now(timezone.utc).isoformat(),
    )

