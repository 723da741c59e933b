"""Tests for the remote store, the local cache and the two-tier repository."""

from __future__ import annotations

import json

import pytest

from expense_tracker.db import SqliteExpenseStore
from expense_tracker.errors import RemoteStoreError
from expense_tracker.local_cache import JsonFileCache, MemoryCache
from expense_tracker.models import Expense
from expense_tracker.persistence import FAILED, FALLBACK, REMOTE, ExpenseRepository


class BrokenStore:
    """Remote store stand-in that is always unreachable."""

    def fetch_all(self):
        raise RemoteStoreError("connection refused")

    def insert(self, fields):
        raise RemoteStoreError("connection refused")

    def delete(self, expense_id):
        raise RemoteStoreError("connection refused")

    def insert_many(self, expenses):
        raise RemoteStoreError("connection refused")


def _fields(amount=12.5, category="Travel", description="bus", when="2024-01-10"):
    return {"amount": amount, "category": category, "description": description, "date": when}


def _sample():
    return [
        Expense(id="1", amount=100.0, category="Food & Dining", description="lunch", date="2024-01-10"),
        Expense(id="2", amount=50.0, category="Shopping", description="shoes", date="2024-01-12"),
    ]


# ---------------------------------------------------------------------------
# SQLite store
# ---------------------------------------------------------------------------


def test_sqlite_store_insert_assigns_id(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "expenses.db")
    created = store.insert(_fields())
    assert created.id
    assert created.amount == 12.5
    assert store.fetch_all() == [created]


def test_sqlite_store_delete(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "expenses.db")
    created = store.insert(_fields())
    assert store.delete(created.id) is True
    assert store.delete(created.id) is False
    assert store.fetch_all() == []


def test_sqlite_store_insert_many_skips_duplicates(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "expenses.db")
    assert store.insert_many(_sample()) == 2
    assert store.insert_many(_sample()) == 0
    assert [e.id for e in store.fetch_all()] == ["1", "2"]
    assert store.summarise() == {"count": 2, "first_date": "2024-01-10", "last_date": "2024-01-12"}


def test_sqlite_store_summarise_creates_schema(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "fresh.db")
    assert store.summarise() == {"count": 0, "first_date": None, "last_date": None}


def test_sqlite_store_preserves_blank_text(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "expenses.db")
    store.insert(_fields(category="", description=""))
    [expense] = store.fetch_all()
    assert expense.category == ""
    assert expense.description == ""


# ---------------------------------------------------------------------------
# Local caches
# ---------------------------------------------------------------------------


def test_json_file_cache_round_trip(tmp_path) -> None:
    path = tmp_path / "cache" / "local.json"
    cache = JsonFileCache(path)
    cache.open()
    assert cache.get("expenses") is None
    cache.set("expenses", [{"id": "1"}])
    cache.close()

    assert json.loads(path.read_text(encoding="utf-8")) == {"expenses": [{"id": "1"}]}
    reopened = JsonFileCache(path)
    reopened.open()
    assert reopened.get("expenses") == [{"id": "1"}]


def test_json_file_cache_ignores_corrupt_file(tmp_path) -> None:
    path = tmp_path / "local.json"
    path.write_text("{not json", encoding="utf-8")
    cache = JsonFileCache(path)
    cache.open()
    assert cache.get("expenses") is None


def test_memory_cache_lifecycle() -> None:
    cache = MemoryCache()
    cache.open()
    assert cache.is_open
    cache.set("expenses", [])
    assert cache.get("expenses") == []
    cache.close()
    assert not cache.is_open


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


def test_load_from_remote_mirrors_into_cache(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "expenses.db")
    store.insert_many(_sample())
    cache = MemoryCache()
    repo = ExpenseRepository(store, cache)

    outcome = repo.load()
    assert outcome.status == REMOTE
    assert outcome.value == _sample()
    assert [item["id"] for item in cache.get("expenses")] == ["1", "2"]


def test_load_falls_back_to_cache() -> None:
    cache = MemoryCache({"expenses": [e.to_dict() for e in _sample()]})
    outcome = ExpenseRepository(BrokenStore(), cache).load()
    assert outcome.status == FALLBACK
    assert outcome.value == _sample()
    assert "connection refused" in outcome.reason


def test_load_with_empty_cache_returns_empty_list() -> None:
    outcome = ExpenseRepository(BrokenStore(), MemoryCache()).load()
    assert outcome.status == FALLBACK
    assert outcome.value == []


def test_load_ignores_non_list_cache_entry() -> None:
    outcome = ExpenseRepository(None, MemoryCache({"expenses": {"id": "1"}})).load()
    assert outcome.value == []


def test_failed_writes_report_failure() -> None:
    repo = ExpenseRepository(BrokenStore(), MemoryCache())
    assert repo.add(_fields()).status == FAILED
    assert repo.delete("1").status == FAILED
    outcome = repo.import_many(_sample())
    assert outcome.status == FAILED
    assert outcome.value is None


def test_offline_repository_never_touches_remote() -> None:
    repo = ExpenseRepository(None, MemoryCache())
    assert repo.add(_fields()).reason == "remote store not configured"


def test_export_all_prefers_remote_then_cache(tmp_path) -> None:
    store = SqliteExpenseStore(tmp_path / "expenses.db")
    store.insert_many(_sample()[:1])
    assert ExpenseRepository(store, MemoryCache()).export_all().value == _sample()[:1]

    cache = MemoryCache({"expenses": [e.to_dict() for e in _sample()]})
    fallback = ExpenseRepository(BrokenStore(), cache).export_all()
    assert fallback.status == FALLBACK
    assert fallback.value == _sample()

    assert ExpenseRepository(BrokenStore(), MemoryCache()).export_all().status == FAILED


def test_import_export_round_trip(tmp_path) -> None:
    source = SqliteExpenseStore(tmp_path / "source.db")
    source.insert_many(_sample())
    exported = ExpenseRepository(source, MemoryCache()).export_all().value

    target = ExpenseRepository(SqliteExpenseStore(tmp_path / "target.db"), MemoryCache())
    assert target.import_many(exported).value == 2
    assert {e.id for e in target.load().value} == {"1", "2"}
    assert target.import_many(exported).value == 0


@pytest.mark.parametrize("method", ["fetch_all", "clear"])
def test_unopenable_database_raises_remote_error(tmp_path, method) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    store = SqliteExpenseStore(blocker / "expenses.db")
    with pytest.raises(RemoteStoreError):
        getattr(store, method)()
