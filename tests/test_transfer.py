"""Tests for JSON import/export in expense_tracker.transfer."""

from __future__ import annotations

import json
from datetime import date, datetime

import pytest

from expense_tracker.errors import ImportFormatError
from expense_tracker.models import Expense
from expense_tracker.transfer import (
    dump_expenses,
    export_filename,
    merge_imported,
    parse_import_payload,
    read_import_file,
    write_export,
)


def _sample():
    return [
        Expense(id="1", amount=100.0, category="Food & Dining", description="lunch", date="2024-01-10"),
        Expense(id="2", amount=50.0, category="Shopping", description="shoes", date="2024-01-12"),
    ]


def test_export_filename_uses_iso_date() -> None:
    assert export_filename(date(2024, 3, 1)) == "expenses-2024-03-01.json"
    assert export_filename(datetime(2024, 3, 1, 23, 59)) == "expenses-2024-03-01.json"
    assert export_filename().startswith("expenses-")


def test_dump_expenses_is_json_array_of_records() -> None:
    data = json.loads(dump_expenses(_sample()))
    assert data[0] == {
        "id": "1",
        "amount": 100.0,
        "category": "Food & Dining",
        "description": "lunch",
        "date": "2024-01-10",
    }


def test_parse_accepts_text_bytes_and_lists() -> None:
    text = dump_expenses(_sample())
    assert parse_import_payload(text) == _sample()
    assert parse_import_payload(text.encode("utf-8")) == _sample()
    assert parse_import_payload(json.loads(text)) == _sample()


@pytest.mark.parametrize(
    "payload",
    [
        '{"id": "1", "amount": 5}',
        "not json at all",
        '[{"id": "1", "amount": 5, "category": "Other", "date": "2024-01-01"}]',
        '[{"id": "1", "amount": "five", "category": "Other", "description": "", "date": "2024-01-01"}]',
        "[1, 2, 3]",
    ],
)
def test_parse_rejects_malformed_payloads(payload) -> None:
    with pytest.raises(ImportFormatError):
        parse_import_payload(payload)


def test_one_bad_record_rejects_the_batch() -> None:
    records = [expense.to_dict() for expense in _sample()]
    del records[1]["date"]
    with pytest.raises(ImportFormatError, match="Record 1"):
        parse_import_payload(records)


def test_merge_skips_known_and_repeated_ids() -> None:
    existing = _sample()[:1]
    incoming = _sample() + [_sample()[1]]
    merged, added = merge_imported(existing, incoming)
    assert added == 1
    assert [e.id for e in merged] == ["1", "2"]
    assert [e.id for e in existing] == ["1"]


def test_round_trip_through_file(tmp_path) -> None:
    target = write_export(_sample(), tmp_path / "exports", date(2024, 5, 6))
    assert target.name == "expenses-2024-05-06.json"

    imported = read_import_file(target)
    merged, added = merge_imported([], imported)
    assert {e.id for e in merged} == {"1", "2"}
    assert added == 2

    _, added_again = merge_imported(merged, read_import_file(target))
    assert added_again == 0


def test_read_missing_file(tmp_path) -> None:
    with pytest.raises(ImportFormatError):
        read_import_file(tmp_path / "missing.json")


def test_blank_category_survives_export_and_import() -> None:
    blank = Expense(id="9", amount=5.0, category="", description="", date="2024-01-10")
    [restored] = parse_import_payload(dump_expenses([blank]))
    assert restored.category == ""
    assert restored == blank
