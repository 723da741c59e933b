"""JSON import and export of expense collections.

The file format is a UTF-8 JSON array of expense objects with the keys
``id``, ``amount``, ``category``, ``description`` and ``date``.  Imports are
all-or-nothing: if the payload is not an array, or any record in it is
malformed, the whole batch is rejected.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

from .errors import ImportFormatError, InvalidExpenseError
from .models import Expense

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "expenses"


def export_filename(now: Optional[Union[date, datetime]] = None) -> str:
    """Download name for an export made at ``now`` (UTC today by default)."""
    if now is None:
        now = datetime.now(timezone.utc)
    day = now.date() if isinstance(now, datetime) else now
    return f"{EXPORT_PREFIX}-{day.isoformat()}.json"


def dump_expenses(expenses: Sequence[Expense]) -> str:
    return json.dumps([expense.to_dict() for expense in expenses], indent=2, ensure_ascii=False)


def write_export(
    expenses: Sequence[Expense],
    directory: Path,
    now: Optional[Union[date, datetime]] = None,
) -> Path:
    """Write ``expenses`` to ``directory`` and return the file path."""
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / export_filename(now)
    with target.open("w", encoding="utf-8") as handle:
        handle.write(dump_expenses(expenses))
    logger.info("Exported %d expenses to %s", len(expenses), target)
    return target


def parse_import_payload(payload: Union[str, bytes, List[Any]]) -> List[Expense]:
    """Validate an import payload and return its records.

    ``payload`` may be raw JSON text/bytes or an already decoded list.
    Raises :class:`ImportFormatError` when the payload is rejected.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ImportFormatError("Import file is not UTF-8 text") from exc
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ImportFormatError(f"Import file is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, list):
        raise ImportFormatError("Invalid data format: expected a JSON array of expenses")

    records: List[Expense] = []
    for position, item in enumerate(payload):
        try:
            records.append(Expense.from_dict(item))
        except InvalidExpenseError as exc:
            raise ImportFormatError(f"Record {position} is invalid: {exc}") from exc
    return records


def read_import_file(path: Path) -> List[Expense]:
    try:
        with path.open("rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise ImportFormatError(f"Cannot read import file {path}: {exc}") from exc
    return parse_import_payload(raw)


def merge_imported(existing: Sequence[Expense], incoming: Sequence[Expense]) -> Tuple[List[Expense], int]:
    """Append records from ``incoming`` whose id is not already known.

    Returns the merged list and the number of records added.  Repeated ids
    inside ``incoming`` are only added once.
    """
    known = {expense.id for expense in existing}
    added: List[Expense] = []
    for expense in incoming:
        if expense.id in known:
            continue
        known.add(expense.id)
        added.append(expense)
    return list(existing) + added, len(added)
