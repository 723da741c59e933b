"""Expense records, filter criteria and the category enumeration.

An :class:`Expense` is the only entity the tracker knows about.  Records
are immutable; collections are changed by building new lists.  The
helpers at the bottom of the module coerce loosely typed values coming
from JSON files or form widgets into the types the aggregation code
expects.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

import pandas as pd
from babel.numbers import NumberFormatError, parse_decimal

from . import config
from .errors import InvalidExpenseError

logger = logging.getLogger(__name__)

EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Shopping",
    "Housing",
    "Transportation",
    "Entertainment",
    "Healthcare",
    "Education",
    "Personal Care",
    "Travel",
    "Utilities",
    "Other",
]

FALLBACK_CATEGORY = "Other"

REQUIRED_FIELDS = ("id", "amount", "category", "description", "date")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expense:
    id: str
    amount: float
    category: str
    description: str
    date: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Expense":
        """Build an expense from a JSON object.

        Every field in ``REQUIRED_FIELDS`` must be present.  ``None`` is
        accepted for ``category`` and ``description`` and stored as an
        empty string.  The date text is kept verbatim; unparseable dates
        are dealt with by the aggregation functions.
        """
        if not isinstance(data, Mapping):
            raise InvalidExpenseError(f"Expected an object, got {type(data).__name__}")
        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise InvalidExpenseError(f"Record is missing required fields: {', '.join(missing)}")

        raw_id = data["id"]
        if raw_id is None or isinstance(raw_id, bool) or str(raw_id).strip() == "":
            raise InvalidExpenseError("Record has an empty id")

        amount = coerce_amount(data["amount"])
        if amount is None:
            raise InvalidExpenseError(f"Record {raw_id!r} has a non-numeric amount: {data['amount']!r}")

        raw_date = data["date"]
        if isinstance(raw_date, (date, datetime)):
            raw_date = to_iso_date(raw_date)
        if not isinstance(raw_date, str):
            raise InvalidExpenseError(f"Record {raw_id!r} has a non-text date: {raw_date!r}")

        return cls(
            id=str(raw_id),
            amount=amount,
            category=_text(data["category"]),
            description=_text(data["description"]),
            date=raw_date,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FilterCriteria:
    """Constraints applied by :func:`expense_tracker.filtering.filter_expenses`.

    Every field is optional.  ``None`` means the constraint is skipped,
    it never means "match nothing".  ``category`` and ``search_term`` are
    also skipped when empty.  Date bounds and amount bounds are inclusive.
    """

    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    search_term: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept ISO strings for the bounds so criteria can come straight from JSON.
        for name in ("start_date", "end_date"):
            value = getattr(self, name)
            if value is None or value == "":
                object.__setattr__(self, name, None)
                continue
            parsed = parse_expense_date(value)
            if parsed is None:
                raise ValueError(f"{name} is not a valid ISO date: {value!r}")
            object.__setattr__(self, name, parsed)
        for name in ("min_amount", "max_amount"):
            value = getattr(self, name)
            if value is None or value == "":
                object.__setattr__(self, name, None)
                continue
            # Typed text follows the display locale ("150.000" is 150000 in id_ID).
            amount = parse_amount_text(value) if isinstance(value, str) else coerce_amount(value)
            if amount is None:
                raise ValueError(f"{name} is not a number: {value!r}")
            object.__setattr__(self, name, amount)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "FilterCriteria":
        """Build criteria from a mapping with camelCase or snake_case keys."""
        if not data:
            return cls()
        aliases = {
            "category": "category",
            "startDate": "start_date",
            "start_date": "start_date",
            "endDate": "end_date",
            "end_date": "end_date",
            "minAmount": "min_amount",
            "min_amount": "min_amount",
            "maxAmount": "max_amount",
            "max_amount": "max_amount",
            "searchTerm": "search_term",
            "search_term": "search_term",
        }
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = aliases.get(key)
            if field_name is None:
                logger.warning("Ignoring unknown filter key %r", key)
                continue
            kwargs[field_name] = value
        return cls(**kwargs)

    def is_empty(self) -> bool:
        return all(
            value is None or value == ""
            for value in (
                self.category,
                self.start_date,
                self.end_date,
                self.min_amount,
                self.max_amount,
                self.search_term,
            )
        )


def new_expense_fields(amount: Any, category: str, description: str, when: Any) -> Dict[str, Any]:
    """Return the id-less payload for a freshly entered expense."""
    parsed_amount = coerce_amount(amount)
    if parsed_amount is None:
        raise InvalidExpenseError(f"Amount is not a number: {amount!r}")
    iso_date = to_iso_date(when)
    if iso_date is None:
        raise InvalidExpenseError(f"Date is not valid: {when!r}")
    return {
        "amount": parsed_amount,
        "category": _text(category),
        "description": _text(description),
        "date": iso_date,
    }


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def parse_expense_date(value: Any) -> Optional[date]:
    """Return the calendar date of ``value`` or ``None`` when it cannot be read.

    Strings must be ISO-8601.  A time-of-day or offset suffix is ignored:
    the calendar date written in the string is what counts.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    return _parse_date_text(value.strip())


@lru_cache(maxsize=4096)
def _parse_date_text(text: str) -> Optional[date]:
    # Plain YYYY-MM-DD skips pandas.
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    parsed = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def to_iso_date(value: Any) -> Optional[str]:
    parsed = parse_expense_date(value)
    return parsed.isoformat() if parsed is not None else None


def coerce_amount(value: Any) -> Optional[float]:
    """Convert ``value`` to a float, or ``None`` when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        number = pd.to_numeric(pd.Series([cleaned]), errors="coerce").iloc[0]
    else:
        return None
    if pd.isna(number) or math.isinf(number):
        return None
    return float(number)


def parse_amount_text(text: str, locale: Optional[str] = None) -> Optional[float]:
    """Read an amount typed the way the app displays it.

    Separators follow ``locale`` (``config.LOCALE`` by default), so in
    ``id_ID`` ``"150.000"`` is 150000 and ``"1,5"`` is 1.5.  Returns ``None``
    when the text is not a number.
    """
    cleaned = text.strip()
    if not cleaned:
        return None
    try:
        number = parse_decimal(cleaned, locale=locale or config.LOCALE)
    except NumberFormatError:
        return None
    if not number.is_finite():
        return None
    return float(number)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
