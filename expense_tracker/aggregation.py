"""Time windows, groupings and totals over a collection of expenses.

These are pure functions: each takes a sequence of
:class:`~expense_tracker.models.Expense` records and returns a new list,
mapping or number without touching its input.  The reference instant for
the time windows is always passed in by the caller so reports can be
reproduced for any day.

Records whose date or amount cannot be read are left out of the affected
computation and reported through the module logger; one bad record never
stops the rest of the collection from being processed.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Union

try:  # Allow both package and script execution contexts
    from .models import FALLBACK_CATEGORY, Expense, coerce_amount, parse_expense_date
except ImportError:  # pragma: no cover - fallback for direct execution
    from models import FALLBACK_CATEGORY, Expense, coerce_amount, parse_expense_date

logger = logging.getLogger(__name__)

Instant = Union[date, datetime]

WEEKLY_WINDOW_DAYS = 7
MONTHLY_WINDOW_DAYS = 30


# ---------------------------------------------------------------------------
# Record access
# ---------------------------------------------------------------------------


def expense_date(expense: Expense) -> Optional[date]:
    """Calendar date of ``expense``, or ``None`` (logged) when malformed."""
    parsed = parse_expense_date(expense.date)
    if parsed is None:
        logger.warning("Expense %s has an unreadable date %r; skipped", expense.id, expense.date)
    return parsed


def expense_amount(expense: Expense) -> Optional[float]:
    """Numeric amount of ``expense``, or ``None`` (logged) when not a number."""
    amount = coerce_amount(expense.amount)
    if amount is None:
        logger.warning("Expense %s has a non-numeric amount %r; skipped", expense.id, expense.amount)
    return amount


def _reference_date(now: Instant) -> date:
    return now.date() if isinstance(now, datetime) else now


# ---------------------------------------------------------------------------
# Time windows
# ---------------------------------------------------------------------------


def daily_subset(expenses: Sequence[Expense], now: Instant) -> List[Expense]:
    """Expenses dated on the same calendar day as ``now``."""
    today = _reference_date(now)
    return [expense for expense in expenses if expense_date(expense) == today]


def rolling_subset(expenses: Sequence[Expense], now: Instant, days: int) -> List[Expense]:
    """Expenses dated strictly after ``now`` minus ``days`` calendar days.

    The lower boundary is exclusive: with ``days=7`` an expense from exactly
    seven days ago is left out while one from six days ago is kept.  There
    is no upper bound, so future-dated expenses are included.
    """
    cutoff = _reference_date(now) - timedelta(days=days)
    selected: List[Expense] = []
    for expense in expenses:
        when = expense_date(expense)
        if when is not None and when > cutoff:
            selected.append(expense)
    return selected


def weekly_subset(expenses: Sequence[Expense], now: Instant) -> List[Expense]:
    """Expenses from the rolling seven-day window ending at ``now``."""
    return rolling_subset(expenses, now, WEEKLY_WINDOW_DAYS)


def monthly_subset(expenses: Sequence[Expense], now: Instant) -> List[Expense]:
    """Expenses from the rolling thirty-day window ending at ``now``."""
    return rolling_subset(expenses, now, MONTHLY_WINDOW_DAYS)


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def group_by_date(expenses: Sequence[Expense]) -> Dict[str, List[Expense]]:
    """Bucket expenses by their ``YYYY-MM-DD`` date, keeping input order."""
    groups: Dict[str, List[Expense]] = {}
    for expense in expenses:
        when = expense_date(expense)
        if when is None:
            continue
        groups.setdefault(when.isoformat(), []).append(expense)
    return groups


def group_by_category(expenses: Sequence[Expense]) -> Dict[str, float]:
    """Sum amounts per category; a blank category counts as ``"Other"``."""
    grouped: Dict[str, float] = {}
    for expense in expenses:
        amount = expense_amount(expense)
        if amount is None:
            continue
        category = expense.category or FALLBACK_CATEGORY
        if category not in grouped:
            grouped[category] = 0.0
        grouped[category] += amount
    return grouped


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def calculate_total(expenses: Sequence[Expense]) -> float:
    total = 0.0
    for expense in expenses:
        amount = expense_amount(expense)
        if amount is not None:
            total += amount
    return total
