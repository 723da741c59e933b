"""Report figures built from the aggregation functions.

Summaries are plain dataclasses; the chart inputs are pandas objects so
they can be handed straight to :mod:`expense_tracker.visualization` or
``st.dataframe``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Sequence, Tuple, Union

import pandas as pd

from .aggregation import (
    calculate_total,
    daily_subset,
    expense_date,
    group_by_category,
    group_by_date,
    monthly_subset,
    weekly_subset,
)
from .formatting import SHORT_DATE_PATTERN, format_date_for_display
from .models import Expense

Instant = Union[date, datetime]

FRAME_COLUMNS = ["id", "Date", "Category", "Description", "Amount"]

# key -> (card title, window function)
PERIODS: Dict[str, Tuple[str, Callable[[Sequence[Expense], Instant], List[Expense]]]] = {
    "daily": ("Today's Spending", daily_subset),
    "weekly": ("Last 7 Days", weekly_subset),
    "monthly": ("Last 30 Days", monthly_subset),
}

TOP_CATEGORY_LIMIT = 3


@dataclass(frozen=True)
class PeriodSummary:
    key: str
    title: str
    total: float
    top_categories: List[Tuple[str, float]] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.expenses


def top_categories(expenses: Sequence[Expense], limit: int = TOP_CATEGORY_LIMIT) -> List[Tuple[str, float]]:
    """Largest categories by amount, highest first."""
    ranked = sorted(group_by_category(expenses).items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def summarise_period(expenses: Sequence[Expense], now: Instant, period: str) -> PeriodSummary:
    if period not in PERIODS:
        raise ValueError(f"Unknown report period '{period}'")
    title, window = PERIODS[period]
    subset = window(expenses, now)
    return PeriodSummary(
        key=period,
        title=title,
        total=calculate_total(subset),
        top_categories=top_categories(subset),
        expenses=subset,
    )


def build_report(expenses: Sequence[Expense], now: Instant) -> Dict[str, PeriodSummary]:
    """Daily, weekly and monthly summaries keyed by period name."""
    return {period: summarise_period(expenses, now, period) for period in PERIODS}


def daily_spending_series(expenses: Sequence[Expense], now: Instant, days: int = 7) -> pd.DataFrame:
    """Total spent on each calendar day from ``now - days`` through ``now``.

    Days without expenses are present with a zero amount, so the result
    always has ``days + 1`` rows in chronological order.
    """
    today = now.date() if isinstance(now, datetime) else now
    by_date = group_by_date(expenses)
    rows = []
    for offset in range(days, -1, -1):
        day = today - timedelta(days=offset)
        key = day.isoformat()
        rows.append(
            {
                "Date": key,
                "Label": format_date_for_display(day, pattern=SHORT_DATE_PATTERN),
                "Amount": calculate_total(by_date.get(key, [])),
            }
        )
    return pd.DataFrame(rows, columns=["Date", "Label", "Amount"])


def category_breakdown(expenses: Sequence[Expense]) -> pd.Series:
    """Per-category totals as a Series indexed by category."""
    grouped = group_by_category(expenses)
    series = pd.Series(grouped, dtype=float, name="Amount")
    series.index.name = "Category"
    return series


def expenses_to_frame(expenses: Sequence[Expense]) -> pd.DataFrame:
    """Tabular view of ``expenses`` in collection order.

    ``Date`` holds parsed dates (``NaT`` for unreadable ones) so the frame
    sorts and plots correctly.
    """
    if not expenses:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    rows = []
    for expense in expenses:
        when = expense_date(expense)
        rows.append(
            {
                "id": expense.id,
                "Date": pd.Timestamp(when) if when is not None else pd.NaT,
                "Category": expense.category,
                "Description": expense.description,
                "Amount": expense.amount,
            }
        )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)
