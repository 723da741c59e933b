"""Tests for report summaries and the chart builders."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from expense_tracker import reports
from expense_tracker import visualization as viz
from expense_tracker.models import Expense

NOW = datetime(2024, 1, 15, 9, 0)


def _sample():
    return [
        Expense(id="1", amount=40.0, category="Food & Dining", description="dinner", date="2024-01-15"),
        Expense(id="2", amount=15.0, category="Transportation", description="taxi", date="2024-01-15"),
        Expense(id="3", amount=60.0, category="Shopping", description="jacket", date="2024-01-12"),
        Expense(id="4", amount=5.0, category="", description="tip", date="2024-01-10"),
        Expense(id="5", amount=80.0, category="Housing", description="repairs", date="2024-01-01"),
        Expense(id="6", amount=25.0, category="Food & Dining", description="groceries", date="2023-12-01"),
    ]


def test_build_report_totals_per_period() -> None:
    report = reports.build_report(_sample(), NOW)
    assert list(report) == ["daily", "weekly", "monthly"]
    assert report["daily"].total == 55
    assert report["weekly"].total == 120
    assert report["monthly"].total == 200
    assert report["monthly"].title == "Last 30 Days"


def test_top_categories_are_ranked_and_limited() -> None:
    summary = reports.summarise_period(_sample(), NOW, "monthly")
    assert summary.top_categories == [("Housing", 80.0), ("Shopping", 60.0), ("Food & Dining", 40.0)]


def test_empty_period_summary() -> None:
    summary = reports.summarise_period([], NOW, "daily")
    assert summary.is_empty
    assert summary.total == 0
    assert summary.top_categories == []


def test_unknown_period_raises() -> None:
    with pytest.raises(ValueError):
        reports.summarise_period(_sample(), NOW, "yearly")


def test_daily_spending_series_fills_missing_days() -> None:
    series = reports.daily_spending_series(_sample(), NOW)
    assert len(series) == 8
    assert series["Date"].iloc[0] == "2024-01-08"
    assert series["Date"].iloc[-1] == "2024-01-15"
    assert series["Label"].iloc[-1] == "Jan 15"
    amounts = dict(zip(series["Date"], series["Amount"]))
    assert amounts["2024-01-15"] == 55
    assert amounts["2024-01-12"] == 60
    assert amounts["2024-01-09"] == 0


def test_category_breakdown_series() -> None:
    series = reports.category_breakdown(_sample())
    assert series.index.name == "Category"
    assert series["Other"] == 5
    assert series["Food & Dining"] == 65
    assert series.sum() == sum(e.amount for e in _sample())


def test_expenses_to_frame() -> None:
    frame = reports.expenses_to_frame(_sample() + [
        Expense(id="bad", amount=1.0, category="Other", description="", date="??"),
    ])
    assert list(frame.columns) == reports.FRAME_COLUMNS
    assert frame.loc[0, "Date"] == pd.Timestamp(date(2024, 1, 15))
    assert pd.isna(frame.loc[len(frame) - 1, "Date"])
    assert reports.expenses_to_frame([]).empty


def test_chart_builders_handle_empty_input() -> None:
    pie = viz.create_category_pie_chart(pd.Series(dtype=float))
    bar = viz.create_daily_spending_chart(pd.DataFrame())
    assert pie.layout.title.text == "No data to display"
    assert bar.layout.title.text == "No data to display"


def test_chart_builders_render_data() -> None:
    pie = viz.create_category_pie_chart(reports.category_breakdown(_sample()))
    bar = viz.create_daily_spending_chart(reports.daily_spending_series(_sample(), NOW))
    assert pie.layout.title.text == "Spending by Category"
    assert len(bar.data[0].x) == 8
