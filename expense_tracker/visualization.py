"""Plotly chart builders for the reports tab.

Each function takes the pandas objects produced by
:mod:`expense_tracker.reports` and returns a
``plotly.graph_objects.Figure`` that Streamlit can render via
``st.plotly_chart``.  Empty inputs produce a placeholder figure rather
than an error.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

CHART_COLORS = [
    "#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8",
    "#82CA9D", "#FFC658", "#8DD1E1", "#A4DE6C", "#D0ED57", "#F5E050",
]


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_category_pie_chart(series: pd.Series, title: Optional[str] = None) -> go.Figure:
    """Generate a pie chart of spending by category.

    Parameters
    ----------
    series : pandas.Series
        Series indexed by category with summed amounts, as returned by
        :func:`expense_tracker.reports.category_breakdown`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart.
    """
    if series.empty:
        return _empty_figure()
    df = series.reset_index()
    df.columns = ["Category", "Amount"]
    fig = px.pie(df, names="Category", values="Amount", color_discrete_sequence=CHART_COLORS)
    fig.update_layout(title=title or "Spending by Category")
    return fig


def create_daily_spending_chart(series: pd.DataFrame, title: Optional[str] = None) -> go.Figure:
    """Generate a bar chart of daily totals.

    Parameters
    ----------
    series : pandas.DataFrame
        Frame with ``Label`` and ``Amount`` columns, as returned by
        :func:`expense_tracker.reports.daily_spending_series`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bar chart with one bar per day.
    """
    if series.empty or "Amount" not in series.columns:
        return _empty_figure()
    fig = px.bar(series, x="Label", y="Amount", color_discrete_sequence=CHART_COLORS[:1])
    fig.update_layout(
        title=title or "Daily Spending (Last 7 Days)",
        xaxis_title="Day",
        yaxis_title="Amount",
    )
    return fig
