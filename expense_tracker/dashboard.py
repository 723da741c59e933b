"""Streamlit app for the expense tracker.

The page has three tabs: a form to add an expense, the filterable list,
and the reports with charts.  Import and export live in the sidebar.  All
state lives in a single :class:`~expense_tracker.state.ExpenseBook` kept
in ``st.session_state``; the widgets only read from it and call its
methods.

To run the dashboard from the command line::

    streamlit run expense_tracker/dashboard.py
"""

from __future__ import annotations

import os
import sys
from datetime import date, datetime
from typing import Any, Optional

import streamlit as st

if __package__:
    from . import config
    from . import reports
    from . import visualization as viz
    from .db import SqliteExpenseStore
    from .filtering import available_categories, describe_criteria
    from .formatting import format_currency, format_date_for_display
    from .local_cache import JsonFileCache
    from .models import EXPENSE_CATEGORIES, FilterCriteria, new_expense_fields
    from .errors import InvalidExpenseError, RemoteStoreError
    from .persistence import ExpenseRepository
    from .state import ERROR, INFO, SUCCESS, WARNING, ExpenseBook
else:
    # ``streamlit run expense_tracker/dashboard.py`` executes this file as a
    # script, so make the project root importable first.
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from expense_tracker import config  # type: ignore
    from expense_tracker import reports  # type: ignore
    from expense_tracker import visualization as viz  # type: ignore
    from expense_tracker.db import SqliteExpenseStore  # type: ignore
    from expense_tracker.filtering import available_categories, describe_criteria  # type: ignore
    from expense_tracker.formatting import format_currency, format_date_for_display  # type: ignore
    from expense_tracker.local_cache import JsonFileCache  # type: ignore
    from expense_tracker.models import EXPENSE_CATEGORIES, FilterCriteria, new_expense_fields  # type: ignore
    from expense_tracker.errors import InvalidExpenseError, RemoteStoreError  # type: ignore
    from expense_tracker.persistence import ExpenseRepository  # type: ignore
    from expense_tracker.state import ERROR, INFO, SUCCESS, WARNING, ExpenseBook  # type: ignore

BOOK_KEY = "expense_book"
ALL_CATEGORIES = "All categories"


def get_book() -> ExpenseBook:
    """Return the session's expense book, opening it on first use."""
    book = st.session_state.get(BOOK_KEY)
    if book is None:
        config.configure_logging()
        config.ensure_data_directories()
        repository = ExpenseRepository(
            SqliteExpenseStore(config.DB_PATH),
            JsonFileCache(config.CACHE_PATH),
        )
        book = ExpenseBook(repository).open()
        st.session_state[BOOK_KEY] = book
    return book


def show_notifications(book: ExpenseBook) -> None:
    """Render queued notifications with the matching Streamlit element."""
    renderers = {
        SUCCESS: st.success,
        INFO: st.info,
        WARNING: st.warning,
        ERROR: st.error,
    }
    for note in book.drain_notifications():
        renderers.get(note.level, st.info)(note.message)


def _blank_to_none(value: Any) -> Optional[Any]:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def criteria_from_inputs(
    category: Optional[str],
    start_date: Optional[date],
    end_date: Optional[date],
    min_amount: Optional[str],
    max_amount: Optional[str],
    search_term: Optional[str],
) -> FilterCriteria:
    """Translate widget values into filter criteria.

    Blank inputs and the "All categories" choice leave the criterion unset.
    Amount inputs that are not numbers raise ``ValueError``.
    """
    return FilterCriteria(
        category=None if category in (None, "", ALL_CATEGORIES) else category,
        start_date=start_date,
        end_date=end_date,
        min_amount=_blank_to_none(min_amount),
        max_amount=_blank_to_none(max_amount),
        search_term=_blank_to_none(search_term),
    )


# ---------------------------------------------------------------------------
# Tabs
# ---------------------------------------------------------------------------


def render_add_tab(book: ExpenseBook) -> None:
    with st.form("add_expense", clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=1000.0, format="%.0f")
        category = st.selectbox("Category", options=EXPENSE_CATEGORIES)
        description = st.text_input("Description")
        when = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Add Expense")
    if submitted:
        try:
            fields = new_expense_fields(amount, category, description, when)
        except InvalidExpenseError as exc:
            st.error(f"Cannot add expense: {exc}")
            return
        book.add(fields)


def render_list_tab(book: ExpenseBook) -> None:
    search_term = st.text_input("Search descriptions")
    with st.expander("Filters"):
        col1, col2 = st.columns(2)
        category = col1.selectbox(
            "Category", options=[ALL_CATEGORIES] + available_categories(book.expenses)
        )
        min_amount = col1.text_input("Min amount")
        max_amount = col1.text_input("Max amount")
        start_date = col2.date_input("Start date", value=None)
        end_date = col2.date_input("End date", value=None)

    try:
        criteria = criteria_from_inputs(category, start_date, end_date, min_amount, max_amount, search_term)
    except ValueError as exc:
        st.error(str(exc))
        return

    visible = book.filter(criteria)
    noun = "expense" if len(visible) == 1 else "expenses"
    st.caption(f"{len(visible)} {noun} found - {describe_criteria(criteria)}")

    if not visible:
        if book.expenses:
            st.info("Try adjusting your filters or search term.")
        else:
            st.info("No expenses yet. Add one from the first tab.")
        return

    with st.expander("Table view"):
        st.dataframe(reports.expenses_to_frame(visible), hide_index=True, use_container_width=True)

    for expense in visible:
        cols = st.columns([3, 2, 2, 1])
        cols[0].markdown(f"**{expense.description or expense.category or 'Expense'}**  \n{expense.category}")
        cols[1].write(format_date_for_display(expense.date))
        cols[2].write(format_currency(expense.amount))
        if cols[3].button("Delete", key=f"delete-{expense.id}"):
            book.delete(expense.id)
            st.rerun()


def render_reports_tab(book: ExpenseBook, now: datetime) -> None:
    summaries = reports.build_report(book.expenses, now)
    period_tabs = st.tabs([summary.title for summary in summaries.values()])
    for tab, summary in zip(period_tabs, summaries.values()):
        with tab:
            st.metric(summary.title, format_currency(summary.total))
            st.markdown("**Top Categories**")
            if summary.top_categories:
                for name, amount in summary.top_categories:
                    st.write(f"{name}: {format_currency(amount)}")
            else:
                st.caption("No expenses recorded")

    if not book.expenses:
        st.info("Add some expenses to see charts and visualizations.")
        return
    col1, col2 = st.columns(2)
    col1.plotly_chart(
        viz.create_category_pie_chart(reports.category_breakdown(book.expenses)),
        use_container_width=True,
    )
    col2.plotly_chart(
        viz.create_daily_spending_chart(reports.daily_spending_series(book.expenses, now)),
        use_container_width=True,
    )


def render_sidebar(book: ExpenseBook) -> None:
    st.sidebar.header("Data")
    if book.offline:
        st.sidebar.warning("Offline mode")
    st.sidebar.caption(f"{len(book.expenses)} expenses loaded")
    store = book.repository.remote
    if isinstance(store, SqliteExpenseStore) and not book.offline:
        try:
            stats = store.summarise()
        except RemoteStoreError as exc:
            st.sidebar.caption(f"Database unavailable: {exc}")
        else:
            if stats["count"]:
                st.sidebar.caption(f"Stored: {stats['count']} ({stats['first_date']} to {stats['last_date']})")

    uploaded = st.sidebar.file_uploader("Import expenses (JSON)", type=["json"])
    if uploaded is not None and st.sidebar.button("Import"):
        book.import_expenses(uploaded.getvalue())

    filename, payload = book.export_payload(announce=False)
    st.sidebar.download_button("Export expenses", data=payload, file_name=filename, mime="application/json")


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Expense Tracker", layout="wide")
    st.title("Expense Tracker")

    book = get_book()
    render_sidebar(book)

    add_tab, list_tab, reports_tab = st.tabs(["Add Expense", "Expenses", "Reports"])
    with add_tab:
        render_add_tab(book)
    with list_tab:
        render_list_tab(book)
    with reports_tab:
        render_reports_tab(book, datetime.now())

    show_notifications(book)


if __name__ == "__main__":  # pragma: no cover
    main()
