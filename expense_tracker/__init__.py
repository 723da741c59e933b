"""Top-level package for the Expense Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``aggregation`` - time windows, groupings and totals over expenses
* ``filtering`` - the filter/search evaluator behind the list view
* ``reports`` - report summaries and chart inputs
* ``dashboard`` - a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run expense_tracker/dashboard.py
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import filtering  # noqa: F401  # re-exported for convenience
from . import reports  # noqa: F401  # re-exported for convenience
from .models import EXPENSE_CATEGORIES, Expense, FilterCriteria  # noqa: F401

# Streamlit may not be installed in all environments (e.g. during unit
# testing), so the dashboard is imported only when available.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore

__version__ = "0.1.0"

__all__ = [
    "EXPENSE_CATEGORIES",
    "Expense",
    "FilterCriteria",
    "aggregation",
    "dashboard",
    "filtering",
    "reports",
]
