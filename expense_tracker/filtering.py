"""Filter and search evaluation for the expense list view."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from .models import EXPENSE_CATEGORIES, Expense, FilterCriteria, coerce_amount, parse_expense_date

logger = logging.getLogger(__name__)

CriteriaLike = Union[FilterCriteria, Mapping[str, Any], None]


def filter_expenses(expenses: Sequence[Expense], criteria: CriteriaLike = None) -> List[Expense]:
    """Return the expenses that satisfy every supplied criterion.

    ``criteria`` may be a :class:`FilterCriteria` or a plain mapping
    (``{"minAmount": 60}`` or ``{"min_amount": 60}``).  Unset fields impose
    no constraint.  The result keeps the relative order of ``expenses``.
    """
    if not isinstance(criteria, FilterCriteria):
        criteria = FilterCriteria.from_mapping(criteria)
    if criteria.is_empty():
        return list(expenses)
    return [expense for expense in expenses if matches(expense, criteria)]


def matches(expense: Expense, criteria: FilterCriteria) -> bool:
    """True when ``expense`` satisfies every set field of ``criteria``."""
    if criteria.category and expense.category != criteria.category:
        return False

    if criteria.start_date is not None or criteria.end_date is not None:
        when = parse_expense_date(expense.date)
        if when is None:
            logger.warning("Expense %s has an unreadable date %r; excluded by date filter", expense.id, expense.date)
            return False
        if criteria.start_date is not None and when < criteria.start_date:
            return False
        if criteria.end_date is not None and when > criteria.end_date:
            return False

    if criteria.min_amount is not None or criteria.max_amount is not None:
        amount = coerce_amount(expense.amount)
        if amount is None:
            logger.warning("Expense %s has a non-numeric amount %r; excluded by amount filter", expense.id, expense.amount)
            return False
        if criteria.min_amount is not None and amount < criteria.min_amount:
            return False
        if criteria.max_amount is not None and amount > criteria.max_amount:
            return False

    if criteria.search_term:
        needle = criteria.search_term.lower()
        if needle not in (expense.description or "").lower():
            return False

    return True


def available_categories(expenses: Sequence[Expense], include_defaults: bool = True) -> List[str]:
    """Categories to offer in the filter dropdown.

    The fixed enumeration comes first, followed by any other non-empty
    category found in ``expenses`` in sorted order.
    """
    categories: List[str] = list(EXPENSE_CATEGORIES) if include_defaults else []
    extra = sorted({e.category for e in expenses if e.category and e.category not in categories})
    return categories + extra


def describe_criteria(criteria: Optional[FilterCriteria]) -> str:
    if criteria is None or criteria.is_empty():
        return "All expenses"
    parts: List[str] = []
    if criteria.category:
        parts.append(f"category = {criteria.category}")
    if criteria.start_date is not None:
        parts.append(f"from {criteria.start_date.isoformat()}")
    if criteria.end_date is not None:
        parts.append(f"until {criteria.end_date.isoformat()}")
    if criteria.min_amount is not None:
        parts.append(f"amount >= {criteria.min_amount:g}")
    if criteria.max_amount is not None:
        parts.append(f"amount <= {criteria.max_amount:g}")
    if criteria.search_term:
        parts.append(f"description contains '{criteria.search_term}'")
    return ", ".join(parts)
