"""Identifier generation and display formatting.

Nothing here feeds back into storage or comparisons; the formatted
strings are for the dashboard only.
"""

from __future__ import annotations

import logging
import random
import string
import time
from typing import Any, Optional, Union

from babel import Locale, numbers
from babel.dates import format_date

from . import config
from .models import parse_expense_date

logger = logging.getLogger(__name__)

_BASE36_DIGITS = string.digits + string.ascii_lowercase

CURRENCY_PATTERN = "¤#,##0"
DISPLAY_DATE_PATTERN = "MMM d, yyyy"
SHORT_DATE_PATTERN = "MMM dd"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Return a locally unique identifier for a new expense.

    A base-36 millisecond timestamp followed by a base-36 random suffix.
    Good enough for list keys and de-duplication, not for security.
    """
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = _to_base36(random.getrandbits(52)).rjust(11, "0")
    return timestamp + suffix


def format_currency(
    amount: Union[float, int],
    currency: Optional[str] = None,
    locale: Optional[str] = None,
) -> str:
    """Format ``amount`` as a localised currency string without decimals.

    Example:
        >>> format_currency(150000)
        'Rp150.000'
    """
    locale_obj = Locale.parse(locale or config.LOCALE)
    return numbers.format_currency(
        amount,
        currency or config.CURRENCY,
        format=CURRENCY_PATTERN,
        locale=locale_obj,
        currency_digits=False,
    )


def format_date_for_display(value: Any, locale: Optional[str] = None, pattern: str = DISPLAY_DATE_PATTERN) -> str:
    """Render an ISO date such as ``2024-01-10`` as ``Jan 10, 2024``.

    Values that are not readable dates are returned as text unchanged.
    """
    parsed = parse_expense_date(value)
    if parsed is None:
        logger.debug("Cannot format %r as a date", value)
        return "" if value is None else str(value)
    return format_date(parsed, format=pattern, locale=locale or config.DATE_DISPLAY_LOCALE)
