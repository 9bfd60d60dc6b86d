"""Shared utilities for normalizing the values that arrive from the store."""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

BLANK_DATE = "0000-00-00"


def normalize_phone(value: Optional[str]) -> str:
    """Normalize a phone number to a 10-digit national number where possible.

    Strips everything except digits, then drops the leading country code
    from 11-digit numbers starting with 1.

    Examples:
        >>> normalize_phone("(818) 212-1359")
        '8182121359'
        >>> normalize_phone("+1 818 212 1359")
        '8182121359'
    """
    if not value:
        return ""
    digits = re.sub(r"\D", "", str(value))
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits


def is_blank(value: Any) -> bool:
    """True for every "not set" representation found in source data.

    Absent (None), empty or whitespace-only strings, and the zero-date
    sentinel are all equivalent.
    """
    if value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return stripped == "" or stripped == BLANK_DATE
    return False


def parse_date(value: Any) -> Optional[date]:
    """Coerce a store date value to a ``date``; blanks and garbage become None."""
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def to_amount(value: Any) -> float:
    """Coerce a money value to a non-negative float with 2-decimal precision."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(str(value).replace("$", "").replace(",", "").strip())
    except ValueError:
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return round(amount, 2)


def quote_where(value: str) -> str:
    """Quote a literal for a hosted-table ``q.where`` clause."""
    return "'" + str(value).replace("'", "''") + "'"
