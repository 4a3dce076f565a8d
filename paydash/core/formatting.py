"""Helpers for consistent user-facing date formatting."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Iterable, Optional, Tuple

from dateutil.relativedelta import relativedelta

DISPLAY_DATE_FORMAT = "%A, %B %d, %Y"
MONTH_LABEL_FORMAT = "%B %Y"
MONTH_PARAM_FORMAT = "%Y-%m"
_STRING_PARSE_PATTERNS: Iterable[str] = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
)


def _coerce_to_datetime(value: Any) -> datetime | None:
    """Attempt to normalise incoming date-like values to a datetime."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            if text.endswith("Z"):
                try:
                    return datetime.fromisoformat(text.replace("Z", "+00:00"))
                except ValueError:
                    pass
            for pattern in _STRING_PARSE_PATTERNS:
                try:
                    return datetime.strptime(text, pattern)
                except ValueError:
                    continue
        return None
    return None


def format_display_date(value: Any) -> str:
    """Format a value as e.g. 'Friday, October 31, 2025' or return an empty string."""
    coerced = _coerce_to_datetime(value)
    if coerced is None:
        return "" if value in (None, "") else str(value)
    return coerced.strftime(DISPLAY_DATE_FORMAT).replace(" 0", " ")


def format_day_badge(value: Any) -> Tuple[str, str]:
    """Return the (day, abbreviated month) pair shown in the calendar badge."""
    coerced = _coerce_to_datetime(value)
    if coerced is None:
        return "", ""
    return coerced.strftime("%d"), coerced.strftime("%b")


def format_month_label(year: int, month: int) -> str:
    return date(year, month, 1).strftime(MONTH_LABEL_FORMAT)


def parse_month_param(value: Optional[str], today: date) -> Tuple[int, int]:
    """Parse a YYYY-MM query value, defaulting to the month of ``today``.

    Raises ValueError for malformed input.
    """
    if value in (None, ""):
        return today.year, today.month
    parsed = datetime.strptime(value.strip(), MONTH_PARAM_FORMAT)
    return parsed.year, parsed.month


def month_param(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    shifted = date(year, month, 1) + relativedelta(months=offset)
    return shifted.year, shifted.month


__all__ = [
    "format_day_badge",
    "format_display_date",
    "format_month_label",
    "month_param",
    "parse_month_param",
    "shift_month",
]
