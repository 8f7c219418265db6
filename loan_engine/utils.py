"""Utility functions for the loan engine.

This module provides helpers for date arithmetic on a monthly grid, for the
currency and rate rounding rules used throughout the engine, and for parsing
user input into Python data types. It uses Python's ``datetime`` and
``calendar`` modules to calculate month offsets.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP, getcontext
import calendar

from .config import CURRENCY_QUANTUM, RATE_QUANTUM

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def round_currency(value: Decimal) -> Decimal:
    """Round a monetary amount to cents, half away from zero."""
    return Decimal(value).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    """Round an annual rate fraction to 4 decimals, half away from zero."""
    return Decimal(value).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def with_day(dt: date, day: int) -> date:
    """Move ``dt`` to ``day`` within the same month, clamped to the month end."""
    last = calendar.monthrange(dt.year, dt.month)[1]
    return dt.replace(day=max(1, min(day, last)))


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``.

    Only year and month take part; the day of the month is ignored, so
    2024-01-31 -> 2024-02-01 counts as one month.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` (or ``YYYY-MM``) string into a ``date``.

    A missing day component defaults to the first of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) < 2:
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) > 2 else 1
        return date(year, month, day)
    except Exception as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = str(value).replace(",", "").strip()
        return Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def percent_to_fraction(value: Decimal) -> Decimal:
    """Convert a percentage (``3.2``) into a rate fraction (``0.032``)."""
    return Decimal(value) / Decimal(100)
