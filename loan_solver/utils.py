"""Utility functions for the loan solver.

This module provides helpers for turning user input into Python data types
and for handling dates: parsing ``YYYY-MM`` / ``YYYY-MM-DD`` strings, adding
calendar months and converting numbers to ``Decimal``. Every parser raises
``ValueError`` on bad input; the front ends translate that into their own
invalid-input response.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
import calendar
from typing import Union

Number = Union[int, float, str, Decimal]


def parse_start_date(value: str) -> date:
    """Parse a ``YYYY-MM`` or ``YYYY-MM-DD`` string into a ``date``.

    A missing day defaults to the first of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except (ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid date: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def to_decimal(value: Number) -> Decimal:
    """Convert a number to ``Decimal`` via its string form.

    Going through ``str`` keeps ``0.1`` as ``Decimal("0.1")`` instead of the
    binary expansion of the float.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc


def parse_amount(value: str) -> Decimal:
    """Parse a money amount with optional ``k``/``m`` suffix.

    Accepts plain numbers ("500000"), thousands separators ("500,000") and
    shorthand ("500k" meaning 500_000).
    """
    cleaned = value.strip().lower().replace(",", "").replace("_", "")
    factor = Decimal(1)
    if cleaned.endswith("k"):
        factor = Decimal(1_000)
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = Decimal(1_000_000)
        cleaned = cleaned[:-1]
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value}")
    if amount < 0:
        raise ValueError(f"Amount must not be negative: {value}")
    return amount * factor


def parse_percent(value: str) -> Decimal:
    """Parse an annual rate such as "5" or "5%" into percent."""
    cleaned = value.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    try:
        rate = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid percentage: {value}") from exc
    if not rate.is_finite():
        raise ValueError(f"Invalid percentage: {value}")
    return rate


def parse_term(value: str) -> int:
    """Parse a loan term in months; it must be a positive integer."""
    try:
        term = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid term: {value}") from exc
    if term <= 0:
        raise ValueError(f"Term must be positive: {value}")
    return term
