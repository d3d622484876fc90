"""Utility functions for the EMI calculator.

This module provides helpers for parsing user input into Python data types and
for handling dates, including adding months and normalizing year-month strings
to ``datetime.date`` instances. It also holds the single rounding rule used by
the engine and by every renderer, so on-screen tables and exported files agree
to the unit.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date
from typing import Tuple

from .data_models import EmiIncrease

_AMOUNT_SUFFIXES = {
    "k": 1_000.0,
    "l": 100_000.0,  # lakh
    "cr": 10_000_000.0,  # crore
    "m": 1_000_000.0,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return int(math.floor(value + 0.5))


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Parameters
    ----------
    ym: str
        A string in the form ``"YYYY-MM"``. The day component, if present,
        will be ignored.

    Returns
    -------
    date
        A date object representing the first day of the specified month.

    Raises
    ------
    ValueError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.strip().split("-")
        if len(parts) < 2:
            raise ValueError
        return date(int(parts[0]), int(parts[1]), 1)
    except (ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid year-month string: {ym}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000", "5,00,000") and shorthand with ``k``,
    ``l`` (lakh), ``cr`` (crore) or ``m`` suffixes, e.g. "75l" is 7_500_000.
    """
    cleaned = str(value).strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    for suffix, multiplier in _AMOUNT_SUFFIXES.items():
        if cleaned.endswith(suffix):
            factor = multiplier
            cleaned = cleaned[: -len(suffix)]
            break
    try:
        return float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def sanitize_digits(raw: str) -> str:
    """Keep only the digits of a keystroke buffer and drop leading zeros.

    ``"07,50,000"`` becomes ``"750000"``; an input without digits becomes
    ``""``.
    """
    digits = re.sub(r"[^\d]", "", raw or "")
    return digits.lstrip("0")


def parse_part_payment(item: str) -> Tuple[int, float]:
    """Parse ``INDEX:AMOUNT`` into a schedule index and an amount."""
    parts = item.split(":")
    if len(parts) != 2:
        raise ValueError(f"Part payment must be in INDEX:AMOUNT format; got {item}")
    index = _parse_index(parts[0], item)
    amount = parse_amount(parts[1])
    if amount < 0:
        raise ValueError(f"Part payment amount must not be negative; got {item}")
    return index, amount


def parse_emi_increase(item: str) -> Tuple[int, EmiIncrease]:
    """Parse ``INDEX:VALUE`` or ``INDEX:VALUE%`` into an EMI increase.

    A trailing ``%`` makes it a percentage increase, otherwise the value is an
    absolute amount.
    """
    parts = item.split(":")
    if len(parts) != 2:
        raise ValueError(f"EMI increase must be in INDEX:VALUE[%] format; got {item}")
    index = _parse_index(parts[0], item)
    raw = parts[1].strip()
    if raw.endswith("%"):
        kind = "percent"
        try:
            value = float(raw[:-1])
        except ValueError as exc:
            raise ValueError(f"Invalid percentage: {raw}") from exc
    else:
        kind = "absolute"
        value = parse_amount(raw)
    if value < 0:
        raise ValueError(f"EMI increase must not be negative; got {item}")
    return index, EmiIncrease(kind=kind, value=value)


def _parse_index(raw: str, item: str) -> int:
    try:
        index = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid month index in {item}") from exc
    if index < 0:
        raise ValueError(f"Month index must not be negative; got {item}")
    return index
