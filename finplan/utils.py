"""Utility functions for the finance calculators.

This module provides the currency rounding used whenever a result is emitted,
small period/year helpers shared by the engines, and helpers for parsing user
input (amounts with shorthand suffixes, dates) into Python types.
"""

from __future__ import annotations

import math
from datetime import date


def round_currency(value: float) -> float:
    """Round to cents, half away from zero.

    Python's ``round`` uses banker's rounding; currency output must not, so
    ``2.345`` becomes ``2.35`` and ``-2.345`` becomes ``-2.35``.
    """
    scaled = abs(value) * 100
    rounded = math.floor(scaled + 0.5) / 100
    return math.copysign(rounded, value) if rounded else 0.0


def round_up_to(value: float, step: float) -> float:
    """Round ``value`` up to the next multiple of ``step``."""
    return math.ceil(value / step) * step


def monthly_rate(annual_percent: float) -> float:
    """Convert an annual percentage rate to a monthly decimal rate."""
    return annual_percent / 100 / 12


def year_of_period(period: int) -> int:
    """Return the 1-based year a 1-based monthly period falls in."""
    return math.ceil(period / 12)


def month_in_year(period: int) -> int:
    """Return the 1-12 offset of ``period`` inside its year."""
    return ((period - 1) % 12) + 1


def is_year_boundary(period: int) -> bool:
    """True for the first period of every year after the first."""
    return period > 1 and (period - 1) % 12 == 0


_SUFFIXES = (
    ("cr", 10_000_000.0),
    ("l", 100_000.0),
    ("k", 1_000.0),
    ("m", 1_000_000.0),
)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), comma-grouped numbers ("5,00,000") and
    shorthand with ``k`` (thousand), ``m`` (million), ``l`` (lakh) or ``cr``
    (crore) suffixes, e.g. "50l" meaning 5,000,000.

    Raises
    ------
    ValueError
        If the string is not a valid amount.
    """
    text = str(value).strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    for suffix, multiplier in _SUFFIXES:
        if text.endswith(suffix):
            factor = multiplier
            text = text[: -len(suffix)]
            break
    try:
        return float(text) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD (or YYYY-MM) string into a ``date``.

    A missing day component means the first day of the month.
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
