"""Input validation for the calculators and for loan and projection entries.

Each ``validate_*`` function returns a list of violation messages; an empty
list means the inputs are usable. The calculators raise
:class:`~finplan.errors.ConfigurationError` with that list.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, List, Mapping, Optional, Sequence

from . import config as cfg
from .errors import ConfigurationError


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def is_positive_number(value: Any) -> bool:
    return _is_number(value) and value > 0


def is_non_negative_number(value: Any) -> bool:
    return _is_number(value) and value >= 0


def is_percentage(value: Any) -> bool:
    return _is_number(value) and 0 <= value <= 100


def is_in_months(value: Any) -> bool:
    return _is_number(value) and 1 <= value <= 12 and float(value).is_integer()


def validate_loan_inputs(principal: Any, rate: Any, tenure: Any) -> List[str]:
    errors = []
    if not is_positive_number(principal):
        errors.append(f"Principal: Expected a positive number, got {principal}")
    if not is_non_negative_number(rate):
        errors.append(f"Interest rate: Expected a non-negative number, got {rate}")
    if not (is_positive_number(tenure) and float(tenure).is_integer()):
        errors.append(f"Tenure: Expected a positive integer (months), got {tenure}")
    return errors


def validate_sip_inputs(
    amount: Any,
    years: Any,
    annual_return: Any = 0.0,
    inflation_rate: Any = 0.0,
    step_up_percent: Any = 0.0,
    label: str = "SIP amount",
) -> List[str]:
    errors = []
    if not is_positive_number(amount):
        errors.append(f"{label}: Expected a positive number, got {amount}")
    if not is_positive_number(years):
        errors.append(f"Duration: Expected a positive number, got {years}")
    if not is_non_negative_number(annual_return):
        errors.append(f"Return rate: Expected a non-negative number, got {annual_return}")
    if not is_percentage(inflation_rate):
        errors.append(f"Inflation rate: Expected a percentage (0-100), got {inflation_rate}")
    if not is_percentage(step_up_percent):
        errors.append(f"Step-up: Expected a percentage (0-100), got {step_up_percent}")
    return errors


def validate_fd_inputs(principal: Any, rate: Any, tenure: Any) -> List[str]:
    errors = []
    if not is_positive_number(principal):
        errors.append(f"Principal: Expected a positive number, got {principal}")
    if not is_positive_number(rate):
        errors.append(f"Interest rate: Expected a positive number, got {rate}")
    if not is_positive_number(tenure):
        errors.append(f"Tenure: Expected a positive number, got {tenure}")
    return errors


def validate_tax_inputs(income: Any, deductions: Optional[Mapping[str, Any]] = None) -> List[str]:
    errors = []
    if not is_non_negative_number(income):
        errors.append(f"Income: Expected a non-negative number, got {income}")
    for key, value in (deductions or {}).items():
        if _is_number(value) and value < 0:
            errors.append(f"Deductions.{key}: Expected a non-negative number, got {value}")
    return errors


def validate_withdrawal_inputs(
    amount: Any,
    years: Any,
    annual_return: Any = 0.0,
    inflation_rate: Any = 0.0,
    label: str = "Withdrawal",
) -> List[str]:
    errors = []
    if not is_positive_number(amount):
        errors.append(f"{label}: Expected a positive number, got {amount}")
    if not (is_positive_number(years) and float(years).is_integer()):
        errors.append(f"Duration: Expected a positive integer (years), got {years}")
    if not is_non_negative_number(annual_return):
        errors.append(f"Return rate: Expected a non-negative number, got {annual_return}")
    if not is_percentage(inflation_rate):
        errors.append(f"Inflation rate: Expected a percentage (0-100), got {inflation_rate}")
    return errors


def _check_range(label: str, start: Any, end: Any, unit: str) -> List[str]:
    errors = []
    if not (is_positive_number(start) and float(start).is_integer()):
        errors.append(f"{label}: start {unit} must be a whole number >= 1, got {start}")
    elif end is not None and end < start:
        errors.append(f"{label}: end {unit} {end} is before start {unit} {start}")
    return errors


def validate_rate_period(index: int, entry: Any) -> List[str]:
    """Checks for one rate period; ``index`` is 1-based."""
    label = f"Rate period {index}"
    errors = _check_range(label, entry.start_period, entry.end_period, "month")
    if not is_non_negative_number(entry.rate):
        errors.append(f"{label}: rate must be a non-negative number, got {entry.rate}")
    return errors


def validate_prepayment(index: int, entry: Any) -> List[str]:
    """Checks for one recurring, annual or one-time prepayment entry."""
    label = f"Prepayment {index} ({entry.kind})"
    errors = []
    if not is_positive_number(entry.amount):
        errors.append(f"{label}: amount must be greater than 0, got {entry.amount}")
    if entry.kind == "yearly":
        if not is_in_months(entry.target_offset):
            errors.append(f"{label}: month offset must be between 1 and 12, got {entry.target_offset}")
        errors.extend(_check_range(label, entry.start_year, entry.end_year, "year"))
    elif entry.kind == "lump-sum":
        errors.extend(_check_range(label, entry.period, None, "month"))
    else:
        errors.extend(_check_range(label, entry.start_period, entry.end_period, "month"))
    return errors


def validate_step_up(index: int, entry: Any) -> List[str]:
    label = f"Step-up {index}"
    errors = _check_range(label, entry.start_year, entry.end_year, "year")
    if not is_percentage(entry.percent):
        errors.append(f"{label}: percent must be between 0 and 100, got {entry.percent}")
    return errors


def validate_holdings(holdings: Sequence[Any]) -> List[str]:
    errors = []
    for h in holdings:
        for key in ("monthly_amount", "invested_amount", "current_value"):
            value = getattr(h, key)
            if not is_non_negative_number(value):
                errors.append(f"{h.name}: {key} must be a non-negative number, got {value}")
        if not _is_number(h.return_rate):
            errors.append(f"{h.name}: return_rate must be a number, got {h.return_rate}")
    return errors


def validate_allocations(assets: Sequence[Any]) -> List[str]:
    if not assets:
        return ["At least one asset is required"]
    errors = []
    for a in assets:
        if not is_non_negative_number(a.current_value):
            errors.append(f"{a.name}: current value must be a non-negative number, got {a.current_value}")
        if not is_percentage(a.target_percent):
            errors.append(f"{a.name}: target must be a percentage (0-100), got {a.target_percent}")
    if not errors:
        total = sum(a.target_percent for a in assets)
        if abs(total - 100) > cfg.ALLOCATION_TOLERANCE:
            errors.append(f"Target allocations must add up to 100%, got {total:g}%")
    return errors


def validate_health_inputs(inputs: Any) -> List[str]:
    errors = []
    if not is_positive_number(inputs.monthly_income):
        errors.append(f"Monthly income: Expected a positive number, got {inputs.monthly_income}")
    for key in ("monthly_expenses", "total_debt", "monthly_emis", "emergency_fund", "monthly_savings", "investments"):
        value = getattr(inputs, key)
        if not is_non_negative_number(value):
            errors.append(f"{key}: Expected a non-negative number, got {value}")
    return errors


def ensure_valid(errors: List[str]) -> None:
    """Raise :class:`ConfigurationError` if ``errors`` is non-empty."""
    if errors:
        raise ConfigurationError(errors)
