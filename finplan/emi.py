"""Standalone EMI calculator.

Closed-form EMI, tenure for a given EMI, maximum loan for an EMI,
affordability against income and a rounded month-by-month breakdown.
"""

from __future__ import annotations

import math
from typing import List

from .data_models import Affordability, EmiBreakdownRow, EmiSummary, TenureEstimate
from .engine import calculate_payment
from .errors import PaymentTooLowError
from .utils import monthly_rate, round_currency
from .validators import ensure_valid, validate_loan_inputs


def calculate_emi(principal: float, annual_rate: float, tenure_months: int) -> EmiSummary:
    """EMI and lifetime totals for a fixed-rate loan.

    Raises
    ------
    ConfigurationError
        If any input is out of range.
    """
    ensure_valid(validate_loan_inputs(principal, annual_rate, tenure_months))
    emi = calculate_payment(principal, annual_rate, tenure_months)
    total_payment = round_currency(emi * tenure_months)
    return EmiSummary(
        emi=round_currency(emi),
        total_interest=round_currency(total_payment - principal),
        total_payment=total_payment,
    )


def tenure_for_payment(principal: float, emi: float, annual_rate: float) -> TenureEstimate:
    """Months needed to repay ``principal`` with a fixed ``emi``.

    ``n = -log(1 - P*r/EMI) / log(1 + r)``, rounded up.

    Raises
    ------
    PaymentTooLowError
        If the EMI does not exceed the interest-only payment.
    ValueError
        If an argument is out of range.
    """
    if principal <= 0:
        raise ValueError("Principal must be positive")
    if emi <= 0:
        raise ValueError("EMI must be positive")
    if annual_rate < 0:
        raise ValueError("Rate cannot be negative")

    if annual_rate == 0:
        months = math.ceil(principal / emi)
    else:
        r = monthly_rate(annual_rate)
        interest_only = principal * r
        if emi <= interest_only:
            raise PaymentTooLowError(emi, interest_only)
        months = math.ceil(-math.log(1 - interest_only / emi) / math.log(1 + r))

    total_payment = round_currency(emi * months)
    return TenureEstimate(
        tenure_months=months,
        total_payment=total_payment,
        total_interest=round_currency(total_payment - principal),
    )


def max_loan(emi: float, annual_rate: float, tenure_months: int) -> float:
    """Largest principal an ``emi`` repays over ``tenure_months``."""
    if emi <= 0:
        raise ValueError("EMI must be positive")
    if annual_rate < 0:
        raise ValueError("Rate cannot be negative")
    if tenure_months <= 0:
        raise ValueError("Tenure must be positive")

    if annual_rate == 0:
        return round_currency(emi * tenure_months)
    r = monthly_rate(annual_rate)
    factor = (1 + r) ** tenure_months
    return round_currency(emi * (factor - 1) / (r * factor))


def affordability(
    monthly_income: float,
    existing_emis: float,
    annual_rate: float,
    tenure_months: int,
    max_emi_percent: float = 50.0,
) -> Affordability:
    """Maximum new loan when all EMIs may take ``max_emi_percent`` of income."""
    if monthly_income <= 0:
        raise ValueError("Monthly income must be positive")
    if existing_emis < 0:
        raise ValueError("Existing EMIs cannot be negative")

    max_total = monthly_income * max_emi_percent / 100
    max_new = round_currency(max(max_total - existing_emis, 0.0))
    if max_new <= 0:
        return Affordability(max_loan_amount=0.0, max_new_emi=0.0)
    return Affordability(max_loan_amount=max_loan(max_new, annual_rate, tenure_months), max_new_emi=max_new)


def emi_breakdown(principal: float, annual_rate: float, tenure_months: int) -> List[EmiBreakdownRow]:
    """Month-by-month split of a fixed EMI, rounded to cents each month.

    The last month pays the remaining balance plus its interest.
    """
    ensure_valid(validate_loan_inputs(principal, annual_rate, tenure_months))

    emi = calculate_payment(principal, annual_rate, tenure_months)
    r = monthly_rate(annual_rate)
    balance = float(principal)
    rows = []

    month = 1
    while month <= tenure_months and balance > 0.01:
        interest = round_currency(balance * r)
        principal_part = round_currency(emi - interest)
        if principal_part > balance:
            principal_part = round_currency(balance)
        balance = max(round_currency(balance - principal_part), 0.0)

        rows.append(
            EmiBreakdownRow(
                month=month,
                emi=round_currency(emi if month < tenure_months else principal_part + interest),
                principal=principal_part,
                interest=interest,
                balance=balance,
            )
        )
        month += 1

    return rows
