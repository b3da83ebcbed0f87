"""Fixed and recurring deposit calculators."""

from __future__ import annotations

from . import config as cfg
from .data_models import FixedDepositMaturity, RecurringDepositMaturity, TdsDeduction
from .utils import round_currency
from .validators import ensure_valid, validate_fd_inputs


def fixed_deposit(
    principal: float,
    annual_rate: float,
    tenure_years: float,
    compounding: str = "quarterly",
) -> FixedDepositMaturity:
    """Maturity of a fixed deposit, ``A = P * (1 + r/n)^(n*t)``.

    Parameters
    ----------
    compounding : str
        One of ``monthly``, ``quarterly``, ``half-yearly`` or ``yearly``.

    Raises
    ------
    ValueError
        For an unknown compounding frequency.
    """
    ensure_valid(validate_fd_inputs(principal, annual_rate, tenure_years))

    n = cfg.COMPOUNDING_FREQUENCIES.get(compounding)
    if n is None:
        choices = ", ".join(cfg.COMPOUNDING_FREQUENCIES)
        raise ValueError(f"Invalid compounding frequency: {compounding}. Use: {choices}")

    r = annual_rate / 100
    maturity = principal * (1 + r / n) ** (n * tenure_years)
    effective = ((1 + r / n) ** n - 1) * 100

    return FixedDepositMaturity(
        maturity_amount=round_currency(maturity),
        interest_earned=round_currency(maturity - principal),
        effective_rate=round_currency(effective),
    )


def tds_on_interest(interest: float, pan_provided: bool = True, senior_citizen: bool = False) -> TdsDeduction:
    """Tax deducted at source on a year's deposit interest."""
    threshold = cfg.TDS_THRESHOLD_SENIOR if senior_citizen else cfg.TDS_THRESHOLD
    if interest <= threshold:
        return TdsDeduction(tds_rate=0, tds_amount=0.0, net_interest=round_currency(interest), threshold=threshold)

    rate = cfg.TDS_RATE_WITH_PAN if pan_provided else cfg.TDS_RATE_WITHOUT_PAN
    amount = round_currency(interest * rate / 100)
    return TdsDeduction(
        tds_rate=rate,
        tds_amount=amount,
        net_interest=round_currency(interest - amount),
        threshold=threshold,
    )


def recurring_deposit(monthly_deposit: float, annual_rate: float, tenure_months: int) -> RecurringDepositMaturity:
    """Maturity of a recurring deposit.

    Each monthly deposit compounds quarterly for the months left in the term,
    counting the month it is made in.
    """
    if monthly_deposit <= 0:
        raise ValueError("Monthly deposit must be positive")
    if annual_rate <= 0:
        raise ValueError("Interest rate must be positive")
    if tenure_months <= 0 or int(tenure_months) != tenure_months:
        raise ValueError("Tenure must be a positive integer (months)")

    r = annual_rate / 100
    n = cfg.RD_COMPOUNDING
    deposited = monthly_deposit * tenure_months
    maturity = sum(
        monthly_deposit * (1 + r / n) ** (n * (tenure_months - m + 1) / 12)
        for m in range(1, tenure_months + 1)
    )

    return RecurringDepositMaturity(
        maturity_amount=round_currency(maturity),
        total_deposited=round_currency(deposited),
        interest_earned=round_currency(maturity - deposited),
    )
