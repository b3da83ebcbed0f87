"""Corpus depletion, required corpus and retirement planning."""

from __future__ import annotations

import logging
from typing import List, Optional

from . import config as cfg
from .data_models import RetirementPlan, WithdrawalResult, WithdrawalRow
from .projection import ProjectionConfig, project
from .utils import is_year_boundary, monthly_rate, round_currency, round_up_to, year_of_period
from .validators import ensure_valid, is_non_negative_number, validate_withdrawal_inputs

logger = logging.getLogger(__name__)


def simulate_withdrawal(
    initial_corpus: float,
    monthly_withdrawal: float,
    years: int,
    annual_return: float,
    inflation_rate: float = 0.0,
    inflation_adjusted: bool = True,
) -> WithdrawalResult:
    """Withdraw monthly from a corpus until the plan ends or money runs out.

    The withdrawal grows by ``inflation_rate`` at each year boundary when
    ``inflation_adjusted`` is set. A period whose withdrawal exceeds the
    balance is the depletion period and nothing is withdrawn in it.
    """
    errors = validate_withdrawal_inputs(monthly_withdrawal, years, annual_return, inflation_rate)
    if not is_non_negative_number(initial_corpus):
        errors.insert(0, f"Corpus: Expected a non-negative number, got {initial_corpus}")
    ensure_valid(errors)
    balance = float(initial_corpus)
    withdrawal = float(monthly_withdrawal)
    total = 0.0
    r = monthly_rate(annual_return)
    depleted_at: Optional[int] = None
    rows: List[WithdrawalRow] = []

    for period in range(1, years * 12 + 1):
        if inflation_adjusted and is_year_boundary(period):
            withdrawal *= 1 + inflation_rate / 100

        if balance < withdrawal:
            depleted_at = period
            break

        balance -= withdrawal
        total += withdrawal
        if balance > 0:
            balance *= 1 + r

        rows.append(
            WithdrawalRow(
                period=period,
                year=year_of_period(period),
                balance=round_currency(max(balance, 0.0)),
                withdrawal=round_currency(withdrawal),
                total_withdrawn=round_currency(total),
            )
        )

        if balance <= 0:
            depleted_at = period
            break

    logger.debug("Withdrawal plan from %.2f depleted at %s", initial_corpus, depleted_at)

    return WithdrawalResult(
        initial_corpus=round_currency(initial_corpus),
        monthly_withdrawal=round_currency(monthly_withdrawal),
        total_withdrawn=round_currency(total),
        remaining_corpus=round_currency(max(balance, 0.0)),
        depleted_at=depleted_at,
        depleted_in_years=depleted_at / 12 if depleted_at is not None else None,
        rows=rows,
    )


def required_corpus(
    monthly_withdrawal: float,
    years: int,
    annual_return: float,
    inflation_rate: float = 0.0,
    inflation_adjusted: bool = True,
) -> float:
    """Smallest corpus (rounded up to the nearest lakh) that survives the plan.

    Bisection between the undiscounted sum of withdrawals and three times
    that; the answer is only as good as that bracket.
    """
    ensure_valid(validate_withdrawal_inputs(monthly_withdrawal, years, annual_return, inflation_rate))
    low = monthly_withdrawal * years * 12
    high = low * 3
    for _ in range(cfg.CORPUS_SEARCH_ITERATIONS):
        if high - low <= cfg.CORPUS_SEARCH_RESOLUTION:
            break
        mid = (low + high) / 2
        result = simulate_withdrawal(mid, monthly_withdrawal, years, annual_return, inflation_rate, inflation_adjusted)
        if result.lasts_through_plan:
            high = mid
        else:
            low = mid
    return round_up_to(high, cfg.CORPUS_ROUNDING_STEP)


def safe_withdrawal(corpus: float, years: int, annual_return: float) -> float:
    """Level monthly withdrawal that exhausts ``corpus`` in exactly ``years``.

    Present-value annuity payment ``PV * r / (1 - (1 + r)^-n)``.
    """
    ensure_valid(validate_withdrawal_inputs(corpus, years, annual_return, label="Corpus"))
    r = monthly_rate(annual_return)
    n = years * 12
    if r == 0:
        return round_currency(corpus / n)
    return round_currency(corpus * r / (1 - (1 + r) ** -n))


def retirement_plan(
    monthly_sip: float,
    accumulation_years: int,
    accumulation_return: float,
    monthly_withdrawal: float,
    withdrawal_years: int,
    withdrawal_return: float,
    inflation_rate: float = 0.0,
    step_up_percent: float = 0.0,
    inflation_adjusted: bool = True,
) -> RetirementPlan:
    """Accumulate with a SIP, then draw down the resulting corpus.

    ``inflation_rate`` is used to deflate the accumulation and to grow the
    withdrawals.
    """
    accumulation = project(
        ProjectionConfig.flat(
            monthly_sip,
            accumulation_years,
            accumulation_return,
            inflation_rate=inflation_rate,
            step_up_percent=step_up_percent,
        )
    )
    drawdown = simulate_withdrawal(
        accumulation.final_value,
        monthly_withdrawal,
        withdrawal_years,
        withdrawal_return,
        inflation_rate,
        inflation_adjusted,
    )
    return RetirementPlan(
        accumulation=accumulation,
        withdrawal=drawdown,
        total_duration=accumulation_years + (drawdown.depleted_in_years or withdrawal_years),
        success=drawdown.lasts_through_plan,
    )
