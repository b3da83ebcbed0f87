"""Core amortization engine.

This module implements the month-by-month loan simulation: variable interest
rates resolved from a ``RateSchedule``, recurring/annual/one-time prepayments
from a ``PrepaymentPlan`` and the two payoff strategies (reduce tenure or
reduce EMI). Each run walks an iterator of immutable ``PeriodStep`` records
and folds them into a ``LoanResult``; the same iterator backs the baseline
(no-prepayment) run, balance lookups and the what-if analyses, every one of
which works on its own copy of the configuration.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, List, Optional

from . import config as cfg
from .data_models import (
    BalanceSnapshot,
    BreakEvenResult,
    LedgerRow,
    LoanResult,
    Strategy,
    StrategyComparison,
    StrategyOutcome,
    TaxBenefit,
    resolve_strategy,
)
from .errors import ConfigurationError
from .schedule import LoanConfig
from .utils import monthly_rate, round_currency

logger = logging.getLogger(__name__)


def calculate_payment(principal: float, annual_rate: float, periods: int) -> float:
    """Return the annuity (equal installment) periodic payment for a loan.

    The formula is:

        payment = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``. A non-positive principal or period count
    gives a zero payment.
    """
    if principal <= 0 or periods <= 0:
        return 0.0
    if annual_rate == 0:
        return principal / periods
    r = monthly_rate(annual_rate)
    factor = (1 + r) ** periods
    return principal * r * factor / (factor - 1)


def estimate_remaining_periods(balance: float, annual_rate: float, payment: float, base_tenure: int) -> int:
    """Estimate how many periods ``payment`` needs to clear ``balance``.

    Inverts the annuity formula for ``n``. A payment that does not exceed the
    interest-only amount yields ``base_tenure``; the estimate is clamped to
    ``[1, 2 * base_tenure]``.
    """
    if balance <= 0 or payment <= 0:
        return 0
    if annual_rate == 0:
        return math.ceil(balance / payment)
    r = monthly_rate(annual_rate)
    if payment <= balance * r:
        return base_tenure
    periods = math.ceil(math.log(payment / (payment - balance * r)) / math.log(1 + r))
    return max(1, min(periods, base_tenure * 2))


@dataclass(frozen=True)
class PeriodStep:
    """Full-precision state transition for one simulated period."""

    period: int
    opening_balance: float
    interest: float
    scheduled_principal: float
    principal: float
    prepayment: float
    prepayment_kind: str
    rate: float
    strategy: Optional[Strategy]
    payment: float
    closing_balance: float

    def to_row(self) -> LedgerRow:
        return LedgerRow(
            period=self.period,
            balance=round_currency(max(self.closing_balance, 0.0)),
            interest=round_currency(self.interest),
            principal=round_currency(self.principal),
            payment=round_currency(self.payment),
            prepayment=round_currency(self.prepayment),
            prepayment_kind=self.prepayment_kind,
            rate=self.rate,
            strategy=self.strategy,
        )


def iterate_periods(
    config: LoanConfig,
    include_prepayments: bool = True,
    cap_multiplier: int = cfg.LOAN_CAP_MULTIPLIER,
) -> Iterator[PeriodStep]:
    """Yield one ``PeriodStep`` per period until the loan is paid off.

    The loop stops when the balance falls to ``BALANCE_EPSILON`` or after
    ``cap_multiplier * base_tenure`` periods, whichever comes first. The
    configuration is only read, never modified.
    """
    balance = float(config.principal)
    payment = calculate_payment(balance, config.rates.initial_rate, config.base_tenure)
    max_periods = config.base_tenure * cap_multiplier
    period = 0

    while balance > cfg.BALANCE_EPSILON and period < max_periods:
        period += 1
        rate = config.rates.rate_at(period)
        r = monthly_rate(rate)

        interest = balance * r
        scheduled = min(payment - interest, balance)
        if scheduled < 0:
            scheduled = 0.0
        principal = scheduled

        prepayment = 0.0
        kind = "none"
        applied: Optional[Strategy] = None
        if include_prepayments:
            due = config.prepayments.amount_and_strategy_at(period)
            kind = due.label
            # never pay more than what remains after the scheduled principal
            prepayment = max(min(due.amount, balance - scheduled), 0.0)
            if prepayment > 0:
                applied = resolve_strategy(due.strategy, config.default_strategy)
                principal += prepayment
                if applied is Strategy.REDUCE_EMI:
                    new_balance = balance - principal
                    if new_balance > cfg.BALANCE_EPSILON:
                        remaining = estimate_remaining_periods(new_balance, rate, payment, config.base_tenure)
                        payment = calculate_payment(new_balance, rate, remaining)
                        floor = new_balance * r * cfg.REDUCE_EMI_FLOOR_FACTOR
                        if payment < floor:
                            payment = floor
                    else:
                        payment = 0.0

        if principal > balance:
            principal = balance
        closing = balance - principal
        if closing < 0:
            closing = 0.0

        yield PeriodStep(
            period=period,
            opening_balance=balance,
            interest=interest,
            scheduled_principal=scheduled,
            principal=principal,
            prepayment=prepayment,
            prepayment_kind=kind,
            rate=rate,
            strategy=applied,
            payment=payment,
            closing_balance=closing,
        )
        balance = closing

    if balance > cfg.BALANCE_EPSILON:
        logger.warning(
            "Loan simulation stopped at safety cap of %d periods with %.2f outstanding",
            max_periods,
            balance,
        )


def _require_valid(config: LoanConfig) -> None:
    errors = config.validate()
    if errors:
        raise ConfigurationError(errors)


@dataclass(frozen=True)
class BaselineRun:
    periods: int
    total_interest: float


def simulate_baseline(config: LoanConfig) -> BaselineRun:
    """Run the same loan with no prepayments, capped at twice the base tenure."""
    periods = 0
    total_interest = 0.0
    for step in iterate_periods(config, include_prepayments=False, cap_multiplier=cfg.BASELINE_CAP_MULTIPLIER):
        periods = step.period
        total_interest += step.interest
    return BaselineRun(periods=periods, total_interest=total_interest)


def compute_schedule(config: LoanConfig) -> LoanResult:
    """Simulate a loan to payoff and compare it with the no-prepayment baseline.

    Parameters
    ----------
    config: LoanConfig
        Principal, base tenure, rate schedule, prepayment plan and default
        strategy.

    Returns
    -------
    LoanResult
        Aggregate metrics (rounded to cents) and one ``LedgerRow`` per period.

    Raises
    ------
    ConfigurationError
        If the configuration fails validation; all violations are listed.
    """
    _require_valid(config)

    baseline = simulate_baseline(config)
    initial_payment = calculate_payment(config.principal, config.rates.initial_rate, config.base_tenure)
    steps: List[PeriodStep] = list(iterate_periods(config))

    total_interest = sum(s.interest for s in steps)
    total_principal = sum(s.principal for s in steps)
    total_prepayment = sum(s.prepayment for s in steps)
    final_payment = steps[-1].payment if steps else initial_payment
    if steps:
        average_rate = sum(s.rate for s in steps) / len(steps)
    else:
        average_rate = config.rates.initial_rate

    logger.debug(
        "Loan of %.2f paid off in %d periods (baseline %d)", config.principal, len(steps), baseline.periods
    )

    return LoanResult(
        periods=len(steps),
        total_interest=round_currency(total_interest),
        total_principal=round_currency(total_principal),
        total_payment=round_currency(total_principal + total_interest),
        total_prepayment=round_currency(total_prepayment),
        interest_saved=round_currency(max(baseline.total_interest - total_interest, 0.0)),
        periods_shortened=baseline.periods - len(steps),
        initial_payment=round_currency(initial_payment),
        final_payment=round_currency(final_payment),
        baseline_periods=baseline.periods,
        baseline_total_interest=round_currency(baseline.total_interest),
        average_rate=average_rate,
        ledger=[s.to_row() for s in steps],
    )


def balance_at_period(config: LoanConfig, target_period: int) -> BalanceSnapshot:
    """Outstanding balance and cumulative totals after ``target_period``.

    Runs the full simulation (prepayments included) truncated at the target.
    A loan already paid off by then reports a zero balance.
    """
    if target_period < 1:
        raise ValueError("Month must be >= 1")
    _require_valid(config)

    steps = list(islice(iterate_periods(config), target_period))
    balance = steps[-1].closing_balance if steps else float(config.principal)
    if balance <= cfg.BALANCE_EPSILON:
        balance = 0.0
    return BalanceSnapshot(
        period=target_period,
        balance=round_currency(balance),
        total_interest_paid=round_currency(sum(s.interest for s in steps)),
        total_principal_paid=round_currency(sum(s.principal for s in steps)),
    )


def estimate_tax_benefit(
    total_prepayment: float,
    already_claimed: float = 0.0,
    tax_bracket_percent: float = 30.0,
) -> TaxBenefit:
    """Tax saved on principal prepayment under the Section 80C ceiling."""
    available = max(cfg.SEC_80C_MAX - already_claimed, 0.0)
    eligible = min(total_prepayment, available)
    return TaxBenefit(
        eligible_deduction=round_currency(eligible),
        tax_saved=round_currency(eligible * tax_bracket_percent / 100),
    )


def break_even_analysis(
    config: LoanConfig,
    amount: float,
    period: int,
    alternate_return: float,
) -> BreakEvenResult:
    """Compare prepaying ``amount`` at ``period`` with investing it instead.

    Both loans are simulated from a prepayment-free copy of ``config``. The
    interest saved is assumed to accrue in proportion to elapsed periods; the
    break-even period is the first one where that share reaches the gain of
    the alternative investment compounded monthly.
    """
    if amount <= 0:
        raise ValueError("Prepayment amount must be positive")
    if alternate_return < 0:
        raise ValueError("Alternate return rate cannot be negative")

    with_prepayment = config.without_prepayments()
    with_prepayment.prepayments.add_one_time(amount, period)
    result_with = compute_schedule(with_prepayment)
    result_without = compute_schedule(config.without_prepayments())

    interest_saved = round_currency(result_without.total_interest - result_with.total_interest)
    remaining = result_without.periods - period

    r = monthly_rate(alternate_return)
    if r == 0:
        investment_value = amount
    else:
        investment_value = round_currency(amount * (1 + r) ** remaining)
    investment_gain = round_currency(investment_value - amount)

    break_even: Optional[int] = None
    if interest_saved > 0:
        for m in range(1, remaining + 1):
            invested = 0.0 if r == 0 else amount * ((1 + r) ** m - 1)
            saved_so_far = interest_saved * (m / remaining)
            if saved_so_far >= invested:
                break_even = period + m
                break

    if interest_saved >= investment_gain:
        recommendation = "Prepayment is beneficial: interest saved exceeds potential investment returns"
    else:
        recommendation = "Investment may be better: potential returns exceed interest saved from prepayment"

    return BreakEvenResult(
        break_even_period=break_even,
        interest_saved=interest_saved,
        investment_value=investment_value,
        investment_gain=investment_gain,
        recommendation=recommendation,
    )


def compare_strategies(config: LoanConfig, amount: float, period: int) -> StrategyComparison:
    """Apply the same one-time prepayment under each strategy and compare."""
    outcomes = {}
    for strategy in (Strategy.REDUCE_TENURE, Strategy.REDUCE_EMI):
        variant = config.without_prepayments()
        variant.default_strategy = strategy
        variant.prepayments.add_one_time(amount, period, strategy)
        result = compute_schedule(variant)
        outcomes[strategy] = StrategyOutcome(
            periods=result.periods,
            total_interest=result.total_interest,
            total_payment=result.total_payment,
            final_payment=result.final_payment,
        )

    tenure = outcomes[Strategy.REDUCE_TENURE]
    emi = outcomes[Strategy.REDUCE_EMI]
    if tenure.total_interest <= emi.total_interest:
        recommendation = "REDUCE_TENURE saves more interest overall"
    else:
        recommendation = "REDUCE_EMI saves more interest in this configuration"

    return StrategyComparison(
        reduce_tenure=tenure,
        reduce_emi=emi,
        interest_difference=round_currency(emi.total_interest - tenure.total_interest),
        tenure_difference=emi.periods - tenure.periods,
        recommendation=recommendation,
    )
