"""Goal-seeking SIP calculator.

Finds the monthly contribution that grows to a target corpus. Without step-up
the future value has a closed form and is inverted with Newton-Raphson,
falling back to bisection when the derivative vanishes or the iteration
budget runs out. With an annual step-up there is no closed form, so the
contribution is found by bisection over a month-by-month simulation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Union

from . import config as cfg
from .data_models import GoalProbability, GoalResult, ScenarioOutcome
from .utils import monthly_rate, round_currency, round_up_to
from .validators import ensure_valid, validate_sip_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Converged:
    """Newton-Raphson reached the tolerance band."""

    value: float


@dataclass(frozen=True)
class Fallback:
    """Answer produced by bisection; ``within_tolerance`` is False when its
    iteration budget ran out before reaching the band."""

    value: float
    within_tolerance: bool


RootResult = Union[Converged, Fallback]


def future_value(contribution: float, years: float, annual_return: float) -> float:
    """Future value of a monthly SIP invested at the start of each month.

    ``FV = P * ((1 + r)^n - 1) / r * (1 + r)``, or ``P * n`` at zero return.
    """
    n = years * 12
    r = monthly_rate(annual_return)
    if r == 0:
        return contribution * n
    return contribution * (((1 + r) ** n - 1) / r) * (1 + r)


def step_up_future_value(initial: float, years: int, annual_return: float, step_up_percent: float) -> float:
    """Future value when the contribution grows by ``step_up_percent`` each year."""
    total = 0.0
    contribution = initial
    r = monthly_rate(annual_return)
    for year in range(1, years + 1):
        for _ in range(12):
            total = (total + contribution) * (1 + r)
        if year < years:
            contribution *= 1 + step_up_percent / 100
    return total


def step_up_total_invested(initial: float, years: int, step_up_percent: float) -> float:
    total = 0.0
    contribution = initial
    for year in range(1, years + 1):
        total += contribution * 12
        if year < years:
            contribution *= 1 + step_up_percent / 100
    return total


def bisect(fv: Callable[[float], float], target: float) -> Fallback:
    """Bisection for the contribution over ``[100, target / 12]``."""
    low = cfg.GOAL_MIN_CONTRIBUTION
    high = target / 12
    for _ in range(cfg.GOAL_MAX_ITERATIONS):
        if high - low <= 1:
            break
        mid = (low + high) / 2
        value = fv(mid)
        if abs(value - target) < cfg.GOAL_TOLERANCE:
            return Fallback(mid, True)
        if value < target:
            low = mid
        else:
            high = mid
    mid = (low + high) / 2
    return Fallback(mid, abs(fv(mid) - target) < cfg.GOAL_TOLERANCE)


def newton_raphson(fv: Callable[[float], float], target: float, initial_guess: float) -> RootResult:
    """Newton-Raphson with a finite-difference derivative, then bisection."""
    guess = initial_guess
    for _ in range(cfg.GOAL_MAX_ITERATIONS):
        value = fv(guess)
        error = value - target
        if abs(error) < cfg.GOAL_TOLERANCE:
            return Converged(guess)

        step = cfg.GOAL_DERIVATIVE_STEP
        derivative = (fv(guess + step) - value) / step
        if abs(derivative) < cfg.GOAL_MIN_DERIVATIVE:
            logger.warning("Newton-Raphson derivative near zero (%.6f); using bisection", derivative)
            break

        guess -= error / derivative
        if guess < cfg.GOAL_MIN_CONTRIBUTION:
            guess = cfg.GOAL_MIN_CONTRIBUTION
    else:
        logger.warning("Newton-Raphson did not converge, using bisection")

    return bisect(fv, target)


def calculate_required_sip(
    target_amount: float,
    years: int,
    annual_return: float,
    inflation_rate: float = 0.0,
    step_up_percent: float = 0.0,
) -> GoalResult:
    """Monthly SIP needed to reach ``target_amount`` (in today's money when
    ``inflation_rate`` is given) after ``years``."""
    ensure_valid(
        validate_sip_inputs(
            target_amount, years, annual_return, inflation_rate, step_up_percent, label="Target amount"
        )
    )
    if inflation_rate > 0:
        target = target_amount * (1 + inflation_rate / 100) ** years
    else:
        target = target_amount

    if step_up_percent > 0:
        def fv(c: float) -> float:
            return step_up_future_value(c, years, annual_return, step_up_percent)

        root: RootResult = bisect(fv, target)
    else:
        def fv(c: float) -> float:
            return future_value(c, years, annual_return)

        root = newton_raphson(fv, target, target / (years * 12))

    contribution = root.value
    achieved = fv(contribution)
    if step_up_percent > 0:
        invested = step_up_total_invested(contribution, years, step_up_percent)
    else:
        invested = contribution * years * 12

    if inflation_rate > 0:
        real_value = achieved / (1 + inflation_rate / 100) ** years
    else:
        real_value = achieved

    if isinstance(root, Converged):
        method, converged = "newton-raphson", True
    else:
        method, converged = "bisection", root.within_tolerance

    return GoalResult(
        contribution=contribution,
        required_contribution=round_up_to(contribution, cfg.GOAL_ROUNDING_STEP),
        target_amount=target_amount,
        inflation_adjusted_target=round_currency(target),
        achieved_amount=round_currency(achieved),
        total_contributed=round_currency(invested),
        wealth_gain=round_currency(achieved - invested),
        real_value=round_currency(real_value),
        years=years,
        annual_return=annual_return,
        inflation_rate=inflation_rate,
        step_up_percent=step_up_percent,
        method=method,
        converged=converged,
    )


def calculate_scenarios(
    target_amount: float,
    years: int,
    return_scenarios: Dict[str, float],
    inflation_rate: float = 0.0,
) -> Dict[str, GoalResult]:
    """Required SIP per named return rate, without step-up."""
    return {
        name: calculate_required_sip(target_amount, years, rate, inflation_rate)
        for name, rate in return_scenarios.items()
    }


def goal_probability(
    monthly_sip: float,
    target_amount: float,
    years: int,
    expected_return: float,
    volatility: float = 5.0,
) -> GoalProbability:
    """Share of five return scenarios around ``expected_return`` that reach
    the target with a fixed SIP. No statistical model is implied."""
    rates = {
        "worst": expected_return - volatility,
        "pessimistic": expected_return - volatility / 2,
        "realistic": expected_return,
        "optimistic": expected_return + volatility / 2,
        "best": expected_return + volatility,
    }

    outcomes: Dict[str, ScenarioOutcome] = {}
    successes = 0
    for name, rate in rates.items():
        value = future_value(monthly_sip, years, rate)
        success = value >= target_amount
        outcomes[name] = ScenarioOutcome(
            return_rate=rate,
            achieved_amount=round_currency(value),
            success=success,
            shortfall=round_currency(max(0.0, target_amount - value)),
        )
        if success:
            successes += 1

    if successes >= 3:
        recommendation = "Likely to achieve goal"
    elif successes >= 2:
        recommendation = "Moderate chance of achieving goal"
    else:
        recommendation = "Consider increasing SIP or duration"

    return GoalProbability(
        probability=successes * 100 / len(rates),
        scenarios=outcomes,
        recommendation=recommendation,
    )
