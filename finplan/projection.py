"""Forward SIP projection and XIRR.

The projection invests at the *beginning* of each month (the contribution
earns a full month of return), which is the Indian mutual-fund SIP
convention and the same convention the goal seeker's closed form uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from . import config as cfg
from .data_models import CashFlow, ProjectionResult, ProjectionRow, StepUp, XirrResult
from .errors import ConfigurationError
from .rates import FlatRate, RateProvider, ReturnScenario
from .utils import is_year_boundary, monthly_rate, round_currency, year_of_period
from .validators import validate_sip_inputs, validate_step_up

logger = logging.getLogger(__name__)


@dataclass
class ProjectionConfig:
    """Inputs of a forward SIP projection.

    ``scenarios`` maps a scenario name to the provider of its yearly return.
    """

    monthly_amount: float
    duration_years: int
    inflation_rate: float = 0.0
    step_ups: List[StepUp] = field(default_factory=list)
    scenarios: Dict[str, RateProvider] = field(default_factory=dict)

    @classmethod
    def flat(
        cls,
        monthly_amount: float,
        duration_years: int,
        annual_return: float,
        inflation_rate: float = 0.0,
        step_up_percent: float = 0.0,
    ) -> "ProjectionConfig":
        """Single "realistic" scenario at a flat return, optional step-up from year 1."""
        step_ups = [StepUp(step_up_percent)] if step_up_percent > 0 else []
        return cls(
            monthly_amount=monthly_amount,
            duration_years=duration_years,
            inflation_rate=inflation_rate,
            step_ups=step_ups,
            scenarios={"realistic": ReturnScenario("realistic", FlatRate(annual_return))},
        )

    def validate(self) -> List[str]:
        errors = validate_sip_inputs(self.monthly_amount, self.duration_years, inflation_rate=self.inflation_rate)
        for i, step_up in enumerate(self.step_ups, 1):
            errors.extend(validate_step_up(i, step_up))
        return errors


def _apply_step_up(contribution: float, year: int, step_ups: Sequence[StepUp]) -> float:
    # first matching entry only
    for s in step_ups:
        if s.applies_to(year):
            return contribution * (1 + s.percent / 100)
    return contribution


def effective_return(invested: float, final_value: float, years: float) -> float:
    """Approximate annualized return in percent, ``(FV/invested)^(1/years) - 1``.

    This is not an IRR; use :func:`xirr` for dated cash flows.
    """
    if invested <= 0 or years <= 0:
        return 0.0
    return ((final_value / invested) ** (1 / years) - 1) * 100


def project(config: ProjectionConfig, scenario: str = "realistic") -> ProjectionResult:
    """Simulate monthly contributions forward for one return scenario.

    Returns every period in ``rows``; use ``ProjectionResult.sampled`` for a
    compact view.
    """
    errors = config.validate()
    if errors:
        raise ConfigurationError(errors)
    provider = config.scenarios.get(scenario)
    if provider is None:
        raise ValueError(f"Return scenario '{scenario}' not found")

    balance = 0.0
    total = 0.0
    contribution = float(config.monthly_amount)
    periods = config.duration_years * 12
    monthly_inflation = config.inflation_rate / 100 / 12
    rows: List[ProjectionRow] = []

    for period in range(1, periods + 1):
        year = year_of_period(period)
        if is_year_boundary(period):
            contribution = _apply_step_up(contribution, year, config.step_ups)

        rate = provider.rate_for_year(year)
        total += contribution
        balance = (balance + contribution) * (1 + monthly_rate(rate))

        if config.inflation_rate > 0:
            deflated = balance / (1 + monthly_inflation) ** period
        else:
            deflated = balance

        rows.append(
            ProjectionRow(
                period=period,
                year=year,
                contribution=round_currency(contribution),
                balance=round_currency(balance),
                inflation_adjusted=round_currency(deflated),
                total_contributed=round_currency(total),
                return_rate=rate,
            )
        )

    if config.inflation_rate > 0:
        real_value = balance / (1 + config.inflation_rate / 100) ** config.duration_years
    else:
        real_value = balance

    logger.debug("Projected %s scenario to %.2f over %d periods", scenario, balance, periods)

    return ProjectionResult(
        scenario=scenario,
        final_value=round_currency(balance),
        total_contributed=round_currency(total),
        wealth_gain=round_currency(balance - total),
        real_value=round_currency(real_value),
        effective_return=effective_return(total, balance, config.duration_years),
        rows=rows,
    )


def project_all_scenarios(config: ProjectionConfig) -> Dict[str, ProjectionResult]:
    """Run every configured scenario independently."""
    return {name: project(config, name) for name in config.scenarios}


def xirr(cash_flows: Sequence[CashFlow], guess: float = 0.1) -> XirrResult:
    """Annualized internal rate of return of dated cash flows.

    Newton-Raphson on the NPV with time measured in years of 365.25 days from
    the first flow. A near-zero derivative or exhausted iterations return the
    current estimate flagged ``converged=False`` instead of raising. The rate
    is reported in percent.
    """
    if not cash_flows or len(cash_flows) < 2:
        raise ValueError("At least 2 cash flows required")
    if not any(cf.amount > 0 for cf in cash_flows) or not any(cf.amount < 0 for cf in cash_flows):
        raise ValueError("Cash flows must have at least one positive and one negative value")

    d0 = cash_flows[0].date
    times = [(cf.date - d0).days / cfg.XIRR_DAYS_PER_YEAR for cf in cash_flows]
    rate = guess

    for _ in range(cfg.XIRR_MAX_ITERATIONS):
        npv = 0.0
        dnpv = 0.0
        for cf, t in zip(cash_flows, times):
            denom = (1 + rate) ** t
            npv += cf.amount / denom
            dnpv -= t * cf.amount / (denom * (1 + rate))

        if abs(npv) < cfg.XIRR_TOLERANCE:
            return XirrResult(xirr=round_currency(rate * 100), converged=True)
        if abs(dnpv) < cfg.XIRR_MIN_DERIVATIVE:
            logger.warning("XIRR derivative vanished at rate %.6f; returning best effort", rate)
            return XirrResult(xirr=round_currency(rate * 100), converged=False)

        rate -= npv / dnpv
        # keep (1 + rate) positive
        rate = min(max(rate, -0.99), 100.0)

    logger.warning("XIRR did not converge after %d iterations", cfg.XIRR_MAX_ITERATIONS)
    return XirrResult(xirr=round_currency(rate * 100), converged=False)
