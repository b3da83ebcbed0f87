"""Data models for the finance engines.

This module defines dataclasses representing the entities used by the loan
and investment simulators: rate periods, the three prepayment kinds, ledger
rows and the result records produced by each engine. Inputs are mutable
dataclasses so callers can build them up step by step; everything an engine
emits is frozen so a finished result cannot be altered after the fact.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from . import config as cfg
from .utils import is_year_boundary, month_in_year, year_of_period


class Strategy(str, enum.Enum):
    """How a prepayment is applied to the loan.

    ``REDUCE_TENURE`` keeps the payment constant so the loan ends earlier.
    ``REDUCE_EMI`` re-amortizes the remaining balance into a lower payment.
    """

    REDUCE_TENURE = "REDUCE_TENURE"
    REDUCE_EMI = "REDUCE_EMI"

    @classmethod
    def parse(cls, value: "str | Strategy | None") -> Optional["Strategy"]:
        if value is None or isinstance(value, Strategy):
            return value
        text = str(value).strip().upper().replace("-", "_")
        aliases = {"TERM": "REDUCE_TENURE", "TENURE": "REDUCE_TENURE", "EMI": "REDUCE_EMI", "INSTALLMENT": "REDUCE_EMI"}
        text = aliases.get(text, text)
        try:
            return cls(text)
        except ValueError as exc:
            raise ValueError(f"Unknown prepayment strategy: {value}") from exc


def resolve_strategy(override: Optional[Strategy], default: Strategy) -> Strategy:
    """Return the strategy for a prepayment: the entry override, else the plan default."""
    return override if override is not None else default


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class Serializable:
    """Mixin giving result dataclasses a JSON-friendly ``to_dict``."""

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))  # type: ignore[call-overload]


# ── Loan inputs ───────────────────────────────────────────────────────


@dataclass
class RatePeriod:
    """An interest rate valid from ``start_period`` to ``end_period``.

    Attributes
    ----------
    start_period: int
        First 1-indexed period the rate applies to.
    rate: float
        Annual nominal interest rate in percent.
    end_period: Optional[int]
        Last period (inclusive). ``None`` means until the end of the loan.
    """

    start_period: int
    rate: float
    end_period: Optional[int] = None

    def is_active(self, period: int) -> bool:
        return period >= self.start_period and (self.end_period is None or period <= self.end_period)


@dataclass
class RecurringPrepayment:
    """The same extra amount paid every period inside a range."""

    amount: float
    start_period: int = 1
    end_period: Optional[int] = None
    strategy: Optional[Strategy] = None

    kind = "monthly"

    def is_active(self, period: int) -> bool:
        return period >= self.start_period and (self.end_period is None or period <= self.end_period)


@dataclass
class AnnualPrepayment:
    """An extra amount paid once a year at a fixed month offset (1-12)."""

    amount: float
    target_offset: int = 12
    start_year: int = 1
    end_year: Optional[int] = None
    strategy: Optional[Strategy] = None

    kind = "yearly"

    def is_active(self, period: int) -> bool:
        year = year_of_period(period)
        return (
            month_in_year(period) == self.target_offset
            and year >= self.start_year
            and (self.end_year is None or year <= self.end_year)
        )


@dataclass
class OneTimePrepayment:
    """A lump sum paid in a single period."""

    amount: float
    period: int
    strategy: Optional[Strategy] = None

    kind = "lump-sum"

    def is_active(self, period: int) -> bool:
        return period == self.period


@dataclass(frozen=True)
class PrepaymentAt:
    """Prepayment resolved for one period: the summed amount, contributing
    kinds and the last non-null strategy override among active entries."""

    amount: float
    kinds: List[str]
    strategy: Optional[Strategy]

    @property
    def label(self) -> str:
        return " + ".join(self.kinds) if self.kinds else "none"


# ── Loan outputs ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class LedgerRow(Serializable):
    """One simulated period of a loan.

    Currency fields are rounded to cents when the row is created; the
    simulation itself keeps full precision. ``strategy`` is only set on rows
    where a prepayment was applied.
    """

    period: int
    balance: float
    interest: float
    principal: float
    payment: float
    prepayment: float
    prepayment_kind: str
    rate: float
    strategy: Optional[Strategy] = None

    def as_export_row(self) -> Dict[str, Any]:
        """Flat row for tabular export."""
        return {
            "period": self.period,
            "payment": self.payment,
            "principal": self.principal,
            "interest": self.interest,
            "prepayment": self.prepayment,
            "balance": self.balance,
            "rate": self.rate,
        }


@dataclass(frozen=True)
class LoanResult(Serializable):
    """Summary metrics and ledger of one loan simulation."""

    periods: int
    total_interest: float
    total_principal: float
    total_payment: float
    total_prepayment: float
    interest_saved: float
    periods_shortened: int
    initial_payment: float
    final_payment: float
    baseline_periods: int
    baseline_total_interest: float
    average_rate: float
    ledger: List[LedgerRow] = field(repr=False)

    def export_rows(self) -> List[Dict[str, Any]]:
        return [row.as_export_row() for row in self.ledger]


@dataclass(frozen=True)
class BalanceSnapshot(Serializable):
    """Outstanding balance and cumulative totals at a given period."""

    period: int
    balance: float
    total_interest_paid: float
    total_principal_paid: float


@dataclass(frozen=True)
class TaxBenefit(Serializable):
    eligible_deduction: float
    tax_saved: float


@dataclass(frozen=True)
class BreakEvenResult(Serializable):
    """Prepaying versus investing the same amount elsewhere."""

    break_even_period: Optional[int]
    interest_saved: float
    investment_value: float
    investment_gain: float
    recommendation: str


@dataclass(frozen=True)
class StrategyOutcome(Serializable):
    periods: int
    total_interest: float
    total_payment: float
    final_payment: float


@dataclass(frozen=True)
class StrategyComparison(Serializable):
    reduce_tenure: StrategyOutcome
    reduce_emi: StrategyOutcome
    interest_difference: float
    tenure_difference: int
    recommendation: str


@dataclass(frozen=True)
class ScenarioMetrics(Serializable):
    """One named loan scenario measured against the base scenario.

    Positive ``interest_saved_vs_base`` and ``tenure_reduced_vs_base`` mean the
    scenario is cheaper or shorter than the base.
    """

    id: str
    name: str
    total_interest: float
    total_payment: float
    periods: int
    interest_saved_vs_base: float
    tenure_reduced_vs_base: int
    is_base: bool


# ── Investment inputs ─────────────────────────────────────────────────


@dataclass
class StepUp:
    """Annual contribution increase of ``percent`` for years in range."""

    percent: float
    start_year: int = 1
    end_year: Optional[int] = None

    def applies_to(self, year: int) -> bool:
        return year >= self.start_year and (self.end_year is None or year <= self.end_year)


@dataclass(frozen=True)
class CashFlow:
    """A dated cash flow; negative for investments, positive for redemptions."""

    amount: float
    date: date


# ── Investment outputs ────────────────────────────────────────────────


@dataclass(frozen=True)
class ProjectionRow(Serializable):
    period: int
    year: int
    contribution: float
    balance: float
    inflation_adjusted: float
    total_contributed: float
    return_rate: float


@dataclass(frozen=True)
class ProjectionResult(Serializable):
    """Forward SIP projection for one return scenario."""

    scenario: str
    final_value: float
    total_contributed: float
    wealth_gain: float
    real_value: float
    effective_return: float
    rows: List[ProjectionRow] = field(repr=False)

    def sampled(self, every: int = cfg.SAMPLE_EVERY) -> List[ProjectionRow]:
        """Rows for period 1, every ``every``-th period, the first period of each
        new year and the final period."""
        if not self.rows:
            return []
        last = self.rows[-1].period
        return [
            r
            for r in self.rows
            if r.period == 1 or r.period % every == 0 or is_year_boundary(r.period) or r.period == last
        ]


@dataclass(frozen=True)
class GoalResult(Serializable):
    """Contribution required to reach a target corpus.

    ``contribution`` is the solver's raw answer; ``required_contribution`` is
    that value rounded up to the next 100. Achieved and invested amounts are
    computed from the raw value.
    """

    contribution: float
    required_contribution: float
    target_amount: float
    inflation_adjusted_target: float
    achieved_amount: float
    total_contributed: float
    wealth_gain: float
    real_value: float
    years: float
    annual_return: float
    inflation_rate: float
    step_up_percent: float
    method: str
    converged: bool


@dataclass(frozen=True)
class ScenarioOutcome(Serializable):
    return_rate: float
    achieved_amount: float
    success: bool
    shortfall: float


@dataclass(frozen=True)
class GoalProbability(Serializable):
    probability: float
    scenarios: Dict[str, ScenarioOutcome]
    recommendation: str


@dataclass(frozen=True)
class XirrResult(Serializable):
    xirr: float
    converged: bool


@dataclass(frozen=True)
class WithdrawalRow(Serializable):
    period: int
    year: int
    balance: float
    withdrawal: float
    total_withdrawn: float


@dataclass(frozen=True)
class WithdrawalResult(Serializable):
    """Corpus depletion under periodic withdrawals."""

    initial_corpus: float
    monthly_withdrawal: float
    total_withdrawn: float
    remaining_corpus: float
    depleted_at: Optional[int]
    depleted_in_years: Optional[float]
    rows: List[WithdrawalRow] = field(repr=False)

    @property
    def lasts_through_plan(self) -> bool:
        return self.depleted_at is None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["lasts_through_plan"] = self.lasts_through_plan
        return data


@dataclass(frozen=True)
class RetirementPlan(Serializable):
    accumulation: ProjectionResult
    withdrawal: WithdrawalResult
    total_duration: float
    success: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accumulation": self.accumulation.to_dict(),
            "withdrawal": self.withdrawal.to_dict(),
            "total_duration": self.total_duration,
            "success": self.success,
        }


# ── EMI calculator ────────────────────────────────────────────────────


@dataclass(frozen=True)
class EmiSummary(Serializable):
    emi: float
    total_interest: float
    total_payment: float


@dataclass(frozen=True)
class TenureEstimate(Serializable):
    """Months needed to repay a loan with a fixed EMI."""

    tenure_months: int
    total_payment: float
    total_interest: float


@dataclass(frozen=True)
class Affordability(Serializable):
    max_loan_amount: float
    max_new_emi: float


@dataclass(frozen=True)
class EmiBreakdownRow(Serializable):
    month: int
    emi: float
    principal: float
    interest: float
    balance: float


# ── Deposits ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FixedDepositMaturity(Serializable):
    maturity_amount: float
    interest_earned: float
    effective_rate: float


@dataclass(frozen=True)
class TdsDeduction(Serializable):
    tds_rate: float
    tds_amount: float
    net_interest: float
    threshold: float


@dataclass(frozen=True)
class RecurringDepositMaturity(Serializable):
    maturity_amount: float
    total_deposited: float
    interest_earned: float


# ── Tax ───────────────────────────────────────────────────────────────


@dataclass
class Deductions:
    """Old-regime deductions claimed, in rupees per year.

    Capped amounts (80C, 80D, 80CCD(1B)) are capped by the calculator, not here.
    """

    sec_80c: float = 0.0
    sec_80d: float = 0.0
    sec_80ccd: float = 0.0
    hra: float = 0.0
    other_exemptions: float = 0.0


@dataclass(frozen=True)
class SlabTax(Serializable):
    slab: str
    rate: float
    taxable_amount: float
    tax: float


@dataclass(frozen=True)
class TaxResult(Serializable):
    regime: str
    gross_income: float
    total_deductions: float
    taxable_income: float
    base_tax: float
    rebate: float
    surcharge: float
    cess: float
    total_tax: float
    effective_rate: float
    slab_breakdown: List[SlabTax]


@dataclass(frozen=True)
class RegimeComparison(Serializable):
    old_tax: float
    new_tax: float
    savings: float
    recommendation: str
    old_result: TaxResult
    new_result: TaxResult


@dataclass(frozen=True)
class HraExemption(Serializable):
    exemption: float
    actual_hra: float
    salary_percent: float
    rent_minus_basic: float


@dataclass(frozen=True)
class FundTaxEstimate(Serializable):
    gain: float
    taxable_gain: float
    tax: float
    post_tax_value: float
    effective_return: float


# ── Portfolio ─────────────────────────────────────────────────────────


@dataclass
class SipHolding:
    """An existing SIP: what goes in each month, what went in so far and what
    it is worth now. ``return_rate`` is its annual return in percent."""

    name: str
    monthly_amount: float = 0.0
    invested_amount: float = 0.0
    current_value: float = 0.0
    return_rate: float = 0.0


@dataclass(frozen=True)
class HoldingAllocation(Serializable):
    name: str
    monthly_amount: float
    invested_amount: float
    current_value: float
    gain: float
    allocation_percent: float


@dataclass(frozen=True)
class PortfolioSummary(Serializable):
    total_monthly: float
    total_invested: float
    total_value: float
    total_gain: float
    weighted_return: float
    allocations: List[HoldingAllocation]


@dataclass
class AssetAllocation:
    name: str
    current_value: float
    target_percent: float
    monthly_sip: float = 0.0


@dataclass(frozen=True)
class AllocationShare(Serializable):
    name: str
    current_value: float
    current_percent: float
    target_percent: float


@dataclass(frozen=True)
class RebalanceAction(Serializable):
    name: str
    current_value: float
    target_value: float
    rebalance_amount: float
    action: str


# ── Financial health ──────────────────────────────────────────────────


@dataclass
class HealthInputs:
    """Monthly cash flows and balances of a household, in rupees."""

    monthly_income: float
    monthly_expenses: float = 0.0
    total_debt: float = 0.0
    monthly_emis: float = 0.0
    emergency_fund: float = 0.0
    has_insurance: bool = False
    monthly_savings: float = 0.0
    investments: float = 0.0


@dataclass(frozen=True)
class PillarScore(Serializable):
    name: str
    score: int
    max_score: int
    value: float


@dataclass(frozen=True)
class HealthScore(Serializable):
    score: int
    grade: str
    pillars: List[PillarScore]
    savings_rate: float
    debt_to_income: float
    emi_to_income: float
    emergency_months: float
    monthly_disposable: float
    has_investments: bool
    recommendations: List[str]
