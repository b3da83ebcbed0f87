"""Loan configuration: rate schedule, prepayment plan and validation."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import List, Optional

from .data_models import (
    AnnualPrepayment,
    OneTimePrepayment,
    PrepaymentAt,
    RatePeriod,
    RecurringPrepayment,
    Strategy,
)
from .validators import validate_prepayment, validate_rate_period


class RateSchedule:
    """Ordered interest rate periods.

    Overlapping periods are allowed. The rate for a period is the rate of the
    *last* entry (in start order) whose range contains it, so a fixed-range
    override added after an open-ended base rate wins inside its range and the
    base rate applies again once the override ends.
    """

    def __init__(self, periods: Optional[List[RatePeriod]] = None) -> None:
        self.periods: List[RatePeriod] = []
        for p in periods or []:
            self.add_period(p.start_period, p.rate, p.end_period)

    def add_period(self, start: int, rate: float, end: Optional[int] = None) -> None:
        self.periods.append(RatePeriod(start, rate, end))
        # stable sort keeps insertion order for equal starts
        self.periods.sort(key=lambda p: p.start_period)

    def rate_at(self, period: int) -> float:
        applicable = None
        for p in self.periods:
            if p.is_active(period):
                applicable = p.rate
        if applicable is not None:
            return applicable
        return self.periods[0].rate if self.periods else 0.0

    @property
    def initial_rate(self) -> float:
        return self.periods[0].rate if self.periods else 0.0

    def overlap_errors(self) -> List[str]:
        # adjacent pairs only; open-ended periods may be overridden
        errors: List[str] = []
        for cur, nxt in zip(self.periods, self.periods[1:]):
            if cur.end_period is not None and nxt.start_period <= cur.end_period:
                errors.append(f"Rate periods have explicit overlap at month {nxt.start_period}")
        return errors

    def __len__(self) -> int:
        return len(self.periods)


class PrepaymentPlan:
    """Recurring, annual and one-time prepayments of a loan."""

    def __init__(self) -> None:
        self.recurring: List[RecurringPrepayment] = []
        self.annual: List[AnnualPrepayment] = []
        self.one_time: List[OneTimePrepayment] = []

    def add_recurring(
        self,
        amount: float,
        start_period: int = 1,
        end_period: Optional[int] = None,
        strategy: Optional[Strategy] = None,
    ) -> None:
        self.recurring.append(RecurringPrepayment(amount, start_period, end_period, Strategy.parse(strategy)))

    def add_annual(
        self,
        amount: float,
        target_offset: int = 12,
        start_year: int = 1,
        end_year: Optional[int] = None,
        strategy: Optional[Strategy] = None,
    ) -> None:
        self.annual.append(AnnualPrepayment(amount, target_offset, start_year, end_year, Strategy.parse(strategy)))

    def add_one_time(self, amount: float, period: int, strategy: Optional[Strategy] = None) -> None:
        self.one_time.append(OneTimePrepayment(amount, period, Strategy.parse(strategy)))

    def entries(self):
        """All entries in evaluation order: recurring, annual, one-time."""
        yield from self.recurring
        yield from self.annual
        yield from self.one_time

    def amount_and_strategy_at(self, period: int) -> PrepaymentAt:
        total = 0.0
        kinds: List[str] = []
        strategy: Optional[Strategy] = None
        for entry in self.entries():
            if not entry.is_active(period):
                continue
            total += entry.amount
            kinds.append(entry.kind)
            if entry.strategy is not None:
                strategy = entry.strategy
        return PrepaymentAt(amount=total, kinds=kinds, strategy=strategy)

    def __bool__(self) -> bool:
        return bool(self.recurring or self.annual or self.one_time)


@dataclass
class LoanConfig:
    """Configuration of a loan simulation.

    ``base_tenure`` is the contractual number of monthly periods used for the
    initial payment; the payment is computed from the first rate period.
    """

    principal: float
    base_tenure: int
    rates: RateSchedule = field(default_factory=RateSchedule)
    prepayments: PrepaymentPlan = field(default_factory=PrepaymentPlan)
    default_strategy: Strategy = Strategy.REDUCE_TENURE

    @classmethod
    def flat(cls, principal: float, rate: float, tenure: int, **kwargs) -> "LoanConfig":
        """Build a configuration with a single rate for the whole loan."""
        config = cls(principal=principal, base_tenure=tenure, **kwargs)
        config.rates.add_period(1, rate)
        return config

    def add_rate_period(self, start: int, rate: float, end: Optional[int] = None) -> None:
        self.rates.add_period(start, rate, end)

    def validate(self) -> List[str]:
        errors: List[str] = []
        if self.principal <= 0:
            errors.append("Principal must be greater than 0")
        if self.base_tenure <= 0:
            errors.append("Tenure must be greater than 0")
        if len(self.rates) == 0:
            errors.append("At least one interest rate period is required")
        for i, period in enumerate(self.rates.periods, 1):
            errors.extend(validate_rate_period(i, period))
        errors.extend(self.rates.overlap_errors())
        for i, entry in enumerate(self.prepayments.entries(), 1):
            errors.extend(validate_prepayment(i, entry))
        return errors

    def without_prepayments(self) -> "LoanConfig":
        """Independent copy with the same principal, tenure, rates and default
        strategy but an empty prepayment plan."""
        return LoanConfig(
            principal=self.principal,
            base_tenure=self.base_tenure,
            rates=copy.deepcopy(self.rates),
            prepayments=PrepaymentPlan(),
            default_strategy=self.default_strategy,
        )
