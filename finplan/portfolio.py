"""Portfolio views over several SIPs: aggregation, allocation and rebalancing."""

from __future__ import annotations

from typing import List, Sequence

from .data_models import (
    AllocationShare,
    AssetAllocation,
    HoldingAllocation,
    PortfolioSummary,
    RebalanceAction,
    SipHolding,
)
from .utils import round_currency
from .validators import ensure_valid, validate_allocations, validate_holdings


def aggregate_portfolio(holdings: Sequence[SipHolding]) -> PortfolioSummary:
    """Totals across holdings and each holding's share of the current value.

    ``weighted_return`` weights each holding's return by its current value.
    An empty portfolio yields zeros and no allocations.
    """
    ensure_valid(validate_holdings(holdings))
    total_monthly = sum(h.monthly_amount for h in holdings)
    total_invested = sum(h.invested_amount for h in holdings)
    total_value = sum(h.current_value for h in holdings)

    weighted_return = 0.0
    if total_value > 0:
        weighted_return = sum(h.current_value / total_value * h.return_rate for h in holdings)

    allocations = [
        HoldingAllocation(
            name=h.name,
            monthly_amount=round_currency(h.monthly_amount),
            invested_amount=round_currency(h.invested_amount),
            current_value=round_currency(h.current_value),
            gain=round_currency(h.current_value - h.invested_amount),
            allocation_percent=round_currency(h.current_value / total_value * 100) if total_value > 0 else 0.0,
        )
        for h in holdings
    ]

    return PortfolioSummary(
        total_monthly=round_currency(total_monthly),
        total_invested=round_currency(total_invested),
        total_value=round_currency(total_value),
        total_gain=round_currency(total_value - total_invested),
        weighted_return=round_currency(weighted_return),
        allocations=allocations,
    )


def _total_value(assets: Sequence[AssetAllocation]) -> float:
    return sum(a.current_value for a in assets)


def current_allocation(assets: Sequence[AssetAllocation]) -> List[AllocationShare]:
    ensure_valid(validate_allocations(assets))
    total = _total_value(assets)
    return [
        AllocationShare(
            name=a.name,
            current_value=round_currency(a.current_value),
            current_percent=round_currency(a.current_value / total * 100) if total > 0 else 0.0,
            target_percent=a.target_percent,
        )
        for a in assets
    ]


def rebalance(assets: Sequence[AssetAllocation]) -> List[RebalanceAction]:
    """Amount to buy (positive) or sell (negative) per asset to hit its target
    share of the current total. Cent-level differences are a HOLD."""
    ensure_valid(validate_allocations(assets))
    total = _total_value(assets)
    actions = []
    for a in assets:
        target_value = a.target_percent / 100 * total
        amount = round_currency(target_value - a.current_value)
        if amount > 0:
            action = "BUY"
        elif amount < 0:
            action = "SELL"
        else:
            action = "HOLD"
        actions.append(
            RebalanceAction(
                name=a.name,
                current_value=round_currency(a.current_value),
                target_value=round_currency(target_value),
                rebalance_amount=amount,
                action=action,
            )
        )
    return actions
