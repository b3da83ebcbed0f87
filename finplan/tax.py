"""Indian income tax (old and new regimes) and mutual fund gains tax.

Slabs, deductions, the 87A rebate, surcharge bands and the 4% health and
education cess follow the rules for assessment year 2025-26; the constants
live in :mod:`finplan.config`.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from . import config as cfg
from .data_models import Deductions, FundTaxEstimate, HraExemption, RegimeComparison, SlabTax, TaxResult
from .utils import round_currency
from .validators import ensure_valid, validate_tax_inputs


def _format_lakh(amount: float) -> str:
    if amount >= 10_000_000:
        return f"{amount / 10_000_000:.1f}Cr"
    if amount >= 100_000:
        return f"{amount / 100_000:.1f}L"
    if amount >= 1_000:
        return f"{amount / 1_000:.0f}K"
    return str(int(amount))


def slab_tax(taxable_income: float, slabs: Sequence[Tuple[float, float, float]]) -> Tuple[float, List[SlabTax]]:
    """Progressive tax over ``slabs`` and the per-slab breakdown."""
    remaining = taxable_income
    tax = 0.0
    breakdown = []
    for lower, upper, rate in slabs:
        if remaining <= 0:
            break
        width = remaining if math.isinf(upper) else min(upper - lower, remaining)
        slab_amount = width * rate / 100
        label = f"Above {_format_lakh(lower)}" if math.isinf(upper) else f"{_format_lakh(lower)} - {_format_lakh(upper)}"
        breakdown.append(SlabTax(slab=label, rate=rate, taxable_amount=round_currency(width), tax=round_currency(slab_amount)))
        tax += slab_amount
        remaining -= width
    return round_currency(tax), breakdown


def surcharge(tax: float, gross_income: float, regime: str) -> float:
    """Surcharge on income tax by gross income band."""
    if gross_income <= cfg.SURCHARGE_BANDS[0][0]:
        return 0.0
    rate: Optional[float] = None
    for upper, band_rate in cfg.SURCHARGE_BANDS[1:]:
        if gross_income <= upper:
            rate = band_rate
            break
    if rate is None:
        rate = cfg.SURCHARGE_TOP_NEW if regime == "new" else cfg.SURCHARGE_TOP_OLD
    return round_currency(tax * rate / 100)


def _finish(
    regime: str,
    gross_income: float,
    total_deductions: float,
    slabs,
    rebate_limit: float,
    rebate_max: float,
) -> TaxResult:
    taxable = max(gross_income - total_deductions, 0.0)
    base_tax, breakdown = slab_tax(taxable, slabs)
    rebate = min(base_tax, rebate_max) if taxable <= rebate_limit else 0.0

    after_rebate = base_tax - rebate
    extra = surcharge(after_rebate, gross_income, regime)
    before_cess = after_rebate + extra
    cess = round_currency(before_cess * cfg.CESS_RATE)
    total = round_currency(before_cess + cess)

    return TaxResult(
        regime=regime,
        gross_income=round_currency(gross_income),
        total_deductions=round_currency(total_deductions),
        taxable_income=round_currency(taxable),
        base_tax=round_currency(base_tax),
        rebate=round_currency(rebate),
        surcharge=round_currency(extra),
        cess=cess,
        total_tax=total,
        effective_rate=round_currency(total / gross_income * 100) if gross_income > 0 else 0.0,
        slab_breakdown=breakdown,
    )


def old_regime(gross_income: float, deductions: Optional[Deductions] = None) -> TaxResult:
    """Tax under the old regime with standard deduction and capped deductions."""
    d = deductions or Deductions()
    ensure_valid(validate_tax_inputs(gross_income, vars(d)))

    total = (
        cfg.OLD_STANDARD_DEDUCTION
        + min(d.sec_80c, cfg.SEC_80C_MAX)
        + min(d.sec_80d, cfg.SEC_80D_MAX)
        + min(d.sec_80ccd, cfg.SEC_80CCD_1B_MAX)
        + d.hra
        + d.other_exemptions
    )
    return _finish("old", gross_income, total, cfg.OLD_REGIME_SLABS, cfg.OLD_REBATE_INCOME_LIMIT, cfg.OLD_REBATE_MAX)


def new_regime(gross_income: float) -> TaxResult:
    """Tax under the new regime; only the standard deduction applies."""
    ensure_valid(validate_tax_inputs(gross_income))
    return _finish(
        "new",
        gross_income,
        cfg.NEW_STANDARD_DEDUCTION,
        cfg.NEW_REGIME_SLABS,
        cfg.NEW_REBATE_INCOME_LIMIT,
        cfg.NEW_REBATE_MAX,
    )


def compare_regimes(gross_income: float, deductions: Optional[Deductions] = None) -> RegimeComparison:
    """Tax under both regimes; ties favour the old regime."""
    old = old_regime(gross_income, deductions)
    new = new_regime(gross_income)
    if old.total_tax <= new.total_tax:
        recommendation = "Old Regime is beneficial"
    else:
        recommendation = "New Regime is beneficial"
    return RegimeComparison(
        old_tax=old.total_tax,
        new_tax=new.total_tax,
        savings=round_currency(abs(old.total_tax - new.total_tax)),
        recommendation=recommendation,
        old_result=old,
        new_result=new,
    )


def hra_exemption(basic_salary: float, hra: float, rent_paid: float, metro: bool = False) -> HraExemption:
    """HRA exemption: the least of actual HRA, 50% (metro) or 40% of basic,
    and rent paid minus 10% of basic."""
    if basic_salary <= 0 or hra <= 0 or rent_paid <= 0:
        return HraExemption(exemption=0.0, actual_hra=hra, salary_percent=0.0, rent_minus_basic=0.0)

    salary_percent = basic_salary * (0.5 if metro else 0.4)
    rent_minus_basic = max(rent_paid - basic_salary * 0.1, 0.0)
    return HraExemption(
        exemption=round_currency(min(hra, salary_percent, rent_minus_basic)),
        actual_hra=round_currency(hra),
        salary_percent=round_currency(salary_percent),
        rent_minus_basic=round_currency(rent_minus_basic),
    )


def _annualized(value: float, invested: float, years: float) -> float:
    if years <= 0 or invested <= 0:
        return 0.0
    return ((value / invested) ** (1 / years) - 1) * 100


def fund_gains_tax(
    invested: float,
    current_value: float,
    holding_years: float,
    fund_type: str = "equity",
    slab_rate: float = 30.0,
) -> FundTaxEstimate:
    """Tax on redeeming a mutual fund holding, cess included.

    Equity held a year or more pays LTCG above the exemption, shorter holdings
    pay STCG; debt gains are taxed at ``slab_rate``.
    """
    gain = current_value - invested
    if gain <= 0:
        return FundTaxEstimate(
            gain=round_currency(gain),
            taxable_gain=0.0,
            tax=0.0,
            post_tax_value=round_currency(current_value),
            effective_return=_annualized(current_value, invested, holding_years),
        )

    if fund_type == "equity":
        if holding_years >= 1:
            taxable = max(gain - cfg.EQUITY_LTCG_EXEMPTION, 0.0)
            tax = taxable * cfg.EQUITY_LTCG_RATE
        else:
            taxable = gain
            tax = gain * cfg.EQUITY_STCG_RATE
    elif fund_type == "debt":
        taxable = gain
        tax = gain * slab_rate / 100
    else:
        raise ValueError(f"Unknown fund type: {fund_type}")

    tax = round_currency(tax * (1 + cfg.CESS_RATE))
    post_tax = round_currency(current_value - tax)
    return FundTaxEstimate(
        gain=round_currency(gain),
        taxable_gain=round_currency(taxable),
        tax=tax,
        post_tax_value=post_tax,
        effective_return=_annualized(post_tax, invested, holding_years),
    )
