"""Financial health score.

Four pillars worth 25 points each: savings rate, debt load, emergency fund
cover, and insurance plus investments. Each pillar scores 25, 15 or 5 from
fixed thresholds in :mod:`finplan.config`; the total maps to a grade.
"""

from __future__ import annotations

from typing import List

from . import config as cfg
from .data_models import HealthInputs, HealthScore, PillarScore
from .utils import round_currency
from .validators import ensure_valid, validate_health_inputs


def _tiered(value: float, good: float, fair: float) -> int:
    if value >= good:
        return cfg.PILLAR_MAX_SCORE
    if value >= fair:
        return cfg.PILLAR_PARTIAL_SCORE
    return cfg.PILLAR_MIN_SCORE


def _grade(score: int) -> str:
    for floor, grade in cfg.HEALTH_GRADES:
        if score >= floor:
            return grade
    return cfg.HEALTH_GRADE_FLOOR


def savings_rate(inputs: HealthInputs) -> float:
    """Share of income left after expenses and EMIs, in percent."""
    spent = inputs.monthly_expenses + inputs.monthly_emis
    return (inputs.monthly_income - spent) / inputs.monthly_income * 100


def calculate_health_score(inputs: HealthInputs) -> HealthScore:
    ensure_valid(validate_health_inputs(inputs))

    savings = savings_rate(inputs)
    debt_to_income = inputs.total_debt / (inputs.monthly_income * 12) * 100
    emi_to_income = inputs.monthly_emis / inputs.monthly_income * 100
    # the worse of the two debt measures
    debt_load = max(debt_to_income, emi_to_income)
    monthly_need = inputs.monthly_expenses + inputs.monthly_emis
    emergency_months = inputs.emergency_fund / monthly_need if monthly_need > 0 else 0.0
    has_investments = inputs.investments > 0 or inputs.monthly_savings > 0

    if debt_load < cfg.DEBT_RATIO_GOOD:
        debt_score = cfg.PILLAR_MAX_SCORE
    elif debt_load <= cfg.DEBT_RATIO_FAIR:
        debt_score = cfg.PILLAR_PARTIAL_SCORE
    else:
        debt_score = cfg.PILLAR_MIN_SCORE

    if inputs.has_insurance and has_investments:
        cover_score = cfg.PILLAR_MAX_SCORE
    elif inputs.has_insurance or has_investments:
        cover_score = cfg.PILLAR_PARTIAL_SCORE
    else:
        cover_score = cfg.PILLAR_MIN_SCORE

    pillars = [
        PillarScore(
            "savings_rate",
            _tiered(savings, cfg.SAVINGS_RATE_GOOD, cfg.SAVINGS_RATE_FAIR),
            cfg.PILLAR_MAX_SCORE,
            round(savings, 2),
        ),
        PillarScore("debt_to_income", debt_score, cfg.PILLAR_MAX_SCORE, round(debt_load, 2)),
        PillarScore(
            "emergency_fund",
            _tiered(emergency_months, cfg.EMERGENCY_MONTHS_GOOD, cfg.EMERGENCY_MONTHS_FAIR),
            cfg.PILLAR_MAX_SCORE,
            round(emergency_months, 1),
        ),
        PillarScore("insurance_investments", cover_score, cfg.PILLAR_MAX_SCORE, float(has_investments)),
    ]
    score = sum(p.score for p in pillars)

    return HealthScore(
        score=score,
        grade=_grade(score),
        pillars=pillars,
        savings_rate=round(savings, 2),
        debt_to_income=round(debt_to_income, 2),
        emi_to_income=round(emi_to_income, 2),
        emergency_months=round(emergency_months, 1),
        monthly_disposable=round_currency(inputs.monthly_income - monthly_need),
        has_investments=has_investments,
        recommendations=health_recommendations(score, inputs),
    )


def health_recommendations(score: int, inputs: HealthInputs) -> List[str]:
    """Actionable advice for the weak pillars, plus an overall remark at the
    top and bottom of the scale."""
    advice = []
    savings = savings_rate(inputs)
    if savings < cfg.SAVINGS_RATE_FAIR:
        advice.append(
            "Your savings rate is below 10%. Review monthly expenses and identify areas to cut back. "
            "Aim to save at least 20% of your income."
        )
    elif savings < cfg.SAVINGS_RATE_GOOD:
        advice.append(
            "Your savings rate is moderate (10-20%). Try to increase it to at least 20% "
            "by optimizing discretionary spending."
        )

    emi_to_income = inputs.monthly_emis / inputs.monthly_income * 100
    if emi_to_income > cfg.DEBT_RATIO_FAIR:
        advice.append(
            f"Your EMI-to-income ratio is {emi_to_income:.0f}%, which is very high. "
            "Consider prepaying high-interest loans or consolidating debt."
        )
    elif emi_to_income > cfg.DEBT_RATIO_GOOD:
        advice.append(
            f"Your EMI-to-income ratio is {emi_to_income:.0f}%. "
            "Try to bring it below 30% by accelerating loan repayments."
        )
    if inputs.total_debt / (inputs.monthly_income * 12) * 100 > cfg.DEBT_EXCEEDS_INCOME:
        advice.append(
            "Your total debt exceeds your annual income. "
            "Prioritize debt repayment, starting with the highest interest-rate loans."
        )

    monthly_need = inputs.monthly_expenses + inputs.monthly_emis
    months = inputs.emergency_fund / monthly_need if monthly_need > 0 else 0.0
    if months < cfg.EMERGENCY_MONTHS_FAIR:
        target = round_currency(monthly_need * cfg.EMERGENCY_MONTHS_GOOD)
        advice.append(
            f"Your emergency fund covers only {months:.1f} months. Build it up to at least "
            f"6 months of expenses (approximately {target:,.0f})."
        )
    elif months < cfg.EMERGENCY_MONTHS_GOOD:
        advice.append(
            f"Your emergency fund covers {months:.1f} months. Top it up to 6 months for a comfortable safety net."
        )

    if not inputs.has_insurance:
        advice.append(
            "You lack adequate insurance coverage. "
            "Get a term life insurance (10x annual income) and a health insurance policy."
        )

    if inputs.investments == 0 and inputs.monthly_savings == 0:
        advice.append(
            "You have no active investments. Start a SIP in a diversified equity mutual fund, "
            "even with a small amount."
        )
    elif 0 < inputs.monthly_savings < inputs.monthly_income * 0.1:
        advice.append(
            "Your monthly investment is less than 10% of income. "
            "Consider increasing your SIP to build long-term wealth."
        )

    if score >= cfg.HEALTH_GRADES[0][0]:
        advice.append(
            "Your financial health is excellent. "
            "Focus on optimizing tax efficiency and exploring higher-return investment options."
        )
    elif score < cfg.HEALTH_GRADES[-1][0]:
        advice.append(
            "Your financial health needs urgent attention. "
            "Consider consulting a certified financial planner for a personalized action plan."
        )
    return advice
