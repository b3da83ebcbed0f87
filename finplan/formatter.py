"""Output helpers for the command-line calculators.

This module renders engine results as plain text: aligned label/value
summaries and tab-separated tables. Only built-in printing and string
formatting are used.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .data_models import (
    BalanceSnapshot,
    BreakEvenResult,
    EmiBreakdownRow,
    GoalProbability,
    GoalResult,
    HealthScore,
    LedgerRow,
    LoanResult,
    PortfolioSummary,
    ProjectionRow,
    ProjectionResult,
    RebalanceAction,
    RegimeComparison,
    ScenarioMetrics,
    StrategyComparison,
    WithdrawalResult,
    WithdrawalRow,
)

RULE = "-" * 72


def _print_fields(title: str, fields: Sequence[Tuple[str, object]]) -> None:
    print(title)
    print(RULE)
    for label, value in fields:
        if isinstance(value, float):
            value = f"{value:,.2f}"
        print(f"{label:<22s}: {value}")
    print(RULE)


def print_loan_summary(result: LoanResult) -> None:
    """Print the summary metrics of a loan simulation."""
    fields: List[Tuple[str, object]] = [
        ("Initial EMI", result.initial_payment),
        ("Final EMI", result.final_payment),
        ("Periods", result.periods),
        ("Total interest", result.total_interest),
        ("Total principal", result.total_principal),
        ("Total payment", result.total_payment),
        ("Average rate (%)", result.average_rate),
    ]
    if result.total_prepayment:
        fields += [
            ("Total prepayment", result.total_prepayment),
            ("Baseline periods", result.baseline_periods),
            ("Baseline interest", result.baseline_total_interest),
            ("Interest saved", result.interest_saved),
            ("Periods shortened", result.periods_shortened),
        ]
    _print_fields("Summary", fields)


def print_ledger(rows: Iterable[LedgerRow]) -> None:
    """Print loan ledger rows as a tab-separated table."""
    headers = ["Period", "Rate", "Payment", "Principal", "Interest", "Prepay", "Kind", "Balance"]
    print("\t".join(headers))
    for row in rows:
        print(
            "\t".join(
                [
                    str(row.period),
                    f"{row.rate:.2f}",
                    f"{row.payment:.2f}",
                    f"{row.principal:.2f}",
                    f"{row.interest:.2f}",
                    f"{row.prepayment:.2f}",
                    row.prepayment_kind,
                    f"{row.balance:.2f}",
                ]
            )
        )


def print_balance(snapshot: BalanceSnapshot) -> None:
    _print_fields(
        f"Balance after period {snapshot.period}",
        [
            ("Outstanding balance", snapshot.balance),
            ("Interest paid", snapshot.total_interest_paid),
            ("Principal paid", snapshot.total_principal_paid),
        ],
    )


def print_break_even(result: BreakEvenResult) -> None:
    _print_fields(
        "Prepay or invest",
        [
            ("Interest saved", result.interest_saved),
            ("Investment value", result.investment_value),
            ("Investment gain", result.investment_gain),
            ("Break-even period", result.break_even_period if result.break_even_period is not None else "never"),
        ],
    )
    print(result.recommendation)


def print_strategy_comparison(comparison: StrategyComparison) -> None:
    """Print both payoff strategies side by side.

    The difference column is REDUCE_EMI minus REDUCE_TENURE; a positive value
    means reducing the tenure is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Reduce tenure':>15s} {'Reduce EMI':>15s} {'Difference':>15s}")
    for key in ("periods", "total_interest", "total_payment", "final_payment"):
        v1 = getattr(comparison.reduce_tenure, key)
        v2 = getattr(comparison.reduce_emi, key)
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {v2 - v1:15.2f}")
    print("=" * 72)
    print(comparison.recommendation)


def print_emi_breakdown(rows: Iterable[EmiBreakdownRow]) -> None:
    print("\t".join(["Month", "EMI", "Principal", "Interest", "Balance"]))
    for row in rows:
        print(f"{row.month}\t{row.emi:.2f}\t{row.principal:.2f}\t{row.interest:.2f}\t{row.balance:.2f}")


def print_projection(result: ProjectionResult, rows: Iterable[ProjectionRow]) -> None:
    _print_fields(
        f"SIP projection ({result.scenario})",
        [
            ("Final value", result.final_value),
            ("Total invested", result.total_contributed),
            ("Wealth gain", result.wealth_gain),
            ("Real value", result.real_value),
            ("Effective return (%)", result.effective_return),
        ],
    )
    print("\t".join(["Period", "Year", "SIP", "Invested", "Balance", "Real"]))
    for row in rows:
        print(
            f"{row.period}\t{row.year}\t{row.contribution:.2f}\t{row.total_contributed:.2f}"
            f"\t{row.balance:.2f}\t{row.inflation_adjusted:.2f}"
        )


def print_goal(result: GoalResult) -> None:
    fields: List[Tuple[str, object]] = [
        ("Required monthly SIP", result.required_contribution),
        ("Target", result.target_amount),
    ]
    if result.inflation_rate:
        fields.append(("Inflation-adj. target", result.inflation_adjusted_target))
    fields += [
        ("Achieved", result.achieved_amount),
        ("Total invested", result.total_contributed),
        ("Wealth gain", result.wealth_gain),
        ("Method", result.method),
    ]
    _print_fields("Goal", fields)
    if not result.converged:
        print("Warning: solver stopped outside the tolerance band")


def print_goal_probability(result: GoalProbability) -> None:
    print(f"{'Scenario':14s} {'Return':>8s} {'Achieved':>16s} {'Shortfall':>14s}  Reached")
    for name, outcome in result.scenarios.items():
        print(
            f"{name:14s} {outcome.return_rate:8.2f} {outcome.achieved_amount:16,.2f}"
            f" {outcome.shortfall:14,.2f}  {'yes' if outcome.success else 'no'}"
        )
    print(f"Probability: {result.probability:.0f}% - {result.recommendation}")


def print_withdrawal(result: WithdrawalResult, rows: Iterable[WithdrawalRow]) -> None:
    _print_fields(
        "Withdrawal plan",
        [
            ("Initial corpus", result.initial_corpus),
            ("Monthly withdrawal", result.monthly_withdrawal),
            ("Total withdrawn", result.total_withdrawn),
            ("Remaining corpus", result.remaining_corpus),
            ("Depleted at period", result.depleted_at if result.depleted_at is not None else "never"),
        ],
    )
    print("\t".join(["Period", "Year", "Withdrawal", "Withdrawn", "Balance"]))
    for row in rows:
        print(f"{row.period}\t{row.year}\t{row.withdrawal:.2f}\t{row.total_withdrawn:.2f}\t{row.balance:.2f}")


def print_tax_comparison(comparison: RegimeComparison) -> None:
    print(f"{'':20s} {'Old regime':>15s} {'New regime':>15s}")
    for key in ("total_deductions", "taxable_income", "base_tax", "rebate", "surcharge", "cess", "total_tax"):
        print(f"{key:20s} {getattr(comparison.old_result, key):15,.2f} {getattr(comparison.new_result, key):15,.2f}")
    print(f"{comparison.recommendation} (saves {comparison.savings:,.2f})")


def print_scenario_comparison(metrics: Sequence[ScenarioMetrics]) -> None:
    """Print loan scenarios against the base scenario (marked ``*``).

    Savings columns are base minus scenario, so a positive value means the
    scenario is cheaper or shorter than the base.
    """
    print("Scenario comparison")
    print("=" * 72)
    print(f"{'Scenario':18s} {'Months':>7s} {'Interest':>15s} {'Saved vs base':>15s} {'Months saved':>13s}")
    for m in metrics:
        name = f"{m.name} *" if m.is_base else m.name
        print(
            f"{name:18s} {m.periods:7d} {m.total_interest:15,.2f}"
            f" {m.interest_saved_vs_base:15,.2f} {m.tenure_reduced_vs_base:13d}"
        )
    print("=" * 72)


def print_portfolio(summary: PortfolioSummary) -> None:
    _print_fields(
        "Portfolio",
        [
            ("Monthly SIPs", summary.total_monthly),
            ("Total invested", summary.total_invested),
            ("Current value", summary.total_value),
            ("Total gain", summary.total_gain),
            ("Weighted return (%)", summary.weighted_return),
        ],
    )
    print("\t".join(["Holding", "SIP", "Invested", "Value", "Gain", "Share %"]))
    for a in summary.allocations:
        print(
            f"{a.name}\t{a.monthly_amount:.2f}\t{a.invested_amount:.2f}\t{a.current_value:.2f}"
            f"\t{a.gain:.2f}\t{a.allocation_percent:.2f}"
        )


def print_rebalancing(actions: Iterable[RebalanceAction]) -> None:
    print("\t".join(["Asset", "Value", "Target", "Amount", "Action"]))
    for a in actions:
        print(f"{a.name}\t{a.current_value:.2f}\t{a.target_value:.2f}\t{a.rebalance_amount:.2f}\t{a.action}")


def print_health(result: HealthScore) -> None:
    print(f"Financial health: {result.score}/100 ({result.grade})")
    print(RULE)
    for p in result.pillars:
        print(f"{p.name:<22s}: {p.score:>2d}/{p.max_score}")
    print(RULE)
    for line in result.recommendations:
        print(f"- {line}")
