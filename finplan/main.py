"""Command-line interface for the finance calculators.

This module uses ``click`` to implement a multi-command interface over the
engines: loan schedules with rate changes and prepayments, what-if analyses,
EMI, SIP projections and goal seeking, withdrawal planning, deposits, income
tax, XIRR, named loan scenario comparison, portfolio aggregation and
rebalancing, and a financial health score. Loan schedules can be printed or
exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import functools
import json
import logging
import shlex
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from . import config as cfg
from .data_models import AssetAllocation, CashFlow, Deductions, HealthInputs, SipHolding, Strategy
from .deposits import fixed_deposit, recurring_deposit, tds_on_interest
from .emi import affordability, calculate_emi, emi_breakdown, tenure_for_payment
from .engine import balance_at_period, break_even_analysis, compare_strategies, compute_schedule, estimate_tax_benefit
from .errors import ConfigurationError, PaymentTooLowError
from .formatter import (
    print_balance,
    print_break_even,
    print_emi_breakdown,
    print_goal,
    print_goal_probability,
    print_health,
    print_ledger,
    print_loan_summary,
    print_portfolio,
    print_projection,
    print_rebalancing,
    print_scenario_comparison,
    print_strategy_comparison,
    print_tax_comparison,
    print_withdrawal,
)
from .goal_seek import calculate_required_sip, goal_probability
from .health import calculate_health_score
from .portfolio import aggregate_portfolio
from .portfolio import rebalance as rebalance_portfolio
from .projection import ProjectionConfig, project, xirr
from .rates import ReturnScenario, TieredRate
from .scenarios import compare_scenarios
from .schedule import LoanConfig
from .tax import compare_regimes, fund_gains_tax, hra_exemption
from .utils import parse_amount, parse_date
from .withdrawal import required_corpus, retirement_plan, safe_withdrawal, simulate_withdrawal

logger = logging.getLogger(__name__)


def amount(value: str) -> float:
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _split(item: str, minimum: int, maximum: int, fmt: str) -> List[str]:
    parts = item.split(":")
    if not minimum <= len(parts) <= maximum:
        raise click.BadParameter(f"Expected {fmt}; got {item}")
    return parts


def _strategy_suffix(parts: List[str]) -> Tuple[List[str], Optional[Strategy]]:
    # a trailing non-numeric token is the strategy override
    if len(parts) > 1 and parts[-1].replace("_", "").replace("-", "").isalpha():
        try:
            return parts[:-1], Strategy.parse(parts[-1])
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    return parts, None


def _int_or_none(value: str) -> Optional[int]:
    return int(value) if value else None


def parse_rate_periods(values: Tuple[str, ...]) -> List[Tuple[int, float, Optional[int]]]:
    periods = []
    for item in values:
        parts = _split(item, 2, 3, "START:RATE[:END]")
        try:
            start = int(parts[0])
            rate = float(parts[1])
            end = _int_or_none(parts[2]) if len(parts) == 3 else None
        except ValueError:
            raise click.BadParameter(f"Rate period must be START:RATE[:END]; got {item}")
        periods.append((start, rate, end))
    return periods


def build_loan_config(
    principal: str,
    rate: Optional[float],
    tenure: int,
    rate_period: Tuple[str, ...] = (),
    prepay: Tuple[str, ...] = (),
    annual: Tuple[str, ...] = (),
    lump_sum: Tuple[str, ...] = (),
    strategy: str = "tenure",
) -> LoanConfig:
    """Build a :class:`LoanConfig` from command-line option strings.

    ``--prepay`` takes ``AMOUNT:START[:END][:STRATEGY]``, ``--annual`` takes
    ``AMOUNT[:MONTH[:START_YEAR[:END_YEAR]]][:STRATEGY]`` and ``--lump-sum``
    takes ``AMOUNT:PERIOD[:STRATEGY]``.
    """
    if rate is None and not rate_period:
        raise click.BadParameter("Provide --rate or at least one --rate-period")

    config = LoanConfig(
        principal=amount(principal),
        base_tenure=tenure,
        default_strategy=Strategy.parse(strategy),
    )
    if rate is not None:
        config.add_rate_period(1, rate)
    for start, r, end in parse_rate_periods(rate_period):
        config.add_rate_period(start, r, end)

    try:
        for item in prepay:
            parts, override = _strategy_suffix(_split(item, 2, 4, "AMOUNT:START[:END][:STRATEGY]"))
            end = _int_or_none(parts[2]) if len(parts) > 2 else None
            config.prepayments.add_recurring(amount(parts[0]), int(parts[1]), end, override)
        for item in annual:
            parts, override = _strategy_suffix(_split(item, 1, 5, "AMOUNT[:MONTH[:START_YEAR[:END_YEAR]]][:STRATEGY]"))
            month = int(parts[1]) if len(parts) > 1 else 12
            start_year = int(parts[2]) if len(parts) > 2 else 1
            end_year = _int_or_none(parts[3]) if len(parts) > 3 else None
            config.prepayments.add_annual(amount(parts[0]), month, start_year, end_year, override)
        for item in lump_sum:
            parts, override = _strategy_suffix(_split(item, 2, 3, "AMOUNT:PERIOD[:STRATEGY]"))
            if len(parts) != 2:
                raise click.BadParameter(f"Lump sum must be AMOUNT:PERIOD[:STRATEGY]; got {item}")
            config.prepayments.add_one_time(amount(parts[0]), int(parts[1]), override)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    return config


def export_to_json(path: Path, result) -> None:
    """Export summary and schedule to a JSON file."""
    data = result.to_dict()
    data.pop("ledger")
    payload = {"summary": data, "schedule": result.export_rows()}
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def export_to_csv(path: Path, result) -> None:
    """Export the schedule to a CSV file."""
    header = ["period", "payment", "principal", "interest", "prepayment", "balance", "rate"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        writer.writeheader()
        writer.writerows(result.export_rows())


def handle_errors(func: Callable) -> Callable:
    """Report engine errors as click errors instead of tracebacks."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigurationError as exc:
            raise click.ClickException("\n".join(exc.errors))
        except PaymentTooLowError as exc:
            raise click.ClickException(str(exc))
        except ValueError as exc:
            raise click.BadParameter(str(exc))

    return wrapper


def loan_options(func: Callable) -> Callable:
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (supports k/l/cr/m)"),
        click.option("--rate", "-r", "rate", type=float, help="Annual interest rate (percent) for the whole loan"),
        click.option("--tenure", "-t", "tenure", required=True, type=int, help="Loan tenure in months"),
        click.option("--rate-period", "rate_period", multiple=True, help="Rate change in START:RATE[:END] format"),
        click.option("--prepay", "prepay", multiple=True, help="Monthly prepayment AMOUNT:START[:END][:STRATEGY]"),
        click.option("--annual", "annual", multiple=True, help="Yearly prepayment AMOUNT[:MONTH[:START_YEAR[:END_YEAR]]][:STRATEGY]"),
        click.option("--lump-sum", "lump_sum", multiple=True, help="One-time prepayment AMOUNT:PERIOD[:STRATEGY]"),
        click.option(
            "--strategy",
            "strategy",
            type=click.Choice(["tenure", "emi"], case_sensitive=False),
            default="tenure",
            help="Default prepayment strategy",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Loan, investment, deposit and tax calculators."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.option("--rows", "max_rows", type=int, default=120, show_default=True, help="Ledger rows to print")
@click.option("--claimed-80c", "claimed", default="0", help="80C deductions already claimed this year")
@handle_errors
def loan(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy, output, max_rows, claimed) -> None:
    """Compute and print the full amortization schedule."""
    config = build_loan_config(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy)
    result = compute_schedule(config)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return

    print_loan_summary(result)
    if result.total_prepayment:
        benefit = estimate_tax_benefit(result.total_prepayment, amount(claimed))
        click.echo(f"80C deduction available: {benefit.eligible_deduction:,.2f} (tax saved {benefit.tax_saved:,.2f})")
    if len(result.ledger) > max_rows:
        click.echo(f"Schedule has {len(result.ledger)} rows; showing first {max_rows} rows.")
    print_ledger(result.ledger[:max_rows])


@cli.command()
@loan_options
@click.option("--period", "period", required=True, type=int, help="Period (month) to inspect")
@handle_errors
def balance(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy, period) -> None:
    """Show the outstanding balance after a given period."""
    config = build_loan_config(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy)
    print_balance(balance_at_period(config, period))


@cli.command("break-even")
@loan_options
@click.option("--amount", "prepay_amount", required=True, help="Prepayment amount")
@click.option("--period", "period", required=True, type=int, help="Period of the prepayment")
@click.option("--alternate-return", "alternate_return", required=True, type=float, help="Annual return if invested instead (percent)")
@handle_errors
def break_even(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy, prepay_amount, period, alternate_return) -> None:
    """Compare prepaying a lump sum with investing it."""
    config = build_loan_config(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy)
    print_break_even(break_even_analysis(config, amount(prepay_amount), period, alternate_return))


@cli.command()
@loan_options
@click.option("--amount", "prepay_amount", required=True, help="Prepayment amount")
@click.option("--period", "period", required=True, type=int, help="Period of the prepayment")
@handle_errors
def strategies(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy, prepay_amount, period) -> None:
    """Compare REDUCE_TENURE with REDUCE_EMI for one prepayment."""
    config = build_loan_config(principal, rate, tenure, rate_period, prepay, annual, lump_sum, strategy)
    print_strategy_comparison(compare_strategies(config, amount(prepay_amount), period))


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure", required=True, type=int, help="Tenure in months")
@click.option("--breakdown", is_flag=True, help="Print the month-by-month breakdown")
@click.option("--income", "income", help="Monthly income for an affordability check")
@click.option("--existing-emis", "existing", default="0", help="Existing EMI obligations per month")
@click.option("--max-emi-percent", "max_percent", type=float, default=50.0, show_default=True)
@handle_errors
def emi(principal, rate, tenure, breakdown, income, existing, max_percent) -> None:
    """Compute the EMI of a fixed-rate loan."""
    summary = calculate_emi(amount(principal), rate, tenure)
    click.echo(f"EMI            : {summary.emi:,.2f}")
    click.echo(f"Total interest : {summary.total_interest:,.2f}")
    click.echo(f"Total payment  : {summary.total_payment:,.2f}")
    if income:
        result = affordability(amount(income), amount(existing), rate, tenure, max_percent)
        click.echo(f"Max new EMI    : {result.max_new_emi:,.2f}")
        click.echo(f"Max loan       : {result.max_loan_amount:,.2f}")
    if breakdown:
        print_emi_breakdown(emi_breakdown(amount(principal), rate, tenure))


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--emi", "payment", required=True, help="Fixed monthly EMI")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@handle_errors
def tenure(principal, payment, rate) -> None:
    """Months needed to repay a loan with a fixed EMI."""
    result = tenure_for_payment(amount(principal), amount(payment), rate)
    click.echo(f"Tenure         : {result.tenure_months} months")
    click.echo(f"Total payment  : {result.total_payment:,.2f}")
    click.echo(f"Total interest : {result.total_interest:,.2f}")


@cli.command()
@click.option("--amount", "-a", "monthly", required=True, help="Monthly SIP amount")
@click.option("--years", "-y", "years", required=True, type=int, help="Duration in years")
@click.option("--return", "annual_return", type=float, help="Expected annual return (percent)")
@click.option("--tier", "tiers", multiple=True, help="Return band START_YEAR:END_YEAR:RATE (END may be empty)")
@click.option("--inflation", "inflation", type=float, default=0.0, help="Annual inflation (percent)")
@click.option("--step-up", "step_up", type=float, default=0.0, help="Annual SIP increase (percent)")
@click.option("--all-rows", is_flag=True, help="Print every month instead of a sample")
@handle_errors
def sip(monthly, years, annual_return, tiers, inflation, step_up, all_rows) -> None:
    """Project a monthly SIP forward."""
    if annual_return is None and not tiers:
        raise click.BadParameter("Provide --return or at least one --tier")
    config = ProjectionConfig.flat(amount(monthly), years, annual_return or 0.0, inflation, step_up)
    if tiers:
        tiered = TieredRate()
        for item in tiers:
            start, end, rate = _split(item, 3, 3, "START_YEAR:END_YEAR:RATE")
            tiered.add_band(int(start), _int_or_none(end), float(rate))
        config.scenarios = {"tiered": ReturnScenario("tiered", tiered)}
        result = project(config, "tiered")
    else:
        result = project(config)
    print_projection(result, result.rows if all_rows else result.sampled())


@cli.command()
@click.option("--target", "target", required=True, help="Target corpus in today's money")
@click.option("--years", "-y", "years", required=True, type=int, help="Years to the goal")
@click.option("--return", "annual_return", required=True, type=float, help="Expected annual return (percent)")
@click.option("--inflation", "inflation", type=float, default=0.0, help="Annual inflation (percent)")
@click.option("--step-up", "step_up", type=float, default=0.0, help="Annual SIP increase (percent)")
@click.option("--check-sip", "check_sip", help="Check the chance a given SIP reaches the target")
@click.option("--volatility", "volatility", type=float, default=5.0, show_default=True)
@handle_errors
def goal(target, years, annual_return, inflation, step_up, check_sip, volatility) -> None:
    """Find the monthly SIP needed to reach a target."""
    target_value = amount(target)
    print_goal(calculate_required_sip(target_value, years, annual_return, inflation, step_up))
    if check_sip:
        print_goal_probability(goal_probability(amount(check_sip), target_value, years, annual_return, volatility))


@cli.command()
@click.option("--corpus", "corpus", help="Starting corpus")
@click.option("--withdrawal", "-w", "monthly", required=True, help="Monthly withdrawal")
@click.option("--years", "-y", "years", required=True, type=int, help="Withdrawal years")
@click.option("--return", "annual_return", required=True, type=float, help="Annual return during withdrawal (percent)")
@click.option("--inflation", "inflation", type=float, default=0.0, help="Annual increase of the withdrawal (percent)")
@click.option("--sip", "sip_amount", help="Build the corpus first with this monthly SIP")
@click.option("--sip-years", "sip_years", type=int, help="Accumulation years")
@click.option("--sip-return", "sip_return", type=float, help="Accumulation return (percent)")
@click.option("--step-up", "step_up", type=float, default=0.0, help="Annual SIP increase (percent)")
@click.option("--all-rows", is_flag=True, help="Print every month instead of a sample")
@handle_errors
def withdrawal(corpus, monthly, years, annual_return, inflation, sip_amount, sip_years, sip_return, step_up, all_rows) -> None:
    """Simulate drawing down a corpus, optionally after a SIP accumulation."""
    if sip_amount:
        if sip_years is None or sip_return is None:
            raise click.BadParameter("--sip needs --sip-years and --sip-return")
        plan = retirement_plan(amount(sip_amount), sip_years, sip_return, amount(monthly), years, annual_return, inflation, step_up)
        print_projection(plan.accumulation, plan.accumulation.sampled())
        result = plan.withdrawal
    elif corpus:
        result = simulate_withdrawal(amount(corpus), amount(monthly), years, annual_return, inflation)
    else:
        raise click.BadParameter("Provide --corpus or --sip")

    rows = result.rows
    if not all_rows and rows:
        rows = [r for r in rows if r.period == 1 or r.period % cfg.SAMPLE_EVERY == 0 or r is rows[-1]]
    print_withdrawal(result, rows)
    click.echo("Corpus lasts through the plan" if result.lasts_through_plan else "Corpus runs out early")


@cli.command()
@click.option("--withdrawal", "-w", "monthly", required=True, help="Monthly withdrawal")
@click.option("--years", "-y", "years", required=True, type=int, help="Withdrawal years")
@click.option("--return", "annual_return", required=True, type=float, help="Annual return (percent)")
@click.option("--inflation", "inflation", type=float, default=0.0, help="Annual increase of the withdrawal (percent)")
@handle_errors
def corpus(monthly, years, annual_return, inflation) -> None:
    """Corpus needed to sustain a withdrawal plan."""
    needed = required_corpus(amount(monthly), years, annual_return, inflation)
    click.echo(f"Required corpus       : {needed:,.2f}")
    click.echo(f"Level safe withdrawal : {safe_withdrawal(needed, years, annual_return):,.2f}")


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Deposit amount")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--years", "-y", "years", required=True, type=float, help="Tenure in years")
@click.option(
    "--compounding",
    type=click.Choice(["monthly", "quarterly", "half-yearly", "yearly"]),
    default="quarterly",
    show_default=True,
)
@click.option("--senior", is_flag=True, help="Senior citizen TDS threshold")
@click.option("--no-pan", is_flag=True, help="PAN not furnished")
@handle_errors
def fd(principal, rate, years, compounding, senior, no_pan) -> None:
    """Fixed deposit maturity and TDS."""
    result = fixed_deposit(amount(principal), rate, years, compounding)
    click.echo(f"Maturity amount : {result.maturity_amount:,.2f}")
    click.echo(f"Interest earned : {result.interest_earned:,.2f}")
    click.echo(f"Effective rate  : {result.effective_rate:.2f}%")
    yearly_interest = result.interest_earned / years
    tds = tds_on_interest(yearly_interest, pan_provided=not no_pan, senior_citizen=senior)
    click.echo(f"TDS per year    : {tds.tds_amount:,.2f} at {tds.tds_rate}%")


@cli.command()
@click.option("--deposit", "-d", "deposit", required=True, help="Monthly deposit")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--months", "-m", "months", required=True, type=int, help="Tenure in months")
@handle_errors
def rd(deposit, rate, months) -> None:
    """Recurring deposit maturity."""
    result = recurring_deposit(amount(deposit), rate, months)
    click.echo(f"Maturity amount : {result.maturity_amount:,.2f}")
    click.echo(f"Total deposited : {result.total_deposited:,.2f}")
    click.echo(f"Interest earned : {result.interest_earned:,.2f}")


@cli.command()
@click.option("--income", "income", required=True, help="Gross annual income")
@click.option("--80c", "sec_80c", default="0", help="Section 80C investments")
@click.option("--80d", "sec_80d", default="0", help="Section 80D medical insurance")
@click.option("--80ccd", "sec_80ccd", default="0", help="Section 80CCD(1B) NPS contribution")
@click.option("--other", "other", default="0", help="Other exemptions")
@click.option("--basic", "basic", help="Annual basic salary (for HRA)")
@click.option("--hra", "hra", help="Annual HRA received")
@click.option("--rent", "rent", help="Annual rent paid")
@click.option("--metro", is_flag=True, help="Metro city for HRA")
@click.option("--fund-invested", "fund_invested", help="Mutual fund amount invested")
@click.option("--fund-value", "fund_value", help="Mutual fund current value")
@click.option("--fund-years", "fund_years", type=float, default=1.0, help="Holding period in years")
@click.option("--fund-type", type=click.Choice(["equity", "debt"]), default="equity")
@handle_errors
def tax(income, sec_80c, sec_80d, sec_80ccd, other, basic, hra, rent, metro, fund_invested, fund_value, fund_years, fund_type) -> None:
    """Compare old and new income-tax regimes."""
    deductions = Deductions(
        sec_80c=amount(sec_80c),
        sec_80d=amount(sec_80d),
        sec_80ccd=amount(sec_80ccd),
        other_exemptions=amount(other),
    )
    if basic and hra and rent:
        exemption = hra_exemption(amount(basic), amount(hra), amount(rent), metro)
        deductions.hra = exemption.exemption
        click.echo(f"HRA exemption: {exemption.exemption:,.2f}")
    print_tax_comparison(compare_regimes(amount(income), deductions))

    if fund_invested and fund_value:
        estimate = fund_gains_tax(amount(fund_invested), amount(fund_value), fund_years, fund_type)
        click.echo(f"Fund gain {estimate.gain:,.2f}, tax {estimate.tax:,.2f}, post-tax value {estimate.post_tax_value:,.2f}")


@cli.command("xirr")
@click.option("--flow", "flows", multiple=True, required=True, help="Cash flow YYYY-MM-DD:AMOUNT (investments negative)")
@handle_errors
def xirr_command(flows: Tuple[str, ...]) -> None:
    """Annualized return of dated cash flows."""
    cash_flows = []
    for item in flows:
        when, _, value = item.rpartition(":")
        if not when:
            raise click.BadParameter(f"Cash flow must be DATE:AMOUNT; got {item}")
        negative = value.startswith("-")
        parsed = amount(value.lstrip("-"))
        cash_flows.append(CashFlow(-parsed if negative else parsed, parse_date(when)))
    result = xirr(cash_flows)
    suffix = "" if result.converged else " (did not converge)"
    click.echo(f"XIRR: {result.xirr:.2f}%{suffix}")


def parse_scenario_options(opts: str) -> Dict[str, Any]:
    """Turn a quoted option string such as ``"-p 50l -r 8.5 -t 240 --prepay 10k:1"``
    into keyword arguments for :func:`build_loan_config`."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {
        "principal": None,
        "rate": None,
        "tenure": None,
        "rate_period": [],
        "prepay": [],
        "annual": [],
        "lump_sum": [],
        "strategy": "tenure",
    }
    single = {"-p": "principal", "--principal": "principal", "-r": "rate", "--rate": "rate",
              "-t": "tenure", "--tenure": "tenure", "--strategy": "strategy"}
    repeated = {"--rate-period": "rate_period", "--prepay": "prepay", "--annual": "annual", "--lump-sum": "lump_sum"}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in single and token not in repeated:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {token} needs a value")
        value = tokens[i + 1]
        if token in single:
            params[single[token]] = value
        else:
            params[repeated[token]].append(value)
        i += 2

    for required in ("principal", "tenure"):
        if params[required] is None:
            raise click.BadParameter(f"Scenario missing required option {required}")
    try:
        params["tenure"] = int(params["tenure"])
        params["rate"] = float(params["rate"]) if params["rate"] is not None else None
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    for key in repeated.values():
        params[key] = tuple(params[key])
    return params


@cli.command()
@click.option("--scenario", "scenarios", multiple=True, required=True, help='Scenario NAME="LOAN OPTIONS"')
@click.option("--base", "base", help="Scenario to compare against (default: the first)")
@handle_errors
def compare(scenarios: Tuple[str, ...], base: Optional[str]) -> None:
    """Compare named loan scenarios.

    Scenarios are given as NAME followed by a quoted option string, for example:

        finplan compare --scenario 'bank="-p 50l -r 8.5 -t 240"' --scenario 'prepay="-p 50l -r 8.5 -t 240 --prepay 10k:1"'
    """
    configs: Dict[str, LoanConfig] = {}
    for item in scenarios:
        name, sep, opts = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Scenario must be NAME=OPTIONS; got {item}")
        configs[name.strip()] = build_loan_config(**parse_scenario_options(opts.strip().strip('"').strip("'")))
    print_scenario_comparison(compare_scenarios(configs, base))


@cli.command()
@click.option("--holding", "holdings", multiple=True, required=True, help="NAME:MONTHLY:INVESTED:VALUE[:RETURN]")
@handle_errors
def portfolio(holdings: Tuple[str, ...]) -> None:
    """Aggregate several SIPs into one portfolio view."""
    parsed = []
    for item in holdings:
        parts = _split(item, 4, 5, "NAME:MONTHLY:INVESTED:VALUE[:RETURN]")
        parsed.append(
            SipHolding(
                name=parts[0],
                monthly_amount=amount(parts[1]),
                invested_amount=amount(parts[2]),
                current_value=amount(parts[3]),
                return_rate=float(parts[4]) if len(parts) > 4 else 0.0,
            )
        )
    print_portfolio(aggregate_portfolio(parsed))


@cli.command()
@click.option("--asset", "assets", multiple=True, required=True, help="NAME:VALUE:TARGET_PERCENT[:MONTHLY_SIP]")
@handle_errors
def rebalance(assets: Tuple[str, ...]) -> None:
    """Buy/sell amounts that bring a portfolio back to its target mix."""
    parsed = []
    for item in assets:
        parts = _split(item, 3, 4, "NAME:VALUE:TARGET_PERCENT[:MONTHLY_SIP]")
        parsed.append(
            AssetAllocation(
                name=parts[0],
                current_value=amount(parts[1]),
                target_percent=float(parts[2]),
                monthly_sip=amount(parts[3]) if len(parts) > 3 else 0.0,
            )
        )
    print_rebalancing(rebalance_portfolio(parsed))


@cli.command()
@click.option("--income", "income", required=True, help="Monthly income")
@click.option("--expenses", "expenses", default="0", help="Monthly expenses excluding EMIs")
@click.option("--debt", "debt", default="0", help="Total outstanding debt")
@click.option("--emis", "emis", default="0", help="Monthly EMI obligations")
@click.option("--emergency-fund", "emergency_fund", default="0", help="Emergency fund balance")
@click.option("--insurance", is_flag=True, help="Adequate life and health cover in place")
@click.option("--savings", "savings", default="0", help="Amount invested each month")
@click.option("--investments", "investments", default="0", help="Current investment portfolio value")
@handle_errors
def health(income, expenses, debt, emis, emergency_fund, insurance, savings, investments) -> None:
    """Score financial health out of 100 with recommendations."""
    inputs = HealthInputs(
        monthly_income=amount(income),
        monthly_expenses=amount(expenses),
        total_debt=amount(debt),
        monthly_emis=amount(emis),
        emergency_fund=amount(emergency_fund),
        has_insurance=insurance,
        monthly_savings=amount(savings),
        investments=amount(investments),
    )
    print_health(calculate_health_score(inputs))


if __name__ == "__main__":
    cli()
