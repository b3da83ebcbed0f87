import csv
import json

import click
import pytest
from click.testing import CliRunner

from finplan.data_models import Strategy
from finplan.main import build_loan_config, cli


@pytest.fixture
def runner():
    return CliRunner()


def test_build_loan_config_parses_entries():
    config = build_loan_config(
        "50l",
        8.5,
        240,
        rate_period=("61:9.5:120",),
        prepay=("10k:1:60:emi",),
        annual=("1l:3:2",),
        lump_sum=("5l:36",),
    )

    assert config.principal == 5_000_000
    assert config.rates.rate_at(70) == 9.5
    assert config.prepayments.recurring[0].strategy is Strategy.REDUCE_EMI
    assert config.prepayments.recurring[0].end_period == 60
    assert config.prepayments.annual[0].target_offset == 3
    assert config.prepayments.annual[0].start_year == 2
    assert config.prepayments.one_time[0].period == 36
    assert config.prepayments.one_time[0].strategy is None


def test_build_loan_config_needs_a_rate():
    with pytest.raises(click.BadParameter):
        build_loan_config("50l", None, 240)


def test_loan_prints_summary_and_ledger(runner):
    result = runner.invoke(cli, ["loan", "-p", "50l", "-r", "8.5", "-t", "240", "--rows", "12"])

    assert result.exit_code == 0
    assert "43,391.16" in result.output
    assert "showing first 12 rows" in result.output


def test_loan_with_prepayment_reports_savings(runner):
    result = runner.invoke(cli, ["loan", "-p", "50l", "-r", "8.5", "-t", "240", "--prepay", "10k:1"])

    assert result.exit_code == 0
    assert "Interest saved" in result.output
    assert "80C deduction" in result.output


def test_loan_exports_csv(runner, tmp_path):
    path = tmp_path / "schedule.csv"

    result = runner.invoke(cli, ["loan", "-p", "1.2l", "-r", "0", "-t", "12", "--output", str(path)])

    assert result.exit_code == 0
    with path.open() as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 12
    assert list(rows[0]) == ["period", "payment", "principal", "interest", "prepayment", "balance", "rate"]


def test_loan_exports_json(runner, tmp_path):
    path = tmp_path / "schedule.json"

    result = runner.invoke(cli, ["loan", "-p", "1.2l", "-r", "0", "-t", "12", "--output", str(path)])

    assert result.exit_code == 0
    data = json.loads(path.read_text())
    assert data["summary"]["periods"] == 12
    assert len(data["schedule"]) == 12


def test_invalid_loan_reports_all_errors(runner):
    result = runner.invoke(cli, ["loan", "-p", "0", "-t", "0", "-r", "8"])

    assert result.exit_code != 0
    assert "Principal must be greater than 0" in result.output
    assert "Tenure must be greater than 0" in result.output


def test_balance_command(runner):
    result = runner.invoke(cli, ["balance", "-p", "1.2l", "-r", "0", "-t", "12", "--period", "6"])

    assert result.exit_code == 0
    assert "60,000.00" in result.output


def test_strategies_command(runner):
    result = runner.invoke(cli, ["strategies", "-p", "50l", "-r", "8.5", "-t", "240", "--amount", "10l", "--period", "24"])

    assert result.exit_code == 0
    assert "REDUCE_TENURE" in result.output


def test_break_even_command(runner):
    result = runner.invoke(
        cli,
        ["break-even", "-p", "50l", "-r", "8.5", "-t", "240", "--amount", "5l", "--period", "12", "--alternate-return", "4"],
    )

    assert result.exit_code == 0
    assert "Prepayment is beneficial" in result.output


def test_tenure_too_low_payment(runner):
    result = runner.invoke(cli, ["tenure", "-p", "10l", "--emi", "5000", "-r", "12"])

    assert result.exit_code != 0
    assert "EMI is too low" in result.output


def test_emi_with_breakdown(runner):
    result = runner.invoke(cli, ["emi", "-p", "1.2l", "-r", "12", "-t", "12", "--breakdown", "--income", "50k"])

    assert result.exit_code == 0
    assert "10,661.85" in result.output
    assert "Max loan" in result.output


def test_goal_command(runner):
    result = runner.invoke(cli, ["goal", "--target", "1cr", "-y", "15", "--return", "12", "--check-sip", "25k"])

    assert result.exit_code == 0
    assert "Required monthly SIP" in result.output
    assert "Probability" in result.output


def test_sip_with_tiers(runner):
    result = runner.invoke(cli, ["sip", "-a", "10k", "-y", "10", "--tier", "1:5:14", "--tier", "6::8"])

    assert result.exit_code == 0
    assert "tiered" in result.output


def test_withdrawal_and_corpus(runner):
    result = runner.invoke(cli, ["withdrawal", "--corpus", "1cr", "-w", "50k", "-y", "10", "--return", "8"])
    assert result.exit_code == 0
    assert "Corpus lasts through the plan" in result.output

    result = runner.invoke(cli, ["corpus", "-w", "50k", "-y", "20", "--return", "8", "--inflation", "6"])
    assert result.exit_code == 0
    assert "Required corpus" in result.output


def test_deposit_and_tax_commands(runner):
    result = runner.invoke(cli, ["fd", "-p", "1l", "-r", "7", "-y", "5"])
    assert result.exit_code == 0
    assert "7.19%" in result.output

    result = runner.invoke(cli, ["rd", "-d", "5k", "-r", "7", "-m", "12"])
    assert result.exit_code == 0

    result = runner.invoke(cli, ["tax", "--income", "12l", "--80c", "1.5l"])
    assert result.exit_code == 0
    assert "New Regime is beneficial" in result.output


def test_xirr_command(runner):
    result = runner.invoke(cli, ["xirr", "--flow", "2023-01-01:-100000", "--flow", "2024-01-01:110000"])

    assert result.exit_code == 0
    assert "XIRR: 10.01%" in result.output


def test_bad_amount(runner):
    result = runner.invoke(cli, ["emi", "-p", "lots", "-r", "8", "-t", "12"])

    assert result.exit_code != 0
    assert "Invalid amount" in result.output


def test_compare_command_marks_base(runner):
    result = runner.invoke(
        cli,
        [
            "compare",
            "--scenario",
            "bank=-p 50l -r 8.5 -t 240",
            "--scenario",
            'prepay="-p 50l -r 8.5 -t 240 --prepay 10k:1"',
            "--base",
            "prepay",
        ],
    )

    assert result.exit_code == 0
    assert "Scenario comparison" in result.output
    assert "prepay *" in result.output
    assert "bank *" not in result.output


def test_compare_rejects_unknown_scenario_option(runner):
    result = runner.invoke(cli, ["compare", "--scenario", "bank=-p 50l -r 8.5 -t 240 --emi 5k"])

    assert result.exit_code != 0
    assert "Unknown option in scenario: --emi" in result.output


def test_portfolio_and_rebalance_commands(runner):
    result = runner.invoke(cli, ["portfolio", "--holding", "Equity:10k:1.2l:1.5l:12", "--holding", "Debt:5k:60k:50k:8"])
    assert result.exit_code == 0
    assert "Equity\t10000.00\t120000.00\t150000.00\t30000.00\t75.00" in result.output

    result = runner.invoke(cli, ["rebalance", "--asset", "Equity:70k:60", "--asset", "Debt:30k:40"])
    assert result.exit_code == 0
    assert "Equity\t70000.00\t60000.00\t-10000.00\tSELL" in result.output
    assert "Debt\t30000.00\t40000.00\t10000.00\tBUY" in result.output

    result = runner.invoke(cli, ["rebalance", "--asset", "Equity:70k:60", "--asset", "Debt:30k:30"])
    assert result.exit_code != 0
    assert "must add up to 100%" in result.output


def test_health_command(runner):
    result = runner.invoke(
        cli,
        [
            "health",
            "--income", "1l",
            "--expenses", "40k",
            "--emis", "10k",
            "--debt", "2l",
            "--emergency-fund", "4l",
            "--insurance",
            "--savings", "30k",
            "--investments", "10l",
        ],
    )

    assert result.exit_code == 0
    assert "Financial health: 100/100 (Excellent)" in result.output
