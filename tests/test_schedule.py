import pytest

from finplan.data_models import PrepaymentAt, Strategy, resolve_strategy
from finplan.schedule import LoanConfig, PrepaymentPlan, RateSchedule


def test_last_matching_rate_period_wins():
    rates = RateSchedule()
    rates.add_period(1, 5.0)
    rates.add_period(6, 8.0, 12)

    assert rates.rate_at(1) == 5.0
    assert rates.rate_at(7) == 8.0
    assert rates.rate_at(12) == 8.0
    assert rates.rate_at(13) == 5.0


def test_rate_periods_are_sorted_by_start():
    rates = RateSchedule()
    rates.add_period(25, 9.0)
    rates.add_period(1, 7.5)

    assert [p.start_period for p in rates.periods] == [1, 25]
    assert rates.initial_rate == 7.5
    assert rates.rate_at(30) == 9.0


def test_uncovered_period_falls_back_to_first_rate():
    rates = RateSchedule()
    rates.add_period(3, 6.0, 4)

    assert rates.rate_at(1) == 6.0
    assert RateSchedule().rate_at(1) == 0.0


def test_explicit_overlap_reported():
    rates = RateSchedule()
    rates.add_period(1, 8.0, 12)
    rates.add_period(10, 9.0)

    assert rates.overlap_errors() == ["Rate periods have explicit overlap at month 10"]


def test_open_ended_period_may_be_overridden():
    rates = RateSchedule()
    rates.add_period(1, 8.0)
    rates.add_period(10, 9.0, 20)

    assert rates.overlap_errors() == []


def test_prepayment_amounts_sum_and_labels_join():
    plan = PrepaymentPlan()
    plan.add_recurring(1000, start_period=1)
    plan.add_annual(50000)
    plan.add_one_time(200000, 12)

    due = plan.amount_and_strategy_at(12)
    assert due.amount == 251000
    assert due.label == "monthly + yearly + lump-sum"

    assert plan.amount_and_strategy_at(5).label == "monthly"


def test_nothing_due_is_labelled_none():
    plan = PrepaymentPlan()
    plan.add_one_time(5000, 3)

    due = plan.amount_and_strategy_at(2)
    assert due.amount == 0
    assert due.label == "none"
    assert due.strategy is None


def test_annual_prepayment_activation():
    plan = PrepaymentPlan()
    plan.add_annual(10000, target_offset=3, start_year=2, end_year=3)

    active = [p for p in range(1, 61) if plan.amount_and_strategy_at(p).amount]
    assert active == [15, 27]


def test_recurring_prepayment_window():
    plan = PrepaymentPlan()
    plan.add_recurring(500, start_period=4, end_period=6)

    active = [p for p in range(1, 10) if plan.amount_and_strategy_at(p).amount]
    assert active == [4, 5, 6]


def test_last_override_wins_in_evaluation_order():
    plan = PrepaymentPlan()
    plan.add_one_time(1000, 12, "tenure")
    plan.add_recurring(100, strategy="emi")
    plan.add_annual(5000)

    # one-time entries are evaluated after recurring and annual ones
    assert plan.amount_and_strategy_at(12).strategy is Strategy.REDUCE_TENURE
    assert plan.amount_and_strategy_at(11).strategy is Strategy.REDUCE_EMI


def test_strategy_resolution():
    assert resolve_strategy(None, Strategy.REDUCE_EMI) is Strategy.REDUCE_EMI
    assert resolve_strategy(Strategy.REDUCE_TENURE, Strategy.REDUCE_EMI) is Strategy.REDUCE_TENURE


def test_strategy_parse_aliases():
    assert Strategy.parse("emi") is Strategy.REDUCE_EMI
    assert Strategy.parse("reduce-tenure") is Strategy.REDUCE_TENURE
    assert Strategy.parse(None) is None
    with pytest.raises(ValueError):
        Strategy.parse("sideways")


def test_prepayment_at_label():
    assert PrepaymentAt(0.0, [], None).label == "none"


def test_validate_collects_all_errors():
    config = LoanConfig(principal=0, base_tenure=0)

    assert config.validate() == [
        "Principal must be greater than 0",
        "Tenure must be greater than 0",
        "At least one interest rate period is required",
    ]


def test_without_prepayments_is_independent():
    config = LoanConfig.flat(1_000_000, 9.0, 120)
    config.prepayments.add_one_time(50000, 6)

    copy = config.without_prepayments()
    copy.add_rate_period(12, 10.0)

    assert not copy.prepayments
    assert config.prepayments
    assert len(config.rates) == 1
    assert copy.default_strategy is config.default_strategy


def test_validate_checks_rate_periods():
    config = LoanConfig(principal=100_000, base_tenure=12)
    config.add_rate_period(0, 8.0)
    config.add_rate_period(6, -1.0)
    config.add_rate_period(10, 9.0, 4)

    assert config.validate() == [
        "Rate period 1: start month must be a whole number >= 1, got 0",
        "Rate period 2: rate must be a non-negative number, got -1.0",
        "Rate period 3: end month 4 is before start month 10",
    ]


def test_validate_checks_prepayments():
    config = LoanConfig.flat(100_000, 8.0, 12)
    config.prepayments.add_recurring(-500, 1)
    config.prepayments.add_recurring(1_000, 6, 3)
    config.prepayments.add_annual(5_000, 13)
    config.prepayments.add_annual(5_000, 12, 3, 2)
    config.prepayments.add_one_time(10_000, 0)

    assert config.validate() == [
        "Prepayment 1 (monthly): amount must be greater than 0, got -500",
        "Prepayment 2 (monthly): end month 3 is before start month 6",
        "Prepayment 3 (yearly): month offset must be between 1 and 12, got 13",
        "Prepayment 4 (yearly): end year 2 is before start year 3",
        "Prepayment 5 (lump-sum): start month must be a whole number >= 1, got 0",
    ]


def test_valid_entries_pass_validation():
    config = LoanConfig.flat(100_000, 8.0, 12)
    config.add_rate_period(6, 9.0, 12)
    config.prepayments.add_recurring(1_000, 1, 6)
    config.prepayments.add_annual(5_000, 12, 1, 1)
    config.prepayments.add_one_time(10_000, 3)

    assert config.validate() == []
