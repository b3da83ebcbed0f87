import pytest

from finplan.errors import ConfigurationError
from finplan.withdrawal import required_corpus, retirement_plan, safe_withdrawal, simulate_withdrawal


def test_corpus_survives_plan():
    result = simulate_withdrawal(10_000_000, 50_000, 10, 8, inflation_rate=5)

    assert result.lasts_through_plan
    assert result.depleted_at is None
    assert result.depleted_in_years is None
    assert len(result.rows) == 120
    assert result.remaining_corpus > 0
    assert result.to_dict()["lasts_through_plan"] is True


def test_withdrawal_grows_with_inflation_each_year():
    rows = simulate_withdrawal(10_000_000, 10_000, 3, 8, inflation_rate=10).rows

    assert rows[11].withdrawal == 10_000
    assert rows[12].withdrawal == 11_000
    assert rows[24].withdrawal == 12_100


def test_withdrawal_not_indexed_when_disabled():
    rows = simulate_withdrawal(10_000_000, 10_000, 3, 8, inflation_rate=10, inflation_adjusted=False).rows

    assert {row.withdrawal for row in rows} == {10_000}


def test_zero_return_depletion_period():
    result = simulate_withdrawal(100_000, 10_000, 2, 0)

    assert result.depleted_at == 10
    assert result.total_withdrawn == 100_000
    assert result.remaining_corpus == 0
    assert not result.lasts_through_plan


def test_short_balance_stops_before_withdrawing():
    result = simulate_withdrawal(95_000, 10_000, 2, 0)

    assert result.depleted_at == 10
    assert result.total_withdrawn == 90_000
    assert result.remaining_corpus == 5_000
    assert len(result.rows) == 9


def test_depletion_monotonic_in_corpus():
    periods = []
    for corpus in (1_000_000, 2_000_000, 3_000_000, 4_000_000, 6_000_000):
        result = simulate_withdrawal(corpus, 30_000, 25, 7, inflation_rate=6)
        periods.append(result.depleted_at if result.depleted_at is not None else float("inf"))

    assert periods == sorted(periods)


def test_required_corpus_is_sufficient_and_rounded():
    corpus = required_corpus(40_000, 20, 8, inflation_rate=6)

    assert corpus % 100_000 == 0
    assert simulate_withdrawal(corpus, 40_000, 20, 8, inflation_rate=6).lasts_through_plan


def test_safe_withdrawal_exhausts_corpus():
    r = 8 / 100 / 12
    monthly = safe_withdrawal(5_000_000, 20, 8)

    assert safe_withdrawal(1_200_000, 10, 0) == 10_000
    assert monthly == pytest.approx(5_000_000 * r / (1 - (1 + r) ** -240), abs=0.01)
    # withdrawals come out before the month's growth, so the level
    # amount is one month of growth smaller
    result = simulate_withdrawal(5_000_000, monthly / (1 + r) - 1, 20, 8, inflation_adjusted=False)
    assert result.lasts_through_plan
    assert result.remaining_corpus < 1_000


def test_retirement_plan_chains_phases():
    plan = retirement_plan(20_000, 25, 12, 100_000, 25, 7, inflation_rate=6, step_up_percent=5)

    assert plan.withdrawal.initial_corpus == plan.accumulation.final_value
    assert plan.success == plan.withdrawal.lasts_through_plan
    if plan.success:
        assert plan.total_duration == 50
    else:
        assert plan.total_duration == pytest.approx(25 + plan.withdrawal.depleted_in_years)
    data = plan.to_dict()
    assert set(data) == {"accumulation", "withdrawal", "total_duration", "success"}


def test_safe_withdrawal_rejects_zero_years():
    with pytest.raises(ConfigurationError) as excinfo:
        safe_withdrawal(1_000_000, 0, 8)

    assert excinfo.value.errors == ["Duration: Expected a positive integer (years), got 0"]


def test_withdrawal_inputs_are_validated():
    with pytest.raises(ConfigurationError) as excinfo:
        simulate_withdrawal(-1, 0, 2.5, -3, inflation_rate=120)

    assert excinfo.value.errors == [
        "Corpus: Expected a non-negative number, got -1",
        "Withdrawal: Expected a positive number, got 0",
        "Duration: Expected a positive integer (years), got 2.5",
        "Return rate: Expected a non-negative number, got -3",
        "Inflation rate: Expected a percentage (0-100), got 120",
    ]

    with pytest.raises(ConfigurationError):
        required_corpus(40_000, 0, 8)
