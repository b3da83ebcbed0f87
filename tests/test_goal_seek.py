import logging

import pytest

from finplan.errors import ConfigurationError
from finplan.goal_seek import (
    Converged,
    Fallback,
    bisect,
    calculate_required_sip,
    calculate_scenarios,
    future_value,
    goal_probability,
    newton_raphson,
    step_up_future_value,
    step_up_total_invested,
)


def test_future_value_closed_form():
    r = 12 / 100 / 12
    expected = 10_000 * ((1 + r) ** 120 - 1) / r * (1 + r)

    assert future_value(10_000, 10, 12) == pytest.approx(expected)
    assert future_value(10_000, 10, 0) == 1_200_000


def test_solved_contribution_reaches_target():
    result = calculate_required_sip(10_000_000, 15, 12)

    assert result.converged
    assert result.method == "newton-raphson"
    assert abs(future_value(result.contribution, 15, 12) - 10_000_000) < 100
    assert result.required_contribution >= result.contribution
    assert result.required_contribution % 100 == 0


def test_zero_return_goal():
    result = calculate_required_sip(1_200_000, 10, 0)

    assert result.contribution == pytest.approx(10_000, abs=1)
    assert result.required_contribution == 10_000


def test_inflation_raises_target():
    plain = calculate_required_sip(5_000_000, 10, 10)
    inflated = calculate_required_sip(5_000_000, 10, 10, inflation_rate=6)

    assert inflated.inflation_adjusted_target == pytest.approx(5_000_000 * 1.06 ** 10, abs=0.01)
    assert inflated.required_contribution > plain.required_contribution
    assert inflated.real_value == pytest.approx(inflated.achieved_amount / 1.06 ** 10, abs=1)


def test_step_up_uses_bisection_and_needs_less_to_start():
    flat = calculate_required_sip(10_000_000, 15, 12)
    stepped = calculate_required_sip(10_000_000, 15, 12, step_up_percent=10)

    assert stepped.method == "bisection"
    assert stepped.required_contribution < flat.required_contribution
    gap = abs(step_up_future_value(stepped.contribution, 15, 12, 10) - 10_000_000)
    assert gap < 100 or not stepped.converged


def test_goal_inputs_are_validated():
    with pytest.raises(ConfigurationError) as excinfo:
        calculate_required_sip(0, 0, -1, step_up_percent=150)

    assert excinfo.value.errors[0] == "Target amount: Expected a positive number, got 0"
    assert len(excinfo.value.errors) == 4


def test_step_up_grows_after_each_year_but_the_last():
    # 1000/month for year 1, 1100/month for year 2
    assert step_up_total_invested(1000, 2, 10) == pytest.approx(12_000 + 13_200)
    assert step_up_future_value(1000, 1, 0, 10) == pytest.approx(12_000)


def test_newton_falls_back_to_bisection_on_flat_derivative(caplog):
    def flat(_c):
        return 42.0

    with caplog.at_level(logging.WARNING, logger="finplan.goal_seek"):
        result = newton_raphson(flat, 1_200_000, 5_000)

    assert isinstance(result, Fallback)
    assert not result.within_tolerance
    assert "bisection" in caplog.text


def test_newton_converges_on_linear_function():
    result = newton_raphson(lambda c: c * 120, 1_200_000, 500)

    assert isinstance(result, Converged)
    assert result.value == pytest.approx(10_000, abs=1)


def test_bisect_finds_root_of_linear_function():
    result = bisect(lambda c: c * 120, 1_200_000)

    assert isinstance(result, Fallback)
    assert result.within_tolerance
    assert abs(result.value * 120 - 1_200_000) < 100


def test_calculate_scenarios_per_rate():
    results = calculate_scenarios(5_000_000, 10, {"low": 8, "high": 14})

    assert set(results) == {"low", "high"}
    assert results["high"].required_contribution < results["low"].required_contribution


def test_goal_probability_counts_successes():
    needed = calculate_required_sip(5_000_000, 10, 12).required_contribution

    result = goal_probability(needed, 5_000_000, 10, 12, volatility=4)

    assert result.probability == 60
    assert result.recommendation == "Likely to achieve goal"
    assert result.scenarios["realistic"].success
    assert not result.scenarios["worst"].success
    assert result.scenarios["worst"].shortfall > 0
    assert result.scenarios["best"].return_rate == 16


def test_goal_probability_unreachable():
    result = goal_probability(1_000, 50_000_000, 5, 10)

    assert result.probability == 0
    assert result.recommendation == "Consider increasing SIP or duration"
