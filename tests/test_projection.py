from datetime import date

import pytest

from finplan.data_models import CashFlow, StepUp
from finplan.errors import ConfigurationError
from finplan.goal_seek import future_value
from finplan.projection import ProjectionConfig, effective_return, project, project_all_scenarios, xirr
from finplan.rates import FlatRate, ReturnScenario, TieredRate


def test_projection_matches_closed_form():
    result = project(ProjectionConfig.flat(15_000, 20, 12))

    assert result.final_value == pytest.approx(future_value(15_000, 20, 12), abs=0.01)
    assert result.total_contributed == 15_000 * 240
    assert len(result.rows) == 240
    assert result.real_value == result.final_value


def test_step_up_applies_at_year_boundaries():
    config = ProjectionConfig.flat(10_000, 3, 0, step_up_percent=10)

    rows = project(config).rows

    assert rows[11].contribution == 10_000
    assert rows[12].contribution == 11_000
    assert rows[24].contribution == 12_100


def test_first_matching_step_up_entry_wins():
    config = ProjectionConfig.flat(1_000, 3, 0)
    config.step_ups = [StepUp(10, start_year=2, end_year=2), StepUp(50, start_year=2)]

    rows = project(config).rows

    assert rows[12].contribution == 1_100
    assert rows[24].contribution == 1_650


def test_inflation_deflates_balance():
    result = project(ProjectionConfig.flat(10_000, 10, 12, inflation_rate=6))

    assert result.real_value == pytest.approx(result.final_value / 1.06 ** 10, abs=0.01)
    assert result.rows[-1].inflation_adjusted < result.rows[-1].balance


def test_tiered_rate_first_band_wins():
    tiers = TieredRate().add_band(1, 5, 12).add_band(3, None, 8)

    assert tiers.rate_for_year(4) == 12
    assert tiers.rate_for_year(6) == 8
    assert TieredRate().add_band(3, 4, 9).rate_for_year(1) == 9
    assert TieredRate().rate_for_year(1) == 0


def test_scenarios_run_independently():
    config = ProjectionConfig(
        monthly_amount=5_000,
        duration_years=10,
        scenarios={
            "pessimistic": ReturnScenario("pessimistic", FlatRate(8)),
            "optimistic": ReturnScenario("optimistic", FlatRate(14)),
            "glide": ReturnScenario("glide", TieredRate().add_band(1, 5, 14).add_band(6, None, 8)),
        },
    )

    results = project_all_scenarios(config)

    assert results["pessimistic"].final_value < results["glide"].final_value < results["optimistic"].final_value
    assert results["glide"].rows[59].return_rate == 14
    assert results["glide"].rows[60].return_rate == 8


def test_unknown_scenario():
    with pytest.raises(ValueError, match="not found"):
        project(ProjectionConfig.flat(1_000, 1, 10), "bullish")


def test_invalid_projection_config():
    with pytest.raises(ConfigurationError) as excinfo:
        project(ProjectionConfig.flat(0, 0, 10))

    assert len(excinfo.value.errors) == 2


def test_sampled_rows():
    result = project(ProjectionConfig.flat(1_000, 2, 10))

    assert [r.period for r in result.sampled()] == [1, 6, 12, 13, 18, 24]


def test_effective_return():
    assert effective_return(100, 200, 1) == pytest.approx(100)
    assert effective_return(0, 200, 1) == 0


def test_xirr_simple_year():
    flows = [CashFlow(-100_000, date(2023, 1, 1)), CashFlow(110_000, date(2024, 1, 1))]

    result = xirr(flows)

    assert result.converged
    # 365 days is slightly less than a 365.25-day year
    assert result.xirr == pytest.approx(10.0, abs=0.02)


def test_xirr_monthly_sip():
    flows = [CashFlow(-10_000, date(2023, m, 1)) for m in range(1, 13)]
    flows.append(CashFlow(130_000, date(2024, 1, 1)))

    result = xirr(flows)

    assert result.converged
    assert 10 < result.xirr < 20


def test_xirr_needs_both_signs():
    with pytest.raises(ValueError):
        xirr([CashFlow(-1, date(2023, 1, 1)), CashFlow(-1, date(2024, 1, 1))])
    with pytest.raises(ValueError):
        xirr([CashFlow(-1, date(2023, 1, 1))])


def test_step_up_entries_are_validated():
    config = ProjectionConfig.flat(1_000, 5, 10)
    config.step_ups = [StepUp(150), StepUp(10, 0), StepUp(5, 4, 2)]

    with pytest.raises(ConfigurationError) as excinfo:
        project(config)

    assert excinfo.value.errors == [
        "Step-up 1: percent must be between 0 and 100, got 150",
        "Step-up 2: start year must be a whole number >= 1, got 0",
        "Step-up 3: end year 2 is before start year 4",
    ]
