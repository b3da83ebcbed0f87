import pytest

from finplan.data_models import Deductions
from finplan.errors import ConfigurationError
from finplan.tax import compare_regimes, fund_gains_tax, hra_exemption, new_regime, old_regime, surcharge


def test_new_regime_slabs():
    result = new_regime(1_200_000)

    assert result.taxable_income == 1_125_000
    assert result.base_tax == 68_750
    assert result.rebate == 0
    assert result.cess == 2_750
    assert result.total_tax == 71_500
    assert [s.slab for s in result.slab_breakdown][:2] == ["0 - 3.0L", "3.0L - 7.0L"]


def test_old_regime_with_80c():
    result = old_regime(1_200_000, Deductions(sec_80c=150_000))

    assert result.taxable_income == 1_000_000
    assert result.base_tax == 112_500
    assert result.total_tax == 117_000


def test_deductions_are_capped():
    result = old_regime(1_200_000, Deductions(sec_80c=300_000, sec_80d=80_000, sec_80ccd=90_000))

    assert result.total_deductions == 50_000 + 150_000 + 50_000 + 50_000


def test_rebate_zeroes_small_incomes():
    assert new_regime(750_000).total_tax == 0
    assert old_regime(550_000).total_tax == 0


def test_surcharge_bands():
    assert surcharge(100, 5_000_000, "old") == 0
    assert surcharge(100, 7_000_000, "old") == 10
    assert surcharge(100, 15_000_000, "new") == 15
    assert surcharge(100, 30_000_000, "old") == 25
    assert surcharge(100, 60_000_000, "old") == 37
    assert surcharge(100, 60_000_000, "new") == 25


def test_compare_regimes():
    comparison = compare_regimes(1_200_000, Deductions(sec_80c=150_000))

    assert comparison.recommendation == "New Regime is beneficial"
    assert comparison.savings == 45_500
    assert comparison.old_result.regime == "old"


def test_negative_deduction_rejected():
    with pytest.raises(ConfigurationError):
        old_regime(1_000_000, Deductions(sec_80c=-1))


def test_hra_least_of_three():
    assert hra_exemption(600_000, 300_000, 240_000, metro=True).exemption == 180_000
    assert hra_exemption(600_000, 300_000, 400_000).exemption == 240_000
    assert hra_exemption(600_000, 300_000, 400_000, metro=True).exemption == 300_000
    assert hra_exemption(600_000, 300_000, 0).exemption == 0


def test_equity_long_term_gains():
    estimate = fund_gains_tax(1_000_000, 1_500_000, 3)

    assert estimate.taxable_gain == 375_000
    assert estimate.tax == 48_750
    assert estimate.post_tax_value == 1_451_250


def test_equity_short_term_and_debt():
    assert fund_gains_tax(1_000_000, 1_500_000, 0.5).tax == 104_000
    assert fund_gains_tax(1_000_000, 1_500_000, 2, "debt", slab_rate=30).tax == 156_000


def test_fund_loss_is_not_taxed():
    estimate = fund_gains_tax(1_000_000, 900_000, 2)

    assert estimate.tax == 0
    assert estimate.effective_return < 0


def test_unknown_fund_type():
    with pytest.raises(ValueError):
        fund_gains_tax(1_000, 2_000, 1, "gold")
