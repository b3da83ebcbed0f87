import math

import pytest

from finplan.emi import affordability, calculate_emi, emi_breakdown, max_loan, tenure_for_payment
from finplan.errors import ConfigurationError, PaymentTooLowError


def home_loan_emi():
    r = 8.5 / 1200
    return 5_000_000 * r * (1 + r) ** 240 / ((1 + r) ** 240 - 1)


def test_emi_summary():
    summary = calculate_emi(5_000_000, 8.5, 240)

    assert summary.emi == pytest.approx(home_loan_emi(), abs=0.01)
    assert summary.emi == pytest.approx(43391.23, rel=1e-5)
    assert summary.total_payment == pytest.approx(summary.emi * 240, abs=1)
    assert summary.total_interest == pytest.approx(summary.total_payment - 5_000_000, abs=0.01)


def test_zero_rate_emi():
    assert calculate_emi(120_000, 0, 12).emi == 10_000


def test_emi_rejects_bad_inputs():
    with pytest.raises(ConfigurationError) as excinfo:
        calculate_emi(0, -1, 1.5)

    assert len(excinfo.value.errors) == 3
    assert excinfo.value.errors[0].startswith("Principal")


def test_tenure_for_payment():
    estimate = tenure_for_payment(5_000_000, 50_000, 8.5)

    assert 150 < estimate.tenure_months < 240
    assert estimate.total_payment == 50_000 * estimate.tenure_months
    assert tenure_for_payment(120_000, 10_000, 0).tenure_months == 12


def test_payment_below_interest_is_rejected():
    with pytest.raises(PaymentTooLowError) as excinfo:
        tenure_for_payment(1_000_000, 10_000, 12)

    assert excinfo.value.interest_only == pytest.approx(10_000)
    assert str(excinfo.value).startswith("EMI is too low")


def test_tenure_argument_checks():
    with pytest.raises(ValueError):
        tenure_for_payment(0, 1000, 8)
    with pytest.raises(ValueError):
        tenure_for_payment(1000, 0, 8)
    with pytest.raises(ValueError):
        tenure_for_payment(1000, 100, -1)


def test_max_loan_inverts_emi():
    assert max_loan(home_loan_emi(), 8.5, 240) == pytest.approx(5_000_000, abs=0.01)
    assert max_loan(10_000, 0, 12) == 120_000


def test_affordability():
    result = affordability(100_000, 20_000, 8.5, 240)

    assert result.max_new_emi == 30_000
    assert result.max_loan_amount == pytest.approx(max_loan(30_000, 8.5, 240))


def test_affordability_when_fully_committed():
    result = affordability(100_000, 60_000, 8.5, 240)

    assert result.max_new_emi == 0
    assert result.max_loan_amount == 0


def test_breakdown_repays_principal():
    rows = emi_breakdown(120_000, 12, 12)

    assert len(rows) == 12
    assert rows[-1].balance == pytest.approx(0, abs=0.1)
    assert math.isclose(sum(r.principal for r in rows) + rows[-1].balance, 120_000, abs_tol=0.05)
    assert rows[0].interest == 1_200
