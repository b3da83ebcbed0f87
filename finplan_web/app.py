import logging
import os

import click
from flask import Flask, jsonify, request

from finplan.data_models import AssetAllocation, Deductions, HealthInputs, SipHolding
from finplan.emi import affordability, calculate_emi, emi_breakdown, tenure_for_payment
from finplan.engine import balance_at_period, break_even_analysis, compare_strategies, compute_schedule
from finplan.errors import ConfigurationError, PaymentTooLowError
from finplan.goal_seek import calculate_required_sip, calculate_scenarios, goal_probability
from finplan.health import calculate_health_score
from finplan.main import build_loan_config
from finplan.portfolio import aggregate_portfolio, current_allocation, rebalance
from finplan.projection import ProjectionConfig, project
from finplan.scenarios import compare_scenarios
from finplan.tax import compare_regimes, fund_gains_tax, hra_exemption
from finplan.utils import parse_amount
from finplan.withdrawal import required_corpus, retirement_plan, safe_withdrawal, simulate_withdrawal

logger = logging.getLogger(__name__)

app = Flask(__name__)
# 0 returns the full ledger
app.config["MAX_LEDGER_ROWS"] = int(os.environ.get("FINPLAN_MAX_LEDGER_ROWS", "120"))


class MissingField(KeyError):
    pass


def parse_form_list(value) -> list[str]:
    """Accept a JSON list or a comma/newline separated string of entries.

    Returns a list of trimmed strings, skipping any empty entries.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    parts = [p.strip() for p in str(value).replace("\n", ",").split(",")]
    return [p for p in parts if p]


def _payload() -> dict:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _object(data: dict, key: str) -> dict:
    value = _field(data, key)
    if not isinstance(value, dict):
        raise ValueError(f"Field '{key}' must be an object")
    return value


def _list(data: dict, key: str) -> list:
    value = _field(data, key)
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ValueError(f"Field '{key}' must be a list of objects")
    return value


def _field(data: dict, key: str, default=None):
    value = data.get(key, default)
    if value is None:
        raise MissingField(key)
    return value


def _amount(data: dict, key: str, default=None) -> float:
    value = _field(data, key, default)
    if isinstance(value, (int, float)):
        return float(value)
    return parse_amount(value)


def _number(data: dict, key: str, default=None) -> float:
    return float(_field(data, key, default))


def _loan_config(data: dict):
    rate = data.get("rate")
    return build_loan_config(
        str(_field(data, "principal")),
        float(rate) if rate is not None else None,
        int(_field(data, "tenure")),
        tuple(parse_form_list(data.get("rate_periods"))),
        tuple(parse_form_list(data.get("prepayments"))),
        tuple(parse_form_list(data.get("annual"))),
        tuple(parse_form_list(data.get("lump_sums"))),
        data.get("strategy", "tenure"),
    )


def _limit(rows: list, full: bool):
    max_rows = app.config["MAX_LEDGER_ROWS"]
    if full or not max_rows or len(rows) <= max_rows:
        return rows, 0
    return rows[:max_rows], len(rows) - max_rows


@app.errorhandler(ConfigurationError)
def configuration_error(exc: ConfigurationError):
    return jsonify(errors=exc.errors), 400


@app.errorhandler(PaymentTooLowError)
def payment_too_low(exc: PaymentTooLowError):
    return jsonify(error=str(exc)), 422


@app.errorhandler(click.BadParameter)
def bad_parameter(exc: click.BadParameter):
    return jsonify(errors=[exc.format_message()]), 400


@app.errorhandler(ValueError)
def value_error(exc: ValueError):
    return jsonify(errors=[str(exc)]), 400


@app.errorhandler(MissingField)
def missing_field(exc: MissingField):
    return jsonify(errors=[f"Missing field: {exc.args[0]}"]), 400


@app.post("/api/loan")
def loan():
    data = _payload()
    result = compute_schedule(_loan_config(data))
    summary = result.to_dict()
    summary.pop("ledger")
    schedule, truncated = _limit(result.export_rows(), bool(data.get("full")))
    logger.debug("Loan of %s periods served (%s rows truncated)", result.periods, truncated)
    return jsonify(summary=summary, schedule=schedule, truncated=truncated)


@app.post("/api/loan/balance")
def loan_balance():
    data = _payload()
    snapshot = balance_at_period(_loan_config(data), int(_field(data, "period")))
    return jsonify(snapshot.to_dict())


@app.post("/api/loan/break-even")
def loan_break_even():
    data = _payload()
    result = break_even_analysis(
        _loan_config(data),
        _amount(data, "amount"),
        int(_field(data, "period")),
        _number(data, "alternate_return"),
    )
    return jsonify(result.to_dict())


@app.post("/api/loan/strategies")
def loan_strategies():
    data = _payload()
    result = compare_strategies(_loan_config(data), _amount(data, "amount"), int(_field(data, "period")))
    return jsonify(result.to_dict())


@app.post("/api/emi")
def emi():
    data = _payload()
    if "emi" in data:
        result = tenure_for_payment(_amount(data, "principal"), _amount(data, "emi"), _number(data, "rate"))
        return jsonify(result.to_dict())

    principal = _amount(data, "principal")
    rate = _number(data, "rate")
    tenure = int(_field(data, "tenure"))
    response = calculate_emi(principal, rate, tenure).to_dict()
    if "income" in data:
        response["affordability"] = affordability(
            _amount(data, "income"),
            _amount(data, "existing_emis", 0),
            rate,
            tenure,
            _number(data, "max_emi_percent", 50),
        ).to_dict()
    if data.get("breakdown"):
        response["breakdown"] = [row.to_dict() for row in emi_breakdown(principal, rate, tenure)]
    return jsonify(response)


@app.post("/api/sip")
def sip():
    data = _payload()
    config = ProjectionConfig.flat(
        _amount(data, "amount"),
        int(_field(data, "years")),
        _number(data, "return"),
        _number(data, "inflation", 0),
        _number(data, "step_up", 0),
    )
    result = project(config)
    response = result.to_dict()
    rows = result.rows if data.get("full") else result.sampled()
    response["rows"] = [row.to_dict() for row in rows]
    return jsonify(response)


@app.post("/api/goal")
def goal():
    data = _payload()
    target = _amount(data, "target")
    years = int(_field(data, "years"))
    inflation = _number(data, "inflation", 0)

    if "scenarios" in data:
        results = calculate_scenarios(target, years, {k: float(v) for k, v in _object(data, "scenarios").items()}, inflation)
        return jsonify({name: r.to_dict() for name, r in results.items()})

    annual_return = _number(data, "return")
    response = calculate_required_sip(target, years, annual_return, inflation, _number(data, "step_up", 0)).to_dict()
    if "sip" in data:
        response["probability"] = goal_probability(
            _amount(data, "sip"), target, years, annual_return, _number(data, "volatility", 5)
        ).to_dict()
    return jsonify(response)


@app.post("/api/withdrawal")
def withdrawal():
    data = _payload()
    monthly = _amount(data, "withdrawal")
    years = int(_field(data, "years"))
    annual_return = _number(data, "return")
    inflation = _number(data, "inflation", 0)
    adjusted = bool(data.get("inflation_adjusted", True))

    if "sip" in data:
        plan = retirement_plan(
            _amount(data, "sip"),
            int(_field(data, "sip_years")),
            _number(data, "sip_return"),
            monthly,
            years,
            annual_return,
            inflation,
            _number(data, "step_up", 0),
            adjusted,
        )
        return jsonify(plan.to_dict())

    if "corpus" not in data:
        corpus = required_corpus(monthly, years, annual_return, inflation, adjusted)
        return jsonify(required_corpus=corpus, safe_withdrawal=safe_withdrawal(corpus, years, annual_return))

    result = simulate_withdrawal(_amount(data, "corpus"), monthly, years, annual_return, inflation, adjusted)
    return jsonify(result.to_dict())


@app.post("/api/tax")
def tax():
    data = _payload()
    deductions = Deductions(
        sec_80c=_amount(data, "sec_80c", 0),
        sec_80d=_amount(data, "sec_80d", 0),
        sec_80ccd=_amount(data, "sec_80ccd", 0),
        other_exemptions=_amount(data, "other_exemptions", 0),
    )
    response = {}
    if all(k in data for k in ("basic", "hra", "rent")):
        exemption = hra_exemption(
            _amount(data, "basic"), _amount(data, "hra"), _amount(data, "rent"), bool(data.get("metro"))
        )
        deductions.hra = exemption.exemption
        response["hra"] = exemption.to_dict()
    response.update(compare_regimes(_amount(data, "income"), deductions).to_dict())
    if "fund" in data:
        fund = _object(data, "fund")
        response["fund"] = fund_gains_tax(
            _amount(fund, "invested"),
            _amount(fund, "value"),
            _number(fund, "years", 1),
            fund.get("type", "equity"),
            _number(fund, "slab_rate", 30),
        ).to_dict()
    return jsonify(response)


@app.post("/api/loan/compare")
def loan_compare():
    data = _payload()
    configs = {}
    for i, item in enumerate(_list(data, "scenarios"), 1):
        name = str(item.get("name") or f"Scenario {i}")
        if name in configs:
            raise ValueError(f"Duplicate scenario name: {name}")
        configs[name] = _loan_config(item)
    metrics = compare_scenarios(configs, data.get("base"))
    return jsonify(scenarios=[m.to_dict() for m in metrics])


@app.post("/api/portfolio")
def portfolio():
    data = _payload()
    holdings = [
        SipHolding(
            name=str(_field(item, "name")),
            monthly_amount=_amount(item, "monthly_amount", 0),
            invested_amount=_amount(item, "invested_amount", 0),
            current_value=_amount(item, "current_value", 0),
            return_rate=_number(item, "return_rate", 0),
        )
        for item in _list(data, "holdings")
    ]
    return jsonify(aggregate_portfolio(holdings).to_dict())


@app.post("/api/portfolio/rebalance")
def portfolio_rebalance():
    data = _payload()
    assets = [
        AssetAllocation(
            name=str(_field(item, "name")),
            current_value=_amount(item, "current_value"),
            target_percent=_number(item, "target_percent"),
            monthly_sip=_amount(item, "monthly_sip", 0),
        )
        for item in _list(data, "assets")
    ]
    return jsonify(
        allocation=[a.to_dict() for a in current_allocation(assets)],
        actions=[a.to_dict() for a in rebalance(assets)],
    )


@app.post("/api/health")
def health():
    data = _payload()
    inputs = HealthInputs(
        monthly_income=_amount(data, "monthly_income"),
        monthly_expenses=_amount(data, "monthly_expenses", 0),
        total_debt=_amount(data, "total_debt", 0),
        monthly_emis=_amount(data, "monthly_emis", 0),
        emergency_fund=_amount(data, "emergency_fund", 0),
        has_insurance=bool(data.get("has_insurance")),
        monthly_savings=_amount(data, "monthly_savings", 0),
        investments=_amount(data, "investments", 0),
    )
    return jsonify(calculate_health_score(inputs).to_dict())


if __name__ == "__main__":
    print("Starting finplan API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
