"""
Engine constants and statutory assumptions for the finance calculators.

All monetary values in INR. Tax figures follow AY 2025-26.
"""

# ── Simulation bounds ────────────────────────────────────────────────
BALANCE_EPSILON = 0.01            # a loan is paid off at or below this
LOAN_CAP_MULTIPLIER = 3           # safety cap = 3 x base tenure
BASELINE_CAP_MULTIPLIER = 2       # no-prepayment baseline cap
REDUCE_EMI_FLOOR_FACTOR = 1.01    # recomputed payment >= 1.01 x interest-only

# ── Goal seeking ─────────────────────────────────────────────────────
GOAL_MAX_ITERATIONS = 100
GOAL_TOLERANCE = 100.0            # absolute, currency units
GOAL_MIN_CONTRIBUTION = 100.0
GOAL_DERIVATIVE_STEP = 1.0
GOAL_MIN_DERIVATIVE = 0.001
GOAL_ROUNDING_STEP = 100

# ── XIRR ─────────────────────────────────────────────────────────────
XIRR_MAX_ITERATIONS = 200
XIRR_TOLERANCE = 1e-7
XIRR_MIN_DERIVATIVE = 1e-12
XIRR_DAYS_PER_YEAR = 365.25

# ── Withdrawal ───────────────────────────────────────────────────────
CORPUS_SEARCH_RESOLUTION = 1_000
CORPUS_ROUNDING_STEP = 100_000    # one lakh
CORPUS_SEARCH_ITERATIONS = 100

# ── Reporting ────────────────────────────────────────────────────────
SAMPLE_EVERY = 6                  # ledger sampling for compact output

# ── Prepayment tax benefit ───────────────────────────────────────────
SEC_80C_MAX = 150_000

# ── Income tax ───────────────────────────────────────────────────────
# Bands: (lower, upper, rate %). Last band has no upper limit (use inf).
OLD_REGIME_SLABS = [
    (0, 250_000, 0),
    (250_000, 500_000, 5),
    (500_000, 1_000_000, 20),
    (1_000_000, float("inf"), 30),
]

NEW_REGIME_SLABS = [
    (0, 300_000, 0),
    (300_000, 700_000, 5),
    (700_000, 1_000_000, 10),
    (1_000_000, 1_200_000, 15),
    (1_200_000, 1_500_000, 20),
    (1_500_000, float("inf"), 30),
]

OLD_STANDARD_DEDUCTION = 50_000
NEW_STANDARD_DEDUCTION = 75_000
CESS_RATE = 0.04

SEC_80D_MAX = 50_000              # senior-citizen ceiling
SEC_80CCD_1B_MAX = 50_000

OLD_REBATE_INCOME_LIMIT = 500_000
OLD_REBATE_MAX = 12_500
NEW_REBATE_INCOME_LIMIT = 700_000
NEW_REBATE_MAX = 25_000

# Surcharge: (gross income upper bound, rate %). Above the last bound the
# rate depends on the regime.
SURCHARGE_BANDS = [
    (5_000_000, 0),
    (10_000_000, 10),
    (20_000_000, 15),
    (50_000_000, 25),
]
SURCHARGE_TOP_OLD = 37
SURCHARGE_TOP_NEW = 25

# ── Mutual fund gains ────────────────────────────────────────────────
EQUITY_LTCG_EXEMPTION = 125_000
EQUITY_LTCG_RATE = 0.125
EQUITY_STCG_RATE = 0.20

# ── Deposits ─────────────────────────────────────────────────────────
COMPOUNDING_FREQUENCIES = {
    "monthly": 12,
    "quarterly": 4,
    "half-yearly": 2,
    "yearly": 1,
}
RD_COMPOUNDING = 4
TDS_THRESHOLD = 40_000
TDS_THRESHOLD_SENIOR = 50_000
TDS_RATE_WITH_PAN = 10
TDS_RATE_WITHOUT_PAN = 20

# ── Scenario comparison ──────────────────────────────────────────────
MAX_SCENARIOS = 10                # oldest scenarios are dropped beyond this

# ── Portfolio ────────────────────────────────────────────────────────
ALLOCATION_TOLERANCE = 0.01       # target percents must sum to 100 within this

# ── Financial health ─────────────────────────────────────────────────
PILLAR_MAX_SCORE = 25
PILLAR_PARTIAL_SCORE = 15
PILLAR_MIN_SCORE = 5
SAVINGS_RATE_GOOD = 20            # percent of income
SAVINGS_RATE_FAIR = 10
DEBT_RATIO_GOOD = 30              # below this is good
DEBT_RATIO_FAIR = 50              # up to and including this is fair
EMERGENCY_MONTHS_GOOD = 6
EMERGENCY_MONTHS_FAIR = 3
DEBT_EXCEEDS_INCOME = 100         # total debt as percent of annual income
HEALTH_GRADES = [
    (85, "Excellent"),
    (70, "Good"),
    (50, "Fair"),
    (30, "Needs Improvement"),
]
HEALTH_GRADE_FLOOR = "Critical"
