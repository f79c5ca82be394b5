"""Flat tax-planning rates.

These are rules of thumb for S-Corp dental contractors, not tax law.
"""

from decimal import Decimal

FEDERAL_RATE = Decimal("0.25")
SELF_EMPLOYMENT_RATE = Decimal("0.153")
# Share of net profit assumed to be paid as W-2 compensation
SE_COMPENSATION_FRACTION = Decimal("0.40")
STATE_RATE = Decimal("0.05")

QBI_RATE = Decimal("0.20")
QBI_MARGINAL_RATE = Decimal("0.37")

SAFE_HARBOR_THRESHOLD = Decimal("150000")
SAFE_HARBOR_STANDARD = Decimal("1.0")
SAFE_HARBOR_HIGH_INCOME = Decimal("1.1")

COMPENSATION_LOW = Decimal("0.40")
COMPENSATION_MID = Decimal("0.50")
COMPENSATION_HIGH = Decimal("0.60")

LAB_FEE_BENCHMARK = Decimal("0.10")

# Estimated-tax voucher due dates as (month, day, year offset)
QUARTER_DUE_DATES = {
    1: (4, 15, 0),
    2: (6, 15, 0),
    3: (9, 15, 0),
    4: (1, 15, 1),
}
