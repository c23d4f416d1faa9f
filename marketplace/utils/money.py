# marketplace/utils/money.py
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Gateway amounts are integers in the smallest currency unit (paise)."""
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
