# marketplace/domain/coupon_rules.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from marketplace.domain.errors import (
    BelowMinimum,
    Conflict,
    CouponExpired,
    CouponInactive,
    CouponLimitReached,
    Forbidden,
    Unauthorized,
)
from marketplace.utils.clock import as_utc
from marketplace.utils.money import ZERO, to_money

PERCENTAGE = "PERCENTAGE"
FIXED_AMOUNT = "FIXED_AMOUNT"


def check_eligibility(
    coupon,
    order_amount: Decimal,
    user_id: Optional[int],
    prior_orders: int,
    now: datetime,
) -> None:
    """
    Reguly sprawdzane po kolei, pierwsza niespelniona wygrywa.
    Istnienie kuponu sprawdza wywolujacy.
    """
    if not coupon.is_active:
        raise CouponInactive("This coupon is no longer active")

    if coupon.user_id is not None:
        if user_id is None:
            raise Unauthorized("Sign in to use this coupon")
        if coupon.user_id != user_id:
            raise Forbidden("This coupon belongs to another user")

    if coupon.is_welcome_coupon and prior_orders > 0:
        raise Conflict("Welcome coupon is valid on the first order only")

    if coupon.expiry_date is not None and as_utc(coupon.expiry_date) < now:
        raise CouponExpired("This coupon has expired")

    if coupon.max_usage_count is not None and coupon.current_usage_count >= coupon.max_usage_count:
        raise CouponLimitReached("This coupon has reached its usage limit")

    if coupon.min_order_amount is not None and to_money(order_amount) < to_money(coupon.min_order_amount):
        raise BelowMinimum(
            f"Minimum order amount of {to_money(coupon.min_order_amount)} required for this coupon"
        )


def compute_discount(discount_type: str, discount_value: Decimal, order_amount: Decimal) -> Decimal:
    amount = to_money(order_amount)

    if discount_type == PERCENTAGE:
        discount = to_money(amount * Decimal(discount_value) / 100)
    elif discount_type == FIXED_AMOUNT:
        discount = to_money(discount_value)
    else:
        discount = ZERO

    # rabat nie moze przekroczyc kwoty zamowienia
    return min(discount, amount)
