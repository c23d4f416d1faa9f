from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from marketplace.domain.checkout_plan import (
    CartLine,
    allocate_discount,
    compute_gst,
    partition_by_vendor,
    plan_checkout,
)
from marketplace.domain.errors import ValidationError
from marketplace.domain.rental_pricing import PriceUnit, billable_units, rental_unit_price

START = datetime(2026, 11, 2, 10, 0, tzinfo=timezone.utc)


def line(item_id, vendor_id, unit_price, quantity=1, product_id=None):
    return CartLine(
        cart_item_id=item_id,
        product_id=product_id or item_id,
        vendor_id=vendor_id,
        quantity=quantity,
        rental_start=START,
        rental_end=START + timedelta(days=2),
        unit_price=Decimal(unit_price),
    )


def test_partition_keeps_cart_order_of_vendors_and_items():
    lines = [line(1, 7, "10"), line(2, 3, "10"), line(3, 7, "10"), line(4, 5, "10")]

    groups = partition_by_vendor(lines)

    assert list(groups) == [7, 3, 5]
    assert [l.cart_item_id for l in groups[7]] == [1, 3]


def test_every_line_lands_in_exactly_one_order():
    lines = [line(1, 1, "10"), line(2, 2, "20"), line(3, 1, "30"), line(4, 3, "40")]

    plan = plan_checkout(lines)

    planned = [l.cart_item_id for order in plan.orders for l in order.lines]
    assert sorted(planned) == [1, 2, 3, 4]
    assert len(plan.orders) == 3


def test_gst_is_eighteen_percent_of_subtotal_without_discount():
    plan = plan_checkout([line(1, 1, "200.00", quantity=2), line(2, 2, "100.00")])

    first, second = plan.orders
    assert first.subtotal == Decimal("400.00")
    assert first.gst_amount == Decimal("72.00")
    assert first.total_amount == Decimal("472.00")
    assert second.total_amount == Decimal("118.00")
    assert plan.total_amount == Decimal("590.00")


def test_discount_is_split_proportionally_and_taxed_after():
    plan = plan_checkout(
        [line(1, 1, "200.00", quantity=2), line(2, 2, "100.00")],
        discount=Decimal("50.00"),
    )

    first, second = plan.orders
    assert first.discount_amount == Decimal("40.00")
    assert second.discount_amount == Decimal("10.00")
    assert first.gst_amount == Decimal("64.80")
    assert second.gst_amount == Decimal("16.20")
    assert plan.discount_amount == Decimal("50.00")
    assert plan.total_amount == Decimal("531.00")


def test_allocation_remainder_goes_to_last_group():
    shares = allocate_discount([Decimal("100"), Decimal("100"), Decimal("100")], Decimal("100.00"))

    assert shares == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(shares) == Decimal("100.00")


def test_allocation_never_exceeds_subtotal():
    shares = allocate_discount([Decimal("30.00"), Decimal("20.00")], Decimal("80.00"))

    assert sum(shares) == Decimal("50.00")


def test_allocation_without_discount_is_zero_for_all():
    assert allocate_discount([Decimal("10"), Decimal("20")], Decimal("0")) == [Decimal("0.00")] * 2


def test_order_totals_add_up_to_checkout_total():
    lines = [line(i, i % 3, f"{i * 7}.33", quantity=i) for i in range(1, 8)]

    plan = plan_checkout(lines, discount=Decimal("37.77"))

    assert sum(o.total_amount for o in plan.orders) == plan.total_amount
    for order in plan.orders:
        assert order.total_amount == order.subtotal - order.discount_amount + order.gst_amount
        assert order.gst_amount == compute_gst(order.taxable_amount)


def test_gst_rounds_half_up():
    assert compute_gst(Decimal("0.25")) == Decimal("0.05")


@pytest.mark.parametrize(
    "duration, unit, expected",
    [
        (timedelta(days=2), PriceUnit.DAY, 2),
        (timedelta(days=1, hours=1), PriceUnit.DAY, 2),
        (timedelta(minutes=30), PriceUnit.HOUR, 1),
        (timedelta(days=8), PriceUnit.WEEK, 2),
    ],
)
def test_started_unit_is_billed_whole(duration, unit, expected):
    assert billable_units(START, START + duration, unit) == expected


def test_rental_window_must_be_positive():
    with pytest.raises(ValidationError):
        billable_units(START, START, PriceUnit.DAY)


def test_unit_price_covers_whole_rental():
    assert rental_unit_price(Decimal("99.99"), START, START + timedelta(days=3), PriceUnit.DAY) == Decimal("299.97")
