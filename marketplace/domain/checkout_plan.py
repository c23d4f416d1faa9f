# marketplace/domain/checkout_plan.py
"""
Czysta czesc checkoutu: podzial koszyka na dostawcow i wyliczenie kwot.
Nic tu nie dotyka bazy, wiec kazdy etap da sie przetestowac osobno.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Sequence

from marketplace.utils.money import ZERO, to_money

GST_RATE = Decimal("0.18")


@dataclass(frozen=True)
class CartLine:
    """Migawka pozycji koszyka razem z dostawca produktu."""

    cart_item_id: int
    product_id: int
    vendor_id: int
    quantity: int
    rental_start: datetime
    rental_end: datetime
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass
class VendorOrderPlan:
    vendor_id: int
    lines: List[CartLine]
    subtotal: Decimal
    discount_amount: Decimal = ZERO
    gst_amount: Decimal = ZERO
    total_amount: Decimal = ZERO

    @property
    def taxable_amount(self) -> Decimal:
        return self.subtotal - self.discount_amount


@dataclass
class CheckoutPlan:
    orders: List[VendorOrderPlan] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((o.subtotal for o in self.orders), ZERO)

    @property
    def discount_amount(self) -> Decimal:
        return sum((o.discount_amount for o in self.orders), ZERO)

    @property
    def gst_amount(self) -> Decimal:
        return sum((o.gst_amount for o in self.orders), ZERO)

    @property
    def total_amount(self) -> Decimal:
        return sum((o.total_amount for o in self.orders), ZERO)


def cart_subtotal(lines: Sequence[CartLine]) -> Decimal:
    return sum((line.line_total for line in lines), ZERO)


def compute_gst(amount: Decimal) -> Decimal:
    return to_money(amount * GST_RATE)


def partition_by_vendor(lines: Sequence[CartLine]) -> Dict[int, List[CartLine]]:
    """
    Grupuje pozycje po dostawcy. Kolejnosc dostawcow i pozycji
    w grupie zgodna z kolejnoscia w koszyku.
    """
    groups: Dict[int, List[CartLine]] = {}
    for line in lines:
        groups.setdefault(line.vendor_id, []).append(line)
    return groups


def allocate_discount(subtotals: Sequence[Decimal], discount: Decimal) -> List[Decimal]:
    """
    Rozdziela rabat proporcjonalnie do subtotali, reszta z zaokraglen
    trafia do ostatniej grupy. Suma udzialow == rabat.
    """
    total = sum(subtotals, ZERO)
    discount = min(to_money(discount), total)

    if not subtotals or discount <= ZERO or total <= ZERO:
        return [ZERO for _ in subtotals]

    shares = [to_money(discount * s / total) for s in subtotals[:-1]]
    shares.append(discount - sum(shares, ZERO))
    return shares


def plan_checkout(lines: Sequence[CartLine], discount: Decimal = ZERO) -> CheckoutPlan:
    partitions = partition_by_vendor(lines)

    orders = [
        VendorOrderPlan(vendor_id=vendor_id, lines=items, subtotal=cart_subtotal(items))
        for vendor_id, items in partitions.items()
    ]

    shares = allocate_discount([o.subtotal for o in orders], discount)

    for order, share in zip(orders, shares):
        order.discount_amount = share
        # GST liczony od kwoty po rabacie
        order.gst_amount = compute_gst(order.taxable_amount)
        order.total_amount = order.taxable_amount + order.gst_amount

    return CheckoutPlan(orders=orders)
