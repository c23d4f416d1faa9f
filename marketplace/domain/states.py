# marketplace/domain/states.py
"""
Statusy i dozwolone przejscia dla zamowien, faktur i checkoutow.
Jedyne miejsce, ktore zmienia pole status tych encji.
"""
import enum

from marketplace.domain.errors import Conflict


class CartStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CHECKOUT_PENDING = "CHECKOUT_PENDING"


class CheckoutStatus(str, enum.Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class OrderStatus(str, enum.Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    CONFIRMED = "CONFIRMED"
    PICKED_UP = "PICKED_UP"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"


class InvoiceStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class ReservationStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RELEASED = "RELEASED"


CHECKOUT_TRANSITIONS = {
    CheckoutStatus.PENDING_PAYMENT: {
        CheckoutStatus.PAID,
        CheckoutStatus.CANCELLED,
        CheckoutStatus.EXPIRED,
    },
    CheckoutStatus.PAID: set(),
    CheckoutStatus.CANCELLED: set(),
    CheckoutStatus.EXPIRED: set(),
}

ORDER_TRANSITIONS = {
    OrderStatus.PENDING_PAYMENT: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PICKED_UP, OrderStatus.CANCELLED},
    OrderStatus.PICKED_UP: {OrderStatus.RETURNED},
    OrderStatus.RETURNED: set(),
    OrderStatus.CANCELLED: set(),
}

INVOICE_TRANSITIONS = {
    InvoiceStatus.DRAFT: {InvoiceStatus.PAID, InvoiceStatus.PARTIAL, InvoiceStatus.CANCELLED},
    InvoiceStatus.PARTIAL: {InvoiceStatus.PAID},
    InvoiceStatus.PAID: set(),
    InvoiceStatus.CANCELLED: set(),
}

# po tych statusach towar wraca na stan
STOCK_RELEASING_ORDER_STATUSES = {OrderStatus.RETURNED, OrderStatus.CANCELLED}


def _transition(entity, table: dict, status_type, new_status, label: str):
    current = status_type(entity.status)
    target = status_type(new_status)

    if target not in table[current]:
        raise Conflict(f"{label} cannot move from {current.value} to {target.value}")

    entity.status = target.value
    return entity


def transition_checkout(checkout, new_status):
    return _transition(checkout, CHECKOUT_TRANSITIONS, CheckoutStatus, new_status, "Checkout")


def transition_order(order, new_status):
    return _transition(order, ORDER_TRANSITIONS, OrderStatus, new_status, "Order")


def transition_invoice(invoice, new_status):
    return _transition(invoice, INVOICE_TRANSITIONS, InvoiceStatus, new_status, "Invoice")
