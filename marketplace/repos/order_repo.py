# marketplace/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.checkout import CheckoutModel
from marketplace.data.models.order import OrderModel, OrderItemModel, ReservationModel
from marketplace.data.models.invoice import InvoiceModel, PaymentModel


def _order_options():
    return (
        selectinload(OrderModel.items).selectinload(OrderItemModel.reservations),
        selectinload(OrderModel.invoice).selectinload(InvoiceModel.payments),
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    # ---------- checkout ----------
    def add_checkout(self, checkout: CheckoutModel) -> CheckoutModel:
        self.db.add(checkout)
        self.db.flush()
        return checkout

    def get_checkout(self, checkout_id: int) -> CheckoutModel | None:
        return self.db.execute(
            select(CheckoutModel)
            .options(selectinload(CheckoutModel.orders).options(*_order_options()))
            .where(CheckoutModel.id == checkout_id)
        ).scalar_one_or_none()

    def get_expired_checkouts(self, now: datetime):
        return self.db.execute(
            select(CheckoutModel)
            .where(
                CheckoutModel.status == "PENDING_PAYMENT",
                CheckoutModel.expires_at < now,
            )
            .order_by(CheckoutModel.id)
        ).scalars().all()

    # ---------- orders ----------
    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def add_reservation(self, reservation: ReservationModel) -> ReservationModel:
        self.db.add(reservation)
        self.db.flush()
        return reservation

    def add_invoice(self, invoice: InvoiceModel) -> InvoiceModel:
        self.db.add(invoice)
        self.db.flush()
        return invoice

    def add_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).options(*_order_options()).where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def list_orders(self, user_id: int | None = None, vendor_id: int | None = None, status: str | None = None):
        stmt = select(OrderModel).options(*_order_options())
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if vendor_id is not None:
            stmt = stmt.where(OrderModel.vendor_id == vendor_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return self.db.execute(
            stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).scalars().all()

    def count_prior_orders(self, user_id: int) -> int:
        """Zamowienia, ktore licza sie dla kuponu powitalnego (bez anulowanych)."""
        return self.db.execute(
            select(func.count(OrderModel.id)).where(
                OrderModel.user_id == user_id,
                OrderModel.status != "CANCELLED",
            )
        ).scalar_one()

    def count_orders_using_address(self, address_id: int) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(OrderModel.delivery_address_id == address_id)
        ).scalar_one()

    def get_items_due_between(self, start: datetime, end: datetime, statuses):
        return self.db.execute(
            select(OrderItemModel)
            .join(OrderItemModel.order)
            .options(
                selectinload(OrderItemModel.order).selectinload(OrderModel.user),
                selectinload(OrderItemModel.product),
            )
            .where(
                OrderItemModel.rental_end >= start,
                OrderItemModel.rental_end <= end,
                OrderModel.status.in_(list(statuses)),
            )
            .order_by(OrderItemModel.id)
        ).scalars().all()

    # ---------- vendor / admin ----------
    def list_vendor_invoices(self, vendor_id: int, status: str | None = None):
        stmt = (
            select(InvoiceModel)
            .join(InvoiceModel.order)
            .options(selectinload(InvoiceModel.payments))
            .where(OrderModel.vendor_id == vendor_id)
        )
        if status:
            stmt = stmt.where(InvoiceModel.status == status)
        return self.db.execute(
            stmt.order_by(InvoiceModel.created_at.desc(), InvoiceModel.id.desc())
        ).scalars().all()

    def page_orders(self, status: str | None, offset: int, limit: int):
        stmt = select(OrderModel).options(*_order_options())
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return self.db.execute(
            stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).offset(offset).limit(limit)
        ).scalars().all()

    def count_orders(self, status: str | None = None) -> int:
        stmt = select(func.count(OrderModel.id))
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return self.db.execute(stmt).scalar_one()
