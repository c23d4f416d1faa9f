# marketplace/services/order_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, Forbidden, NotFound
from marketplace.domain.states import (
    InvoiceStatus,
    OrderStatus,
    ReservationStatus,
    STOCK_RELEASING_ORDER_STATUSES,
    transition_invoice,
    transition_order,
)
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def release_reservations(order: OrderModel, products: ProductRepo) -> int:
    """Zwalnia aktywne rezerwacje zamowienia i oddaje towar na stan."""
    released = 0
    for item in order.items:
        for reservation in item.reservations:
            if reservation.status != ReservationStatus.ACTIVE.value:
                continue
            products.release_stock(reservation.product_id, reservation.quantity)
            reservation.status = ReservationStatus.RELEASED.value
            released += 1
    return released


class OrderService:
    """
    Serwis odpowiedzialny za odczyt zamowien i ich cykl zycia po checkoucie.
    Tworzenie zamowien jest w CheckoutService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    def list_user_orders(self, user_id: int, status: Optional[str] = None) -> List[OrderModel]:
        orders = self.repo.list_orders(user_id=user_id, status=status)
        logger.info(f"User {user_id}: {len(orders)} orders (status={status or 'all'})")
        return orders

    def get_order(self, user_id: int, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)

        # cudze zamowienie wyglada jak nieistniejace
        if not order or order.user_id != user_id:
            raise NotFound("Order not found")

        return order

    def list_vendor_orders(self, user_id: int, status: Optional[str] = None) -> List[OrderModel]:
        vendor = self._vendor_of(user_id)
        return self.repo.list_orders(vendor_id=vendor.id, status=status)

    def update_order_status(self, user_id: int, order_id: int, status: str) -> OrderModel:
        vendor = self._vendor_of(user_id)

        with unit_of_work(self.db):
            order = self.repo.get_order(order_id)
            if not order:
                raise NotFound("Order not found")
            if order.vendor_id != vendor.id:
                raise Forbidden("Order belongs to another vendor")

            # o zamowieniu czekajacym na platnosc decyduje tylko checkout
            if order.status == OrderStatus.PENDING_PAYMENT.value:
                raise Conflict("Order is awaiting payment and cannot be changed by the vendor")

            previous = order.status
            transition_order(order, status)

            if OrderStatus(status) == OrderStatus.CANCELLED and order.invoice is not None:
                if order.invoice.status == InvoiceStatus.DRAFT.value:
                    transition_invoice(order.invoice, InvoiceStatus.CANCELLED)

            if OrderStatus(status) in STOCK_RELEASING_ORDER_STATUSES:
                released = release_reservations(order, self.products)
                logger.info(f"Order {order_id}: released {released} reservations")

        logger.info(f"Order {order_id} moved {previous} -> {status} by vendor {vendor.id}")
        return self.repo.get_order(order_id)

    def _vendor_of(self, user_id: int):
        vendor = self.users.get_vendor_by_user(user_id)
        if not vendor:
            raise Forbidden("Vendor profile required")
        return vendor

    def list_vendor_invoices(self, user_id: int, status: Optional[str] = None):
        vendor = self._vendor_of(user_id)
        invoices = self.repo.list_vendor_invoices(vendor.id, status)
        logger.info(f"Vendor {vendor.id}: {len(invoices)} invoices (status={status or 'all'})")
        return invoices
