# marketplace/services/checkout_service.py
import uuid
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.checkout import CheckoutModel
from marketplace.data.models.invoice import InvoiceModel, PaymentModel
from marketplace.data.models.order import OrderModel, OrderItemModel, ReservationModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.checkout_plan import CartLine, CheckoutPlan, VendorOrderPlan, cart_subtotal, plan_checkout
from marketplace.domain.errors import (
    Conflict,
    CouponLimitReached,
    EmptyCart,
    Forbidden,
    NotFound,
    PaymentVerificationFailure,
    ProductUnavailable,
    TransactionFailure,
)
from marketplace.domain.states import (
    CartStatus,
    CheckoutStatus,
    InvoiceStatus,
    OrderStatus,
    ReservationStatus,
    transition_checkout,
    transition_invoice,
    transition_order,
)
from marketplace.repos.address_repo import AddressRepo
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.coupon_repo import CouponRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.coupon_service import CouponService
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_service import release_reservations
from marketplace.services.payment_gateway import PaymentGatewayClient
from marketplace.utils.clock import as_utc, utcnow
from marketplace.utils.money import ZERO, to_minor_units, to_money
from marketplace.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, CHECKOUT_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

CAPTURED_PAYMENT_STATUSES = {"captured", "authorized"}


def document_number(prefix: str, now: datetime) -> str:
    return f"{prefix}-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


class CheckoutService:
    """
    Skladanie zamowienia z koszyka w dwoch krokach:

    1. start_checkout: plan (czyste funkcje) -> intent w bramce ->
       jedna transakcja: zamowienia per dostawca, pozycje, rezerwacje,
       faktury DRAFT, licznik kuponu, koszyk zablokowany.
    2. verify_payment: weryfikacja podpisu i kwoty ->
       jedna transakcja: CONFIRMED, faktury PAID, platnosci, czyszczenie koszyka.

    Nieoplacony checkout mozna anulowac, po CHECKOUT_TTL_SECONDS wygasa sam.
    """

    def __init__(
        self,
        db: Session,
        gateway: PaymentGatewayClient,
        lock_service: LockService,
        notifications: Optional[NotificationService] = None,
    ):
        self.db = db
        self.gateway = gateway
        self.lock_service = lock_service
        self.notifications = notifications or NotificationService()

        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.coupons = CouponRepo(db)
        self.addresses = AddressRepo(db)
        self.users = UserRepo(db)
        self.coupon_service = CouponService(db)

    # =====================================================
    # QUERY
    # =====================================================
    def get_checkout(self, user_id: int, checkout_id: int) -> Dict[str, Any]:
        return self._summary(self._owned_checkout(user_id, checkout_id))

    # =====================================================
    # COMMANDS
    # =====================================================
    def start_checkout(self, user_id: int, address_id: Optional[int] = None, coupon_code: Optional[str] = None) -> Dict[str, Any]:
        # jeden checkout na uzytkownika naraz
        token = self.lock_service.new_token()
        if not self.lock_service.acquire_checkout_lock(user_id, token, CHECKOUT_LOCK_TTL_SECONDS):
            raise Conflict("Another checkout is already in progress")

        try:
            return self._start_checkout(user_id, address_id, coupon_code)
        finally:
            try:
                self.lock_service.release_checkout_lock(user_id, token)
            except Exception as e:
                # lock i tak wygasnie po TTL
                logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    def verify_payment(
        self,
        user_id: int,
        checkout_id: int,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
    ) -> Dict[str, Any]:
        checkout = self._owned_checkout(user_id, checkout_id)

        if checkout.status == CheckoutStatus.PAID.value:
            # powtorzony callback z ta sama platnoscia
            if checkout.gateway_payment_id == gateway_payment_id:
                return self._summary(checkout)
            raise Conflict("Checkout is already paid")

        if checkout.status != CheckoutStatus.PENDING_PAYMENT.value:
            raise Conflict(f"Checkout is {checkout.status}")

        self._verify_with_gateway(checkout, gateway_order_id, gateway_payment_id, signature)

        now = utcnow()
        try:
            with unit_of_work(self.db):
                self._confirm(checkout, gateway_payment_id, now)
        except SQLAlchemyError as e:
            logger.exception(f"Payment confirmation of checkout {checkout_id} failed")
            raise TransactionFailure("Payment could not be recorded") from e

        checkout = self.orders.get_checkout(checkout_id)
        logger.info(f"Checkout {checkout.id} paid with {gateway_payment_id}, {len(checkout.orders)} orders confirmed")

        self._notify_confirmed(checkout)
        return self._summary(checkout)

    def cancel_checkout(self, user_id: int, checkout_id: int) -> Dict[str, Any]:
        checkout = self._owned_checkout(user_id, checkout_id)

        with unit_of_work(self.db):
            self._release(checkout, CheckoutStatus.CANCELLED)

        logger.info(f"Checkout {checkout_id} cancelled by user {user_id}")
        return self._summary(self.orders.get_checkout(checkout_id))

    def expire_checkout(self, checkout_id: int) -> None:
        checkout = self.orders.get_checkout(checkout_id)
        if not checkout or checkout.status != CheckoutStatus.PENDING_PAYMENT.value:
            return

        with unit_of_work(self.db):
            self._release(checkout, CheckoutStatus.EXPIRED)

        logger.info(f"Checkout {checkout_id} expired")

    # =====================================================
    # STAGES
    # =====================================================
    def _start_checkout(self, user_id: int, address_id: Optional[int], coupon_code: Optional[str]) -> Dict[str, Any]:
        if not self.users.get_user(user_id):
            raise NotFound("User not found")

        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []

        if not items:
            raise EmptyCart("Cart is empty")

        if cart.status != CartStatus.ACTIVE.value:
            raise Conflict("A checkout is already pending for this cart")

        if address_id is not None:
            address = self.addresses.get_address(address_id)
            if not address or address.user_id != user_id:
                raise NotFound("Address not found")

        lines = self._cart_lines(items)

        coupon, discount = None, ZERO
        if coupon_code:
            coupon, discount = self.coupon_service.resolve(coupon_code, cart_subtotal(lines), user_id)

        plan = plan_checkout(lines, discount)
        logger.info(
            f"Checkout plan for cart {cart.id}: {len(plan.orders)} vendor orders, "
            f"total {plan.total_amount}"
        )

        # calosc pokryta kuponem: nie ma czego placic, bramka odrzuca kwote 0
        free = plan.total_amount == ZERO

        # intent przed zapisem: jesli zapis padnie, zamowienie w bramce po prostu nie zostanie oplacone
        intent = None if free else self.gateway.create_order(plan.total_amount, receipt=f"cart-{cart.id}-v{cart.version}")

        now = utcnow()
        try:
            with unit_of_work(self.db):
                checkout = self._materialize(user_id, cart, plan, coupon, address_id, intent["id"] if intent else None, now)
                checkout_id = checkout.id
                if free:
                    # wersja koszyka zmieniona bulk updatem
                    self.carts.refresh(cart)
                    self._confirm(checkout, None, now, mode="COUPON")
        except SQLAlchemyError as e:
            logger.exception(f"Checkout of cart {cart.id} failed, nothing was written")
            raise TransactionFailure("Order could not be placed") from e

        checkout = self.orders.get_checkout(checkout_id)
        logger.info(f"Checkout {checkout.id} created, orders {[o.id for o in checkout.orders]}")

        if free:
            logger.info(f"Checkout {checkout.id} fully covered by coupon, confirmed without payment")
            self._notify_confirmed(checkout)
        return self._summary(checkout)

    def _cart_lines(self, items) -> List[CartLine]:
        return [
            CartLine(
                cart_item_id=item.id,
                product_id=item.product_id,
                vendor_id=item.product.vendor_id,
                quantity=item.quantity,
                rental_start=as_utc(item.rental_start),
                rental_end=as_utc(item.rental_end),
                unit_price=to_money(item.unit_price),
            )
            for item in items
        ]

    def _materialize(self, user_id, cart, plan: CheckoutPlan, coupon, address_id, gateway_order_id: str, now: datetime) -> CheckoutModel:
        # Optimistic locking: drugi rownolegly checkout tego koszyka dostanie 0 rows
        rowcount = self.carts.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "status": CartStatus.CHECKOUT_PENDING.value,
            },
            expected_status=CartStatus.ACTIVE.value,
        )
        if rowcount == 0:
            raise Conflict("Cart was modified by another operation")

        if coupon is not None and not self.coupons.increment_usage(coupon.id):
            raise CouponLimitReached("This coupon has reached its usage limit")

        checkout = self.orders.add_checkout(
            CheckoutModel(
                user_id=user_id,
                cart_id=cart.id,
                status=CheckoutStatus.PENDING_PAYMENT.value,
                subtotal=plan.subtotal,
                discount_amount=plan.discount_amount,
                total_amount=plan.total_amount,
                currency=self.gateway.currency,
                coupon_id=coupon.id if coupon is not None else None,
                gateway_order_id=gateway_order_id,
                expires_at=now + timedelta(seconds=CHECKOUT_TTL_SECONDS),
                created_at=now,
            )
        )

        for vendor_plan in plan.orders:
            self._materialize_order(checkout, vendor_plan, user_id, address_id, now)

        return checkout

    def _materialize_order(self, checkout, vendor_plan: VendorOrderPlan, user_id: int, address_id, now: datetime) -> OrderModel:
        order = self.orders.add_order(
            OrderModel(
                order_number=document_number("ORD", now),
                checkout_id=checkout.id,
                user_id=user_id,
                vendor_id=vendor_plan.vendor_id,
                delivery_address_id=address_id,
                status=OrderStatus.PENDING_PAYMENT.value,
            )
        )

        for line in vendor_plan.lines:
            item = self.orders.add_order_item(
                OrderItemModel(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    rental_start=line.rental_start,
                    rental_end=line.rental_end,
                    unit_price=line.unit_price,
                )
            )

            # ponowne sprawdzenie dostepnosci, atomowo w tej samej transakcji
            if not self.products.reserve_stock(line.product_id, line.quantity):
                raise ProductUnavailable(
                    f"Product {line.product_id} is no longer available in quantity {line.quantity}"
                )

            self.orders.add_reservation(
                ReservationModel(
                    order_item_id=item.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    reserved_from=line.rental_start,
                    reserved_to=line.rental_end,
                    status=ReservationStatus.ACTIVE.value,
                )
            )

        self.orders.add_invoice(
            InvoiceModel(
                order_id=order.id,
                invoice_number=document_number("INV", now),
                subtotal=vendor_plan.subtotal,
                discount_amount=vendor_plan.discount_amount,
                gst_amount=vendor_plan.gst_amount,
                total_amount=vendor_plan.total_amount,
                status=InvoiceStatus.DRAFT.value,
            )
        )

        logger.info(f"Order {order.id} for vendor {vendor_plan.vendor_id}: {len(vendor_plan.lines)} items, total {vendor_plan.total_amount}")
        return order

    def _verify_with_gateway(self, checkout, gateway_order_id: str, gateway_payment_id: str, signature: str) -> None:
        if gateway_order_id != checkout.gateway_order_id:
            raise PaymentVerificationFailure("Payment does not belong to this checkout")

        if not self.gateway.verify_signature(gateway_order_id, gateway_payment_id, signature):
            logger.warning(f"Invalid payment signature for checkout {checkout.id}")
            raise PaymentVerificationFailure("Invalid payment signature")

        payment = self.gateway.fetch_payment(gateway_payment_id)

        if (
            payment.get("order_id") != checkout.gateway_order_id
            or int(payment.get("amount", -1)) != to_minor_units(checkout.total_amount)
            or payment.get("status") not in CAPTURED_PAYMENT_STATUSES
        ):
            logger.warning(f"Gateway payment {gateway_payment_id} does not match checkout {checkout.id}: {payment}")
            raise PaymentVerificationFailure("Payment amount or status does not match the order")

    def _confirm(self, checkout, gateway_payment_id: Optional[str], now: datetime, mode: str = "ONLINE") -> None:
        # najpierw koszyk: rownolegla weryfikacja tego samego checkoutu dostanie 0 rows
        self._unlock_cart(checkout.cart_id, clear_items=True)

        transition_checkout(checkout, CheckoutStatus.PAID)
        checkout.gateway_payment_id = gateway_payment_id

        for order in checkout.orders:
            transition_order(order, OrderStatus.CONFIRMED)
            transition_invoice(order.invoice, InvoiceStatus.PAID)
            self.orders.add_payment(
                PaymentModel(
                    invoice_id=order.invoice.id,
                    amount=order.invoice.total_amount,
                    mode=mode,
                    status="SUCCESS",
                    transaction_id=gateway_payment_id,
                    paid_at=now,
                )
            )

    def _release(self, checkout, final_status: CheckoutStatus) -> None:
        transition_checkout(checkout, final_status)
        self._unlock_cart(checkout.cart_id, clear_items=False)

        for order in checkout.orders:
            # dostawca mogl juz anulowac swoje zamowienie
            if order.status != OrderStatus.CANCELLED.value:
                transition_order(order, OrderStatus.CANCELLED)
            if order.invoice.status == InvoiceStatus.DRAFT.value:
                transition_invoice(order.invoice, InvoiceStatus.CANCELLED)
            release_reservations(order, self.products)

        if checkout.coupon_id is not None:
            self.coupons.decrement_usage(checkout.coupon_id)

    def _unlock_cart(self, cart_id: int, clear_items: bool) -> None:
        cart = self.carts.get_cart(cart_id)

        rowcount = self.carts.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "status": CartStatus.ACTIVE.value,
            },
            expected_status=CartStatus.CHECKOUT_PENDING.value,
        )
        if rowcount == 0:
            raise Conflict("Cart was modified by another operation")

        if clear_items:
            # koszyk zostaje, pusty i aktywny
            removed = self.carts.delete_cart_items(cart.id)
            logger.info(f"Cart {cart.id} cleared, {removed} items removed")

    def _owned_checkout(self, user_id: int, checkout_id: int) -> CheckoutModel:
        checkout = self.orders.get_checkout(checkout_id)
        if not checkout:
            raise NotFound("Checkout not found")
        if checkout.user_id != user_id:
            raise Forbidden("Checkout belongs to another user")
        return checkout

    def _notify_confirmed(self, checkout) -> None:
        user = self.users.get_user(checkout.user_id)
        self.notifications.send_order_confirmation(
            user.email,
            user.name,
            [o.order_number for o in checkout.orders],
        )

    def _summary(self, checkout) -> Dict[str, Any]:
        return {
            "checkout_id": checkout.id,
            "status": checkout.status,
            "order_ids": [o.id for o in checkout.orders],
            "subtotal": checkout.subtotal,
            "discount_amount": checkout.discount_amount,
            "total_amount": checkout.total_amount,
            "currency": checkout.currency,
            "gateway_order_id": checkout.gateway_order_id,
            "gateway_key_id": self.gateway.key_id or None,
            "expires_at": checkout.expires_at,
        }
