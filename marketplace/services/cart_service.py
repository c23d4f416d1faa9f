from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, Forbidden, NotFound, ProductUnavailable
from marketplace.domain.rental_pricing import PriceUnit, rental_unit_price
from marketplace.domain.states import CartStatus
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.clock import to_utc
from marketplace.utils.money import to_money
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs dla domeny cart
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt, ewentualnie zaklada pusty koszyk
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #dict przeksztalcany w jsona
    def _serialize(self, cart) -> Dict[str, Any]:
        items = self.repo.get_cart_items(cart.id)
        subtotal = sum((to_money(i.unit_price * i.quantity) for i in items), Decimal("0.00"))

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "status": cart.status,
            "items": [
                {
                    "id": i.id,
                    "product_id": i.product_id,
                    "vendor_id": i.product.vendor_id,
                    "quantity": i.quantity,
                    "rental_start": i.rental_start,
                    "rental_end": i.rental_end,
                    "price_unit": i.price_unit,
                    "unit_price": i.unit_price,
                    "line_total": to_money(i.unit_price * i.quantity),
                }
                for i in items
            ],
            "subtotal": subtotal,
        }

    def _ensure_modifiable(self, cart) -> None:
        if cart.status != CartStatus.ACTIVE.value:
            raise Conflict("Cart is locked by a pending checkout")

    def _ensure_available(self, product_id: int, quantity: int) -> None:
        available = self.products.get_available_qty(product_id)
        if quantity > available:
            raise ProductUnavailable(f"Only {available} units available")

    def _bump_version(self, cart) -> None:
        # Optimistic locking warunek na wersje
        # np w bazie update set version 2 where id 1 and version 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
            expected_status=CartStatus.ACTIVE.value,
        )
        if rowcount == 0:
            raise Conflict("Cart was modified by another operation")

    def _owned_item(self, user_id: int, item_id: int) -> CartItemModel:
        item = self.repo.get_cart_item_by_id(item_id)
        if not item:
            raise NotFound("Cart item not found")
        if item.cart.user_id != user_id:
            raise Forbidden("Cart item belongs to another user")
        return item

    #query
    def get_current_cart(self, user_id: int) -> Dict[str, Any]:
        with unit_of_work(self.db):
            cart = self.repo.get_or_create_cart(user_id)

        return self._serialize(cart)

    #commands
    def add_item(
        self,
        user_id: int,
        product_id: int,
        quantity: int,
        rental_start,
        rental_end,
        price_unit: PriceUnit = PriceUnit.DAY,
    ) -> Dict[str, Any]:
        unit = PriceUnit(price_unit)
        rental_start, rental_end = to_utc(rental_start), to_utc(rental_end)

        with unit_of_work(self.db):
            product = self.products.get_product(product_id)
            if not product:
                raise NotFound("Product not found")
            if not product.is_published:
                raise Conflict("Product is not available for rent")

            pricing = self.products.get_pricing(product_id, unit.value)
            if not pricing:
                raise NotFound(f"Product has no {unit.value} pricing")

            unit_price = rental_unit_price(pricing.price, rental_start, rental_end, unit)

            cart = self.repo.get_or_create_cart(user_id)
            self._ensure_modifiable(cart)

            existing_item = self.repo.get_cart_item(cart.id, product_id)
            requested = quantity + (existing_item.quantity if existing_item else 0)
            self._ensure_available(product_id, requested)

            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{existing_item.quantity} -> {requested}"
                )
                existing_item.quantity = requested
                existing_item.rental_start = rental_start
                existing_item.rental_end = rental_end
                existing_item.price_unit = unit.value
                existing_item.unit_price = unit_price
                self.repo.add_cart_item(existing_item)
            else:
                logger.info(f"Adding product {product_id} to cart {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=quantity,
                        rental_start=rental_start,
                        rental_end=rental_end,
                        price_unit=unit.value,
                        unit_price=unit_price,
                    )
                )

            self._bump_version(cart)

        return self._serialize(self.repo.refresh(cart))

    def update_item(self, user_id: int, item_id: int, quantity=None, rental_start=None, rental_end=None) -> Dict[str, Any]:
        with unit_of_work(self.db):
            item = self._owned_item(user_id, item_id)
            cart = item.cart
            self._ensure_modifiable(cart)

            if quantity is not None:
                self._ensure_available(item.product_id, quantity)
                item.quantity = quantity

            if rental_start is not None or rental_end is not None:
                start = to_utc(rental_start) if rental_start is not None else item.rental_start
                end = to_utc(rental_end) if rental_end is not None else item.rental_end

                pricing = self.products.get_pricing(item.product_id, item.price_unit)
                if not pricing:
                    raise NotFound(f"Product has no {item.price_unit} pricing")

                # nowe okno = nowa migawka ceny
                item.unit_price = rental_unit_price(pricing.price, to_utc(start), to_utc(end), item.price_unit)
                item.rental_start = start
                item.rental_end = end

            self.repo.add_cart_item(item)
            self._bump_version(cart)

        logger.info(f"Cart item {item_id} updated")
        return self._serialize(self.repo.refresh(cart))

    def remove_item(self, user_id: int, item_id: int) -> Dict[str, Any]:
        with unit_of_work(self.db):
            item = self._owned_item(user_id, item_id)
            cart = item.cart
            self._ensure_modifiable(cart)

            self.repo.delete_cart_item(item)
            self._bump_version(cart)

        logger.info(f"Cart item {item_id} removed from cart {cart.id}")
        return self._serialize(self.repo.refresh(cart))

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        with unit_of_work(self.db):
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise NotFound("No cart found")
            self._ensure_modifiable(cart)

            removed = self.repo.delete_cart_items(cart.id)
            self._bump_version(cart)

        logger.info(f"Cart {cart.id} cleared, {removed} items removed")
        return self._serialize(self.repo.refresh(cart))
