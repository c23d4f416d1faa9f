# marketplace/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_or_create_cart(self, user_id: int) -> CartModel:
        """
        Find-or-create oparte o unique(user_id).
        Przegrany wyscig konczy sie IntegrityError, wtedy czytamy koszyk zwyciezcy.
        Wolane jako pierwsza operacja w sesji, rollback nic innego nie cofa.
        """
        cart = self.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            cart = CartModel(user_id=user_id, status="ACTIVE", version=1)
            self.db.add(cart)
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            cart = self.get_cart_by_user(user_id)

        return cart

    def get_cart_items(self, cart_id: int):
        return self.db.execute(
            select(CartItemModel)
            .options(selectinload(CartItemModel.product).selectinload(ProductModel.inventory))
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
        ).scalars().all()

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_cart_item_by_id(self, item_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_cart_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict, expected_status: str | None = None) -> int:
        """
        Optimistic locking:
        update carts set version = v+1 where id = ? and version = v
        """
        stmt = (
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        if expected_status is not None:
            stmt = stmt.where(CartModel.status == expected_status)

        result = self.db.execute(stmt)
        return result.rowcount

    def refresh(self, cart: CartModel) -> CartModel:
        self.db.refresh(cart)
        return cart
