# marketplace/repos/product_repo.py
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderItemModel
from marketplace.data.models.product import ProductModel, InventoryModel, PricingModel
from marketplace.data.models.review import ReviewModel
from marketplace.data.models.wishlist import WishlistItemModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .options(selectinload(ProductModel.inventory), selectinload(ProductModel.pricing))
            .where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def list_products(self, vendor_id: int | None = None, category: str | None = None, published_only: bool = True):
        stmt = select(ProductModel).options(
            selectinload(ProductModel.inventory),
            selectinload(ProductModel.pricing),
        )
        if vendor_id is not None:
            stmt = stmt.where(ProductModel.vendor_id == vendor_id)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        if published_only:
            stmt = stmt.where(ProductModel.is_published.is_(True))
        return self.db.execute(stmt.order_by(ProductModel.id)).scalars().all()

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def get_pricing(self, product_id: int, unit: str) -> PricingModel | None:
        return self.db.execute(
            select(PricingModel).where(
                PricingModel.product_id == product_id,
                PricingModel.unit == unit,
            )
        ).scalar_one_or_none()

    def get_available_qty(self, product_id: int) -> int:
        qty = self.db.execute(
            select(InventoryModel.available_qty).where(InventoryModel.product_id == product_id)
        ).scalar_one_or_none()
        return qty or 0

    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomowy warunkowy decrement:
        update set available = available - n where product = ? and available >= n
        0 rows affected = brak towaru.
        """
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.available_qty >= quantity,
            )
            .values(available_qty=InventoryModel.available_qty - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def release_stock(self, product_id: int, quantity: int) -> None:
        self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(available_qty=InventoryModel.available_qty + quantity)
            .execution_options(synchronize_session=False)
        )

    def count_products(self) -> int:
        return self.db.execute(select(func.count(ProductModel.id))).scalar_one()

    def count_references(self, product_id: int) -> int:
        """Pozycje zamowien i koszykow, ktore blokuja usuniecie produktu."""
        in_orders = self.db.execute(
            select(func.count(OrderItemModel.id)).where(OrderItemModel.product_id == product_id)
        ).scalar_one()
        in_carts = self.db.execute(
            select(func.count(CartItemModel.id)).where(CartItemModel.product_id == product_id)
        ).scalar_one()
        return in_orders + in_carts

    def replace_pricing(self, product: ProductModel, pricing: list) -> None:
        product.pricing.clear()
        self.db.flush()
        product.pricing.extend(pricing)
        self.db.flush()

    def delete_product(self, product: ProductModel) -> None:
        # recenzje i wishlisty odpinane recznie, SQLite nie wymusza ondelete
        self.db.execute(
            delete(WishlistItemModel)
            .where(WishlistItemModel.product_id == product.id)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(ReviewModel)
            .where(ReviewModel.product_id == product.id)
            .execution_options(synchronize_session=False)
        )
        self.db.delete(product)
        self.db.flush()

    def resize_stock(self, product_id: int, total_qty: int) -> bool:
        """
        Nowy stan calkowity, dostepne przesuniete o roznice.
        0 rows = wiecej sztuk jest wypozyczonych niz nowy stan.
        """
        delta = total_qty - InventoryModel.total_qty
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.available_qty + delta >= 0,
            )
            .values(total_qty=total_qty, available_qty=InventoryModel.available_qty + delta)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
