# marketplace/services/catalog_service.py
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel, InventoryModel, PricingModel
from marketplace.data.models.vendor import VendorModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, Forbidden, NotFound
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def product_to_dict(product: ProductModel) -> Dict[str, Any]:
    inventory = product.inventory
    return {
        "id": product.id,
        "vendor_id": product.vendor_id,
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "is_published": product.is_published,
        "total_qty": inventory.total_qty if inventory else 0,
        "available_qty": inventory.available_qty if inventory else 0,
        "pricing": [{"unit": p.unit, "price": p.price} for p in product.pricing],
    }


class CatalogService:
    """Profil dostawcy i jego katalog produktow."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)

    def register_vendor(self, user_id: int, company_name: str, gst_no: Optional[str] = None) -> VendorModel:
        with unit_of_work(self.db):
            user = self.users.get_user(user_id)
            if not user:
                raise NotFound("User not found")
            if self.users.get_vendor_by_user(user_id):
                raise Conflict("Vendor profile already exists")

            vendor = self.users.add_vendor(
                VendorModel(user_id=user_id, company_name=company_name, gst_no=gst_no)
            )
            user.role = "VENDOR"

        logger.info(f"User {user_id} registered as vendor {vendor.id}")
        return self.users.get_vendor_by_user(user_id)

    def create_product(self, user_id: int, payload) -> Dict[str, Any]:
        with unit_of_work(self.db):
            vendor = self._vendor_of(user_id)

            product = ProductModel(
                vendor_id=vendor.id,
                name=payload.name,
                description=payload.description,
                category=payload.category,
                is_published=payload.is_published,
                inventory=InventoryModel(total_qty=payload.total_qty, available_qty=payload.total_qty),
                pricing=[PricingModel(unit=p.unit.value, price=p.price) for p in payload.pricing],
            )
            self.repo.add_product(product)
            product_id = product.id

        logger.info(f"Vendor {vendor.id} created product {product_id}")
        return product_to_dict(self.repo.get_product(product_id))

    def get_product(self, product_id: int) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product or not product.is_published:
            raise NotFound("Product not found")
        return product_to_dict(product)

    def list_products(self, vendor_id: Optional[int] = None, category: Optional[str] = None):
        return [product_to_dict(p) for p in self.repo.list_products(vendor_id, category)]

    def list_vendor_products(self, user_id: int):
        """Wlasny katalog dostawcy, razem z nieopublikowanymi."""
        vendor = self._vendor_of(user_id)
        return [product_to_dict(p) for p in self.repo.list_products(vendor.id, published_only=False)]

    def update_product(self, user_id: int, product_id: int, payload) -> Dict[str, Any]:
        with unit_of_work(self.db):
            product = self._owned_product(user_id, product_id)

            fields = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"total_qty", "pricing"})
            for name, value in fields.items():
                setattr(product, name, value)

            if payload.pricing is not None:
                self.repo.replace_pricing(
                    product,
                    [PricingModel(unit=p.unit.value, price=p.price) for p in payload.pricing],
                )

            if payload.total_qty is not None and not self.repo.resize_stock(product_id, payload.total_qty):
                raise Conflict("More units are rented out than the new total quantity")

        logger.info(f"Product {product_id} updated: {sorted(payload.model_dump(exclude_unset=True))}")
        return product_to_dict(self.repo.get_product(product_id))

    def delete_product(self, user_id: int, product_id: int) -> None:
        with unit_of_work(self.db):
            product = self._owned_product(user_id, product_id)

            # zamowienia trzymaja historie, koszyki trzymaja cene
            if self.repo.count_references(product_id):
                raise Conflict("Cannot delete product because it has orders or cart items")

            self.repo.delete_product(product)

        logger.info(f"Product {product_id} deleted")

    def _vendor_of(self, user_id: int) -> VendorModel:
        vendor = self.users.get_vendor_by_user(user_id)
        if not vendor:
            raise Forbidden("Vendor profile required")
        return vendor

    def _owned_product(self, user_id: int, product_id: int) -> ProductModel:
        vendor = self._vendor_of(user_id)
        product = self.repo.get_product(product_id)
        # cudzy produkt wyglada jak nieistniejacy
        if not product or product.vendor_id != vendor.id:
            raise NotFound("Product not found")
        return product
