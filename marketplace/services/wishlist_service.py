from typing import Dict, Any

from sqlalchemy.orm import Session

from marketplace.data.models.wishlist import WishlistModel, WishlistItemModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, NotFound
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.wishlist_repo import WishlistRepo


class WishlistService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = WishlistRepo(db)
        self.products = ProductRepo(db)

    def _get_or_create(self, user_id: int) -> WishlistModel:
        wishlist = self.repo.get_wishlist(user_id)
        if not wishlist:
            wishlist = self.repo.add_wishlist(WishlistModel(user_id=user_id))
        return wishlist

    def _serialize(self, wishlist) -> Dict[str, Any]:
        self.db.refresh(wishlist)
        return {
            "wishlist_id": wishlist.id,
            "user_id": wishlist.user_id,
            "product_ids": [i.product_id for i in wishlist.items],
        }

    def get_wishlist(self, user_id: int) -> Dict[str, Any]:
        with unit_of_work(self.db):
            wishlist = self._get_or_create(user_id)
        return self._serialize(wishlist)

    def add_product(self, user_id: int, product_id: int) -> Dict[str, Any]:
        with unit_of_work(self.db):
            if not self.products.get_product(product_id):
                raise NotFound("Product not found")

            wishlist = self._get_or_create(user_id)
            if self.repo.get_item(wishlist.id, product_id):
                raise Conflict("Product already in wishlist")

            self.repo.add_item(WishlistItemModel(wishlist_id=wishlist.id, product_id=product_id))

        return self._serialize(wishlist)

    def remove_product(self, user_id: int, product_id: int) -> Dict[str, Any]:
        with unit_of_work(self.db):
            wishlist = self.repo.get_wishlist(user_id)
            if not wishlist:
                raise NotFound("Wishlist not found")

            item = self.repo.get_item(wishlist.id, product_id)
            if not item:
                raise NotFound("Product not found in wishlist")
            self.repo.delete_item(item)

        return self._serialize(wishlist)
