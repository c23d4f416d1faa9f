from sqlalchemy import select, func
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel
from marketplace.data.models.vendor import VendorModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def add_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def get_vendor_by_user(self, user_id: int) -> VendorModel | None:
        return self.db.execute(
            select(VendorModel).where(VendorModel.user_id == user_id)
        ).scalar_one_or_none()

    def add_vendor(self, vendor: VendorModel) -> VendorModel:
        self.db.add(vendor)
        self.db.flush()
        return vendor

    def page_users(self, role: str | None, offset: int, limit: int):
        stmt = select(UserModel)
        if role:
            stmt = stmt.where(UserModel.role == role)
        return self.db.execute(
            stmt.order_by(UserModel.id.desc()).offset(offset).limit(limit)
        ).scalars().all()

    def count_users(self, role: str | None = None) -> int:
        stmt = select(func.count(UserModel.id))
        if role:
            stmt = stmt.where(UserModel.role == role)
        return self.db.execute(stmt).scalar_one()

    def list_vendors_with_product_counts(self):
        """(vendor, email, liczba produktow) dla widoku admina."""
        return self.db.execute(
            select(VendorModel, UserModel.email, func.count(ProductModel.id))
            .join(UserModel, VendorModel.user_id == UserModel.id)
            .outerjoin(ProductModel, ProductModel.vendor_id == VendorModel.id)
            .group_by(VendorModel.id, UserModel.email)
            .order_by(VendorModel.id.desc())
        ).all()

    def count_vendors(self) -> int:
        return self.db.execute(select(func.count(VendorModel.id))).scalar_one()
