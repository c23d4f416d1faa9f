# marketplace/repos/coupon_repo.py
from datetime import datetime

from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from marketplace.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_coupon(self, coupon_id: int) -> CouponModel | None:
        return self.db.get(CouponModel, coupon_id)

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(CouponModel.code == code)
        ).scalar_one_or_none()

    def add_coupon(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.flush()
        return coupon

    def list_available(self, now: datetime, user_id: int | None = None):
        owner = CouponModel.user_id.is_(None)
        if user_id is not None:
            owner = or_(owner, CouponModel.user_id == user_id)

        return self.db.execute(
            select(CouponModel)
            .where(
                CouponModel.is_active.is_(True),
                or_(CouponModel.expiry_date.is_(None), CouponModel.expiry_date >= now),
                or_(
                    CouponModel.max_usage_count.is_(None),
                    CouponModel.current_usage_count < CouponModel.max_usage_count,
                ),
                owner,
            )
            .order_by(CouponModel.id)
        ).scalars().all()

    def increment_usage(self, coupon_id: int) -> bool:
        """
        Compare-and-swap na liczniku:
        update set count = count + 1 where id = ? and (max is null or count < max)
        """
        result = self.db.execute(
            update(CouponModel)
            .where(
                CouponModel.id == coupon_id,
                or_(
                    CouponModel.max_usage_count.is_(None),
                    CouponModel.current_usage_count < CouponModel.max_usage_count,
                ),
            )
            .values(current_usage_count=CouponModel.current_usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def decrement_usage(self, coupon_id: int) -> bool:
        result = self.db.execute(
            update(CouponModel)
            .where(CouponModel.id == coupon_id, CouponModel.current_usage_count > 0)
            .values(current_usage_count=CouponModel.current_usage_count - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
