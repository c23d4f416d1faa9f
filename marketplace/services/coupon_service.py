# marketplace/services/coupon_service.py
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from marketplace.data.models.coupon import CouponModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.coupon_rules import PERCENTAGE, check_eligibility, compute_discount
from marketplace.domain.errors import Conflict, CouponLimitReached, Forbidden, NotFound
from marketplace.repos.coupon_repo import CouponRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.clock import utcnow
from marketplace.utils.settings import WELCOME_COUPON_DAYS, WELCOME_COUPON_PERCENT
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


class CouponService:
    """
    Walidacja i naliczanie kuponow.
    validate nic nie zapisuje, apply/release zmieniaja licznik atomowo.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CouponRepo(db)
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)

    def resolve(self, code: str, order_amount: Decimal, user_id: Optional[int] = None):
        """Zwraca (kupon, rabat) albo rzuca pierwszy niespelniony warunek."""
        coupon = self.repo.get_by_code(normalize_code(code))
        if not coupon:
            raise NotFound("Invalid coupon code")

        return coupon, self._check(coupon, order_amount, user_id)

    def _check(self, coupon: CouponModel, order_amount: Decimal, user_id: Optional[int]) -> Decimal:
        prior_orders = self.orders.count_prior_orders(user_id) if user_id is not None else 0
        check_eligibility(coupon, order_amount, user_id, prior_orders, utcnow())
        return compute_discount(coupon.discount_type, coupon.discount_value, order_amount)

    def validate_coupon(self, code: str, order_amount: Decimal, user_id: Optional[int] = None) -> Dict[str, Any]:
        coupon, discount = self.resolve(code, order_amount, user_id)
        return {"coupon": coupon, "discount_amount": discount}

    def list_available(self, user_id: Optional[int] = None, min_order_amount: Optional[Decimal] = None):
        coupons = self.repo.list_available(utcnow(), user_id)

        if min_order_amount is not None:
            coupons = [
                c for c in coupons
                if c.min_order_amount is None or c.min_order_amount <= min_order_amount
            ]
        return coupons

    def apply_coupon(self, coupon_id: int, user_id: int, order_amount: Decimal) -> CouponModel:
        """Te same reguly co validate, potem atomowy increment licznika."""
        with unit_of_work(self.db):
            coupon = self.repo.get_coupon(coupon_id)
            if not coupon:
                raise NotFound("Coupon not found")

            self._check(coupon, order_amount, user_id)

            if not self.repo.increment_usage(coupon_id):
                raise CouponLimitReached("This coupon has reached its usage limit")

        self.db.refresh(coupon)
        logger.info(f"Coupon {coupon.code} applied by user {user_id}, usage {coupon.current_usage_count}")
        return coupon

    def release_coupon(self, coupon_id: int) -> CouponModel:
        """Kompensacja nieudanego zamowienia, bez endpointu."""
        with unit_of_work(self.db):
            coupon = self.repo.get_coupon(coupon_id)
            if not coupon:
                raise NotFound("Coupon not found")
            released = self.repo.decrement_usage(coupon_id)

        self.db.refresh(coupon)
        if not released:
            logger.warning(f"Coupon {coupon.code} released with zero usage, left at 0")
        return coupon

    def create_coupon(self, admin_user_id: int, payload) -> CouponModel:
        with unit_of_work(self.db):
            admin = self.users.get_user(admin_user_id)
            if not admin or admin.role != "ADMIN":
                raise Forbidden("Only admins can create coupons")

            code = normalize_code(payload.code)
            if self.repo.get_by_code(code):
                raise Conflict(f"Coupon {code} already exists")

            coupon = self.repo.add_coupon(
                CouponModel(
                    code=code,
                    description=payload.description,
                    discount_type=payload.discount_type,
                    discount_value=payload.discount_value,
                    min_order_amount=payload.min_order_amount,
                    max_usage_count=payload.max_usage_count,
                    current_usage_count=0,
                    expiry_date=payload.expiry_date,
                    is_active=True,
                    user_id=payload.user_id,
                    is_welcome_coupon=False,
                )
            )

        self.db.refresh(coupon)
        logger.info(f"Coupon {coupon.code} created by admin {admin_user_id}")
        return coupon

    def issue_welcome_coupon(self, user) -> CouponModel:
        """Dodaje kupon do biezacej transakcji, commit robi wywolujacy."""
        coupon = CouponModel(
            code=f"WELCOME-{user.id:06d}",
            description=f"Welcome! Enjoy {WELCOME_COUPON_PERCENT}% off on your first order.",
            discount_type=PERCENTAGE,
            discount_value=WELCOME_COUPON_PERCENT,
            min_order_amount=None,
            max_usage_count=1,
            current_usage_count=0,
            expiry_date=utcnow() + timedelta(days=WELCOME_COUPON_DAYS),
            is_active=True,
            user_id=user.id,
            is_welcome_coupon=True,
        )
        return self.repo.add_coupon(coupon)
