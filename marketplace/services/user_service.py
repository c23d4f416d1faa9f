from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, NotFound
from marketplace.domain.schemas import UserCreate
from marketplace.repos.user_repo import UserRepo
from marketplace.services.coupon_service import CouponService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)
        self.coupons = CouponService(db)

    def create_user(self, payload: UserCreate, role: str = "CUSTOMER") -> UserModel:
        with unit_of_work(self.db):
            if self.repo.get_user_by_email(payload.email):
                raise Conflict("User with this email already exists")

            user = self.repo.add_user(
                UserModel(name=payload.name, email=payload.email, role=role)
            )

        logger.info(f"User {user.id} registered as {role}")
        self._issue_welcome_coupon(user)
        return self.repo.get_user(user.id)

    def _issue_welcome_coupon(self, user: UserModel) -> None:
        # kupon powitalny nie moze zablokowac rejestracji
        try:
            with unit_of_work(self.db):
                coupon = self.coupons.issue_welcome_coupon(user)
            logger.info(f"Welcome coupon {coupon.code} issued for user {user.id}")
        except Exception as e:
            logger.error(f"Failed to create welcome coupon for user {user.id}: {e}")

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return user
