# marketplace/services/admin_service.py
import math
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.user import UserModel
from marketplace.domain.errors import Forbidden
from marketplace.domain.schemas import AdminUserCreate
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.user_service import UserService
from marketplace.utils.money import ZERO, to_money
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

RECENT_ORDERS = 5


def order_amounts(order: OrderModel) -> Dict[str, Any]:
    """Zamowienie z kwota faktury i suma udanych platnosci."""
    invoice = order.invoice
    paid = sum(
        (to_money(p.amount) for p in invoice.payments if p.status == "SUCCESS"),
        ZERO,
    ) if invoice else ZERO

    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "vendor_id": order.vendor_id,
        "status": order.status,
        "created_at": order.created_at,
        "total_amount": invoice.total_amount if invoice else ZERO,
        "paid_amount": paid,
    }


def page_info(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


class AdminService:
    """
    Podglad calej platformy dla admina: uzytkownicy, dostawcy, zamowienia.
    Tylko odczyt, poza zakladaniem kont z nadana rola.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepo(db)
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)

    def list_users(self, admin_user_id: int, role: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        self._require_admin(admin_user_id)
        role = role.upper() if role else None

        users = self.users.page_users(role, (page - 1) * limit, limit)
        return {"users": users, **page_info(self.users.count_users(role), page, limit)}

    def create_user(self, admin_user_id: int, payload: AdminUserCreate) -> UserModel:
        self._require_admin(admin_user_id)
        user = UserService(self.db).create_user(payload, role=payload.role)
        logger.info(f"Admin {admin_user_id} created user {user.id} with role {user.role}")
        return user

    def list_vendors(self, admin_user_id: int):
        self._require_admin(admin_user_id)
        return [
            {
                "id": vendor.id,
                "user_id": vendor.user_id,
                "company_name": vendor.company_name,
                "gst_no": vendor.gst_no,
                "email": email,
                "product_count": product_count,
            }
            for vendor, email, product_count in self.users.list_vendors_with_product_counts()
        ]

    def list_orders(self, admin_user_id: int, status: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        self._require_admin(admin_user_id)

        orders = self.orders.page_orders(status, (page - 1) * limit, limit)
        return {
            "orders": [order_amounts(o) for o in orders],
            **page_info(self.orders.count_orders(status), page, limit),
        }

    def dashboard_stats(self, admin_user_id: int) -> Dict[str, Any]:
        self._require_admin(admin_user_id)

        return {
            "total_users": self.users.count_users(),
            "total_vendors": self.users.count_vendors(),
            "total_products": self.products.count_products(),
            "total_orders": self.orders.count_orders(),
            "recent_orders": [order_amounts(o) for o in self.orders.page_orders(None, 0, RECENT_ORDERS)],
        }

    def _require_admin(self, user_id: int) -> UserModel:
        user = self.users.get_user(user_id)
        if not user or user.role != "ADMIN":
            raise Forbidden("Admin access required")
        return user
