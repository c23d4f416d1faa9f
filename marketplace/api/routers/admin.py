# marketplace/api/routers/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    AdminUserCreate,
    DashboardOut,
    OrderPage,
    UserPage,
    UserRead,
    VendorAdminOut,
)
from marketplace.services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=DashboardOut)
def dashboard_stats(user_id: int = Query(...), db: Session = Depends(get_db)):
    return AdminService(db).dashboard_stats(user_id)


@router.get("/users", response_model=UserPage)
def list_users(
    user_id: int = Query(...),
    role: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return AdminService(db).list_users(user_id, role, page, limit)


@router.post("/users", response_model=UserRead, status_code=201)
def create_user(payload: AdminUserCreate, user_id: int = Query(...), db: Session = Depends(get_db)):
    """Jedyna droga do konta ADMIN, pierwszego admina zaklada sie w bazie."""
    return AdminService(db).create_user(user_id, payload)


@router.get("/vendors", response_model=List[VendorAdminOut])
def list_vendors(user_id: int = Query(...), db: Session = Depends(get_db)):
    return AdminService(db).list_vendors(user_id)


@router.get("/orders", response_model=OrderPage)
def list_orders(
    user_id: int = Query(...),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return AdminService(db).list_orders(user_id, status, page, limit)
