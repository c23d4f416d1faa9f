# marketplace/api/routers/coupons.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    CouponApplyIn,
    CouponCreate,
    CouponOut,
    CouponValidateIn,
    CouponValidationOut,
)
from marketplace.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.get("/available", response_model=List[CouponOut])
def list_available(
    user_id: Optional[int] = Query(None),
    min_order_amount: Optional[Decimal] = Query(None),
    db: Session = Depends(get_db),
):
    return CouponService(db).list_available(user_id, min_order_amount)


@router.post("/validate", response_model=CouponValidationOut)
def validate_coupon(
    payload: CouponValidateIn,
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """Nic nie zapisuje, tylko liczy rabat albo zwraca powod odrzucenia."""
    return CouponService(db).validate_coupon(payload.code, payload.order_amount, user_id)


@router.post("/apply", response_model=CouponOut)
def apply_coupon(payload: CouponApplyIn, user_id: int = Query(...), db: Session = Depends(get_db)):
    return CouponService(db).apply_coupon(payload.coupon_id, user_id, payload.order_amount)


@router.post("/", response_model=CouponOut, status_code=201)
def create_coupon(payload: CouponCreate, user_id: int = Query(...), db: Session = Depends(get_db)):
    return CouponService(db).create_coupon(user_id, payload)

