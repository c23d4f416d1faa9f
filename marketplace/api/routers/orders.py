# marketplace/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import get_checkout_service
from marketplace.data.database import get_db
from marketplace.domain.schemas import CheckoutIn, CheckoutOut, OrderOut, PaymentVerifyIn
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def start_checkout(
    payload: CheckoutIn,
    user_id: int = Query(...),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Tworzy zamowienia (po jednym na dostawce) w stanie PENDING_PAYMENT
    i zamowienie platnosci w bramce. Koszyk zostaje zablokowany do czasu platnosci.
    """
    return svc.start_checkout(user_id, payload.address_id, payload.coupon_code)


@router.get("/checkout/{checkout_id}", response_model=CheckoutOut)
def get_checkout(
    checkout_id: int,
    user_id: int = Query(...),
    svc: CheckoutService = Depends(get_checkout_service),
):
    return svc.get_checkout(user_id, checkout_id)


@router.post("/checkout/{checkout_id}/verify", response_model=CheckoutOut)
def verify_payment(
    checkout_id: int,
    payload: PaymentVerifyIn,
    user_id: int = Query(...),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """Callback po platnosci: podpis i kwota sprawdzone, potem CONFIRMED i pusty koszyk."""
    return svc.verify_payment(
        user_id,
        checkout_id,
        payload.gateway_order_id,
        payload.gateway_payment_id,
        payload.signature,
    )


@router.post("/checkout/{checkout_id}/cancel", response_model=CheckoutOut)
def cancel_checkout(
    checkout_id: int,
    user_id: int = Query(...),
    svc: CheckoutService = Depends(get_checkout_service),
):
    return svc.cancel_checkout(user_id, checkout_id)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: int = Query(...),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_user_orders(user_id, status)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return OrderService(db).get_order(user_id, order_id)
