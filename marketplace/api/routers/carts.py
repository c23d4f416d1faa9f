#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    ItemIn,
    ItemUpdate,
    CartOut,
)
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db=db)


@router.get("/current", response_model=CartOut)
def get_current_cart(user_id: int = Query(...), db: Session = Depends(get_db)):
    return get_service(db).get_current_cart(user_id)


@router.post("/current/items", response_model=CartOut, status_code=201)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).add_item(
        user_id=user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        rental_start=payload.rental_start,
        rental_end=payload.rental_end,
        price_unit=payload.price_unit,
    )


@router.patch("/current/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).update_item(
        user_id,
        item_id,
        quantity=payload.quantity,
        rental_start=payload.rental_start,
        rental_end=payload.rental_end,
    )


@router.delete("/current/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(user_id, item_id)


@router.delete("/current", response_model=CartOut)
def clear_cart(user_id: int = Query(...), db: Session = Depends(get_db)):
    return get_service(db).clear_cart(user_id)
