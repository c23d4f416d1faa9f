from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import WishlistIn, WishlistOut
from marketplace.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@router.get("/", response_model=WishlistOut)
def get_wishlist(user_id: int = Query(...), db: Session = Depends(get_db)):
    return WishlistService(db).get_wishlist(user_id)


@router.post("/", response_model=WishlistOut, status_code=201)
def add_to_wishlist(payload: WishlistIn, user_id: int = Query(...), db: Session = Depends(get_db)):
    return WishlistService(db).add_product(user_id, payload.product_id)


@router.delete("/{product_id}", response_model=WishlistOut)
def remove_from_wishlist(product_id: int, user_id: int = Query(...), db: Session = Depends(get_db)):
    return WishlistService(db).remove_product(user_id, product_id)
