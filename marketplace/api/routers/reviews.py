from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import ReviewIn, ReviewOut, ReviewUpdate
from marketplace.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("/{product_id}", response_model=ReviewOut, status_code=201)
def add_review(product_id: int, payload: ReviewIn, user_id: int = Query(...), db: Session = Depends(get_db)):
    return ReviewService(db).add_review(user_id, product_id, payload.rating, payload.comment)


@router.delete("/{review_id}", status_code=204)
def delete_review(review_id: int, user_id: int = Query(...), db: Session = Depends(get_db)):
    ReviewService(db).delete_review(user_id, review_id)
    return Response(status_code=204)


@router.patch("/{review_id}", response_model=ReviewOut)
def update_review(review_id: int, payload: ReviewUpdate, user_id: int = Query(...), db: Session = Depends(get_db)):
    return ReviewService(db).update_review(user_id, review_id, payload.rating, payload.comment)
