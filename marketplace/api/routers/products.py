from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import ProductOut, ProductReviewsOut
from marketplace.services.catalog_service import CatalogService
from marketplace.services.review_service import ReviewService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(
    vendor_id: Optional[int] = Query(None),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return CatalogService(db).list_products(vendor_id, category)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).get_product(product_id)


@router.get("/{product_id}/reviews", response_model=ProductReviewsOut)
def list_product_reviews(product_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).list_product_reviews(product_id)
