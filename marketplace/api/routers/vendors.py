# marketplace/api/routers/vendors.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    OrderOut,
    OrderStatusIn,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    VendorCreate,
    VendorInvoiceOut,
    VendorOut,
)
from marketplace.services.catalog_service import CatalogService
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.post("/", response_model=VendorOut, status_code=201)
def register_vendor(payload: VendorCreate, user_id: int = Query(...), db: Session = Depends(get_db)):
    return CatalogService(db).register_vendor(user_id, payload.company_name, payload.gst_no)


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, user_id: int = Query(...), db: Session = Depends(get_db)):
    return CatalogService(db).create_product(user_id, payload)


@router.get("/products", response_model=List[ProductOut])
def list_own_products(user_id: int = Query(...), db: Session = Depends(get_db)):
    return CatalogService(db).list_vendor_products(user_id)


@router.patch("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, user_id: int = Query(...), db: Session = Depends(get_db)):
    return CatalogService(db).update_product(user_id, product_id, payload)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, user_id: int = Query(...), db: Session = Depends(get_db)):
    CatalogService(db).delete_product(user_id, product_id)
    return Response(status_code=204)


@router.get("/orders", response_model=List[OrderOut])
def list_vendor_orders(
    user_id: int = Query(...),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_vendor_orders(user_id, status)


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """Odbior, zwrot albo anulowanie zamowienia przez dostawce."""
    return OrderService(db).update_order_status(user_id, order_id, payload.status)


@router.get("/invoices", response_model=List[VendorInvoiceOut])
def list_vendor_invoices(
    user_id: int = Query(...),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_vendor_invoices(user_id, status)
