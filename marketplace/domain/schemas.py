# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr, model_validator
from typing import List, Optional, Literal
from decimal import Decimal
from datetime import datetime

from marketplace.domain.rental_pricing import PriceUnit
from marketplace.utils.clock import to_utc


# ---------- users / vendors ----------

class UserCreate(BaseModel):
    """Schema dla tworzenia uzytkownika."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class AdminUserCreate(UserCreate):
    """Konto zakladane przez admina, tylko tu mozna nadac role."""

    role: Literal["CUSTOMER", "ADMIN"] = "CUSTOMER"


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class VendorCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=120)
    gst_no: Optional[str] = Field(None, max_length=20)


class VendorOut(BaseModel):
    id: int
    user_id: int
    company_name: Optional[str]
    gst_no: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class UserPage(BaseModel):
    users: List[UserRead]
    total: int
    page: int
    limit: int
    total_pages: int


class VendorAdminOut(BaseModel):
    id: int
    user_id: int
    company_name: Optional[str]
    gst_no: Optional[str]
    email: str
    product_count: int


# ---------- catalog ----------

class PricingIn(BaseModel):
    unit: PriceUnit
    price: Decimal = Field(..., gt=0, decimal_places=2)


class PricingOut(BaseModel):
    unit: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    total_qty: int = Field(..., ge=0)
    is_published: bool = True
    pricing: List[PricingIn] = Field(..., min_length=1)


class ProductUpdate(BaseModel):
    """Pola pominiete zostaja bez zmian, pricing zastepuje caly cennik."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    total_qty: Optional[int] = Field(None, ge=0)
    is_published: Optional[bool] = None
    pricing: Optional[List[PricingIn]] = Field(None, min_length=1)


class ProductOut(BaseModel):
    id: int
    vendor_id: int
    name: str
    description: Optional[str]
    category: Optional[str]
    is_published: bool
    total_qty: int
    available_qty: int
    pricing: List[PricingOut]


# ---------- cart ----------

class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    rental_start: datetime
    rental_end: datetime
    price_unit: PriceUnit = PriceUnit.DAY

    @model_validator(mode="after")
    def check_window(self):
        if to_utc(self.rental_end) <= to_utc(self.rental_start):
            raise ValueError("rental_end must be after rental_start")
        return self


class ItemUpdate(BaseModel):
    quantity: Optional[int] = Field(None, gt=0)
    rental_start: Optional[datetime] = None
    rental_end: Optional[datetime] = None


class CartItemOut(BaseModel):
    id: int
    product_id: int
    vendor_id: int
    quantity: int
    rental_start: datetime
    rental_end: datetime
    price_unit: str
    unit_price: Decimal
    line_total: Decimal


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    status: str
    items: List[CartItemOut]
    subtotal: Decimal


# ---------- checkout / orders ----------

class CheckoutIn(BaseModel):
    address_id: Optional[int] = Field(None, gt=0)
    coupon_code: Optional[str] = Field(None, min_length=1, max_length=64)


class CheckoutOut(BaseModel):
    checkout_id: int
    status: str
    order_ids: List[int]
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    currency: str
    gateway_order_id: Optional[str]
    gateway_key_id: Optional[str]
    expires_at: datetime


class PaymentVerifyIn(BaseModel):
    gateway_order_id: str = Field(..., min_length=1)
    gateway_payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class PaymentOut(BaseModel):
    id: int
    amount: Decimal
    mode: str
    status: str
    transaction_id: Optional[str]
    paid_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class InvoiceOut(BaseModel):
    id: int
    invoice_number: str
    subtotal: Decimal
    discount_amount: Decimal
    gst_amount: Decimal
    total_amount: Decimal
    status: str
    payments: List[PaymentOut]

    model_config = ConfigDict(from_attributes=True)


class VendorInvoiceOut(InvoiceOut):
    order_id: int
    created_at: datetime


class AdminOrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    vendor_id: int
    status: str
    created_at: datetime
    total_amount: Decimal
    paid_amount: Decimal


class OrderPage(BaseModel):
    orders: List[AdminOrderOut]
    total: int
    page: int
    limit: int
    total_pages: int


class DashboardOut(BaseModel):
    total_users: int
    total_vendors: int
    total_products: int
    total_orders: int
    recent_orders: List[AdminOrderOut]


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    rental_start: datetime
    rental_end: datetime
    unit_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    order_number: str
    checkout_id: Optional[int]
    user_id: int
    vendor_id: int
    delivery_address_id: Optional[int]
    status: str
    created_at: datetime
    items: List[OrderItemOut]
    invoice: Optional[InvoiceOut]

    model_config = ConfigDict(from_attributes=True)


class OrderStatusIn(BaseModel):
    status: Literal["PICKED_UP", "RETURNED", "CANCELLED"]


# ---------- coupons ----------

class CouponValidateIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    order_amount: Decimal = Field(..., gt=0)


class CouponApplyIn(BaseModel):
    coupon_id: int = Field(..., gt=0)
    order_amount: Decimal = Field(..., gt=0)


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=3, max_length=64)
    description: Optional[str] = None
    discount_type: Literal["PERCENTAGE", "FIXED_AMOUNT"]
    discount_value: Decimal = Field(..., gt=0)
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_usage_count: Optional[int] = Field(None, gt=0)
    expiry_date: Optional[datetime] = None
    user_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == "PERCENTAGE" and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class CouponOut(BaseModel):
    id: int
    code: str
    description: Optional[str]
    discount_type: str
    discount_value: Decimal
    min_order_amount: Optional[Decimal]
    max_usage_count: Optional[int]
    current_usage_count: int
    expiry_date: Optional[datetime]
    is_welcome_coupon: bool

    model_config = ConfigDict(from_attributes=True)


class CouponValidationOut(BaseModel):
    coupon: CouponOut
    discount_amount: Decimal


# ---------- addresses / reviews / wishlist ----------

class AddressIn(BaseModel):
    label: Optional[str] = Field(None, max_length=50)
    line1: str = Field(..., min_length=1)
    line2: Optional[str] = None
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=3, max_length=20)
    country: str = "India"
    is_default: bool = False


class AddressUpdate(BaseModel):
    label: Optional[str] = Field(None, max_length=50)
    line1: Optional[str] = Field(None, min_length=1)
    line2: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    postal_code: Optional[str] = Field(None, min_length=3, max_length=20)
    country: Optional[str] = None
    is_default: Optional[bool] = None


class AddressOut(AddressIn):
    id: int
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewOut(BaseModel):
    id: int
    user_id: int
    product_id: int
    rating: int
    comment: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductReviewsOut(BaseModel):
    reviews: List[ReviewOut]
    total_reviews: int
    average_rating: float


class WishlistIn(BaseModel):
    product_id: int = Field(..., gt=0)


class WishlistOut(BaseModel):
    wishlist_id: int
    user_id: int
    product_ids: List[int]
