#marketplace/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(40), nullable=False, unique=True)
    checkout_id = Column(Integer, ForeignKey("checkouts.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    delivery_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=True)

    status = Column(String(20), nullable=False, default="PENDING_PAYMENT")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    checkout = relationship("CheckoutModel", back_populates="orders")
    user = relationship("UserModel")
    vendor = relationship("VendorModel")
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
    invoice = relationship(
        "InvoiceModel",
        back_populates="order",
        uselist=False,
        cascade="all, delete-orphan",
    )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    rental_start = Column(DateTime(timezone=True), nullable=False)
    rental_end = Column(DateTime(timezone=True), nullable=False, index=True)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
    product = relationship("ProductModel")
    reservations = relationship(
        "ReservationModel",
        back_populates="order_item",
        cascade="all, delete-orphan",
    )


class ReservationModel(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    reserved_from = Column(DateTime(timezone=True), nullable=False)
    reserved_to = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(10), nullable=False, default="ACTIVE")  # ACTIVE, RELEASED

    order_item = relationship("OrderItemModel", back_populates="reservations")
