from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class CheckoutModel(Base):
    __tablename__ = "checkouts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), nullable=False)

    status = Column(String(20), nullable=False, default="PENDING_PAYMENT")
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")

    coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)
    gateway_order_id = Column(String, nullable=True, unique=True)
    gateway_payment_id = Column(String, nullable=True)

    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    orders = relationship("OrderModel", back_populates="checkout", order_by="OrderModel.id")
