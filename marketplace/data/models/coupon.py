from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey

from marketplace.data.database import Base


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String(64), nullable=False, unique=True, index=True)
    description = Column(String, nullable=True)

    discount_type = Column(String(20), nullable=False)  # PERCENTAGE, FIXED_AMOUNT
    discount_value = Column(Numeric(10, 2), nullable=False)

    # opcjonalne ograniczenia
    min_order_amount = Column(Numeric(10, 2), nullable=True)
    max_usage_count = Column(Integer, nullable=True)
    current_usage_count = Column(Integer, nullable=False, default=0)
    expiry_date = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    # null = kupon globalny
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    is_welcome_coupon = Column(Boolean, nullable=False, default=False)
