from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class InvoiceModel(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    invoice_number = Column(String(40), nullable=False, unique=True)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    gst_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default="DRAFT")  # DRAFT, PARTIAL, PAID, CANCELLED
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    order = relationship("OrderModel", back_populates="invoice")
    payments = relationship(
        "PaymentModel",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="PaymentModel.id",
    )


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    mode = Column(String(20), nullable=False, default="ONLINE")
    status = Column(String(20), nullable=False, default="SUCCESS")
    transaction_id = Column(String, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    invoice = relationship("InvoiceModel", back_populates="payments")
