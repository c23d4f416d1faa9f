#marketplace/data/models/product.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    is_published = Column(Boolean, nullable=False, default=True)

    vendor = relationship("VendorModel", back_populates="products")
    inventory = relationship(
        "InventoryModel",
        back_populates="product",
        uselist=False,
        cascade="all, delete-orphan",
    )
    pricing = relationship(
        "PricingModel",
        back_populates="product",
        cascade="all, delete-orphan",
    )


class InventoryModel(Base):
    __tablename__ = "inventories"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True)

    total_qty = Column(Integer, nullable=False)
    # zmniejszane atomowo przy rezerwacji, zwiekszane przy zwrocie/anulowaniu
    available_qty = Column(Integer, nullable=False)

    product = relationship("ProductModel", back_populates="inventory")


class PricingModel(Base):
    __tablename__ = "pricing"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    unit = Column(String(10), nullable=False)  # HOUR, DAY, WEEK
    price = Column(Numeric(10, 2), nullable=False)

    product = relationship("ProductModel", back_populates="pricing")

    __table_args__ = (UniqueConstraint("product_id", "unit", name="u_product_pricing_unit"),)
