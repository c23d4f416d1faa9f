from sqlalchemy import Column, Integer, ForeignKey, Numeric, DateTime, String, UniqueConstraint
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    rental_start = Column(DateTime(timezone=True), nullable=False)
    rental_end = Column(DateTime(timezone=True), nullable=False)
    price_unit = Column(String(10), nullable=False, default="DAY")
    # cena z chwili dodania do koszyka, checkout jej nie przelicza
    unit_price = Column(Numeric(10, 2), nullable=False)

    cart = relationship("CartModel", back_populates="items")
    product = relationship("ProductModel")

    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="u_cart_product"),)
