from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class VendorModel(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    company_name = Column(String, nullable=True)
    gst_no = Column(String(20), nullable=True)

    user = relationship("UserModel", back_populates="vendor")
    products = relationship("ProductModel", back_populates="vendor")
