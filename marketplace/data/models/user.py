from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="CUSTOMER")  # CUSTOMER, VENDOR, ADMIN

    vendor = relationship("VendorModel", back_populates="user", uselist=False)
