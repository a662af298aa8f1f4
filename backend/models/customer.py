# backend/models/customer.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Customer identified by phone number; orders keep their own contact snapshot
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(32), unique=True, nullable=False, index=True)
    customer_address = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    orders = relationship("Order", back_populates="customer", passive_deletes=True)
