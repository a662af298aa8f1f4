# backend/models/category.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Top level of the catalog tree; `order` drives the storefront display sequence
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    icon = Column(String(255), nullable=True)
    image_url = Column(String(512), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Brands and products are removed by the database FK cascade
    brands = relationship("Brand", back_populates="category", cascade="all, delete-orphan", passive_deletes=True)
    products = relationship("Product", back_populates="category", cascade="all, delete-orphan", passive_deletes=True)
