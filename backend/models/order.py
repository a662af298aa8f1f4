# backend/models/order.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)

    # Contact snapshot taken at checkout
    customer_name = Column(String(255), nullable=False)
    customer_address = Column(String(512), nullable=False)
    customer_phone = Column(String(32), nullable=False)

    total_amount = Column(Numeric(10, 2), nullable=False)

    # Payment details collected by the checkout form
    payment_method = Column(String(50), nullable=False)
    payment_type = Column(String(50), nullable=True)
    payment_status = Column(String(50), nullable=False, default="pending")
    change_needed = Column(Numeric(10, 2), nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")

# Line of an order; quantity and price are frozen at checkout
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Nulled when the product is deleted from the catalog
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    price_at_purchase = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
