from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime

from schemas.common import ORMBase

OrderStatus = Literal["pending", "processing", "completed", "cancelled"]


# Input schema for a single cart line sent at checkout
class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    price_at_purchase: float = Field(ge=0)


# Input schema for checkout
class OrderCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_address: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    total_amount: Optional[float] = Field(default=None, ge=0)
    payment_method: str = Field(min_length=1)
    payment_type: Optional[str] = None
    payment_status: str = "pending"
    change_needed: Optional[float] = Field(default=None, ge=0)
    items: List[OrderItemIn] = Field(min_length=1)


class OrderItemOut(ORMBase):
    id: int
    order_id: int
    product_id: Optional[int] = None
    quantity: int
    price_at_purchase: float


# Order row as listed in the back office
class OrderOut(ORMBase):
    id: int
    customer_id: Optional[int] = None
    customer_name: str
    customer_address: str
    customer_phone: str
    total_amount: float
    payment_method: str
    payment_type: Optional[str] = None
    payment_status: str
    change_needed: Optional[float] = None
    status: OrderStatus
    created_at: Optional[datetime] = None


# Order with its items (GET /orders/{id})
class OrderDetail(OrderOut):
    items: List[OrderItemOut]


class OrderCreated(BaseModel):
    id: int
    message: str


# Schema for updating order status
class OrderStatusUpdate(BaseModel):
    status: OrderStatus
