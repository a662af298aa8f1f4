# backend/schemas/product.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from schemas.common import ORMBase


# Shared attributes for product create/replace
class ProductIn(ORMBase):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = ""
    price: float = Field(ge=0)
    image_url: Optional[str] = None
    category_id: int
    brand_id: int
    stock_quantity: int = Field(default=0, ge=0)
    is_available: bool = True


# Full product representation including ID
class ProductOut(ProductIn):
    id: int
    created_at: Optional[datetime] = None


# Manual stock adjustment; quantity is a signed delta and must be a JSON integer
class StockAdjust(BaseModel):
    quantity: int = Field(strict=True)


class StockAdjustResult(BaseModel):
    new_stock_quantity: int
