# backend/schemas/brand.py
from datetime import datetime
from typing import Optional
from pydantic import Field

from schemas.common import ORMBase


class BrandIn(ORMBase):
    name: str = Field(min_length=1, max_length=255)
    category_id: int
    image_url: Optional[str] = None


class BrandOut(BrandIn):
    id: int
    created_at: Optional[datetime] = None
