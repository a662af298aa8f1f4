# backend/schemas/category.py
from datetime import datetime
from typing import Optional
from pydantic import Field

from schemas.common import ORMBase


# Body of POST and PUT (full replacement)
class CategoryIn(ORMBase):
    name: str = Field(min_length=1, max_length=255)
    icon: Optional[str] = None
    image_url: Optional[str] = None
    order: int = 0


class CategoryOut(CategoryIn):
    id: int
    created_at: Optional[datetime] = None
