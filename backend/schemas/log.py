from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel

from schemas.common import ORMBase


class LogResponse(ORMBase):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None


class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int
