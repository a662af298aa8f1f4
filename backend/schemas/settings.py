# backend/schemas/settings.py
from typing import Optional

from schemas.common import ORMBase


# Schema for displaying store settings
class StoreSettingsOut(ORMBase):
    id: int
    store_name: Optional[str] = None
    logo_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    address: Optional[str] = None
    pix_key: Optional[str] = None


# Schema for updating store settings (only supplied fields change)
class StoreSettingsUpdate(ORMBase):
    store_name: Optional[str] = None
    logo_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    address: Optional[str] = None
    pix_key: Optional[str] = None
