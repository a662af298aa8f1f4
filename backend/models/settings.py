# backend/models/settings.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

SETTINGS_ROW_ID = 1


# Store contact and payment details shown by the storefront (single row, id=1)
class StoreSettings(Base):
    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    store_name = Column(String(255), nullable=True)
    logo_url = Column(String(512), nullable=True)
    whatsapp_number = Column(String(32), nullable=True)
    address = Column(String(512), nullable=True)
    pix_key = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
