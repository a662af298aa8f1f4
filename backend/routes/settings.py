# backend/routes/settings.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.settings import StoreSettings, SETTINGS_ROW_ID
from utils.audit import write_log, client_ip
from schemas.settings import StoreSettingsOut, StoreSettingsUpdate

router = APIRouter(prefix="/api/settings", tags=["Settings"])


def _get_or_create(db: Session) -> StoreSettings:
    row = db.query(StoreSettings).filter(StoreSettings.id == SETTINGS_ROW_ID).first()
    if not row:
        row = StoreSettings(id=SETTINGS_ROW_ID)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


# Contact and payment details rendered by the storefront
@router.get("", response_model=StoreSettingsOut)
def get_settings(db: Session = Depends(get_db)):
    return _get_or_create(db)


# Update in place; fields missing from the body keep their value
@router.put("", response_model=StoreSettingsOut)
def update_settings(payload: StoreSettingsUpdate, request: Request, db: Session = Depends(get_db)):
    row = _get_or_create(db)
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)

    write_log(db, action="SETTINGS_UPDATE", resource="settings", ip=client_ip(request),
              meta={"fields": sorted(changes)})
    return row
