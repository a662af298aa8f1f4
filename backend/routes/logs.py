# backend/routes/logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from schemas.log import LogPage

router = APIRouter(prefix="/api/logs", tags=["Logs"])


# Audit trail, newest first
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="SUCCESS/FAIL"),
    db: Session = Depends(get_db),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if resource:
        query = query.filter(Log.resource == resource)
    if status:
        query = query.filter(Log.status == status.upper())

    total = query.count()
    items = query.order_by(Log.ts.desc(), Log.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}
