# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from services.auth import authenticate
from services.errors import InvalidCredentials
from utils.audit import write_log, client_ip
from schemas import user as schemas

router = APIRouter(prefix="/api/admin", tags=["Auth"])
logger = logging.getLogger(__name__)


# Check back-office credentials; no token is issued, the SPA keeps the profile
@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    try:
        user = authenticate(db, payload.username, payload.password)
    except InvalidCredentials as e:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"username": payload.username})
        raise HTTPException(status_code=e.status_code, detail=e.message)

    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"username": user.username})
    return {"message": "Login successful", "user": schemas.UserResponse.model_validate(user)}
