# backend/routes/users.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from services.errors import DuplicateUsername, UserNotFound
from utils.audit import write_log, client_ip
from utils.hashing import get_password_hash
from schemas.user import UserCreate, UserUpdate, UserResponse

router = APIRouter(prefix="/api/users", tags=["Users"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound(user_id)
    return user


def _commit_or_conflict(db: Session, username: str):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateUsername(username)


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.id.asc()).all()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, request: Request, db: Session = Depends(get_db)):
    user = User(username=payload.username, password_hash=get_password_hash(payload.password), role=payload.role)
    db.add(user)
    _commit_or_conflict(db, payload.username)
    db.refresh(user)

    write_log(db, action="USER_CREATE", resource="users", ip=client_ip(request), meta={"id": user.id})
    return user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, payload: UserUpdate, request: Request, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, user_id)

    user.username = payload.username
    user.role = payload.role
    if payload.password:
        user.password_hash = get_password_hash(payload.password)
    _commit_or_conflict(db, payload.username)
    db.refresh(user)

    write_log(db, action="USER_UPDATE", resource="users", ip=client_ip(request),
              meta={"id": user.id, "password_changed": bool(payload.password)})
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, request: Request, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()

    write_log(db, action="USER_DELETE", resource="users", ip=client_ip(request), meta={"id": user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
