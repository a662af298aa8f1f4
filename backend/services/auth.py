# backend/services/auth.py
from sqlalchemy.orm import Session

from models.users import User
from services.errors import InvalidCredentials
from utils.hashing import verify_password


def authenticate(db: Session, username: str, password: str) -> User:
    """Return the user for valid credentials; unknown user and wrong password fail alike."""
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user
