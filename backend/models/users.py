# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Back-office account; role is either "admin" or "super_admin"
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="admin")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
