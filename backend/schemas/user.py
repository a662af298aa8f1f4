from pydantic import BaseModel, Field
from typing import Literal, Optional

from schemas.common import ORMBase

Role = Literal["admin", "super_admin"]


# Schema for user authentication credentials
class UserLogin(BaseModel):
    username: str
    password: str


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    role: Role = "admin"


# Password is only re-hashed when supplied
class UserUpdate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: Optional[str] = None
    role: Role = "admin"


# Public profile; never exposes the hash
class UserResponse(ORMBase):
    id: int
    username: str
    role: str


class LoginResponse(BaseModel):
    message: str
    user: UserResponse
