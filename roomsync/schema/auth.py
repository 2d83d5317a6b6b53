"""
Authentication schemas.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import uuid


class UserRegister(BaseModel):
    username: str = ""
    password: str = ""
    confirm_password: str = ""


class UserLogin(BaseModel):
    username: str = ""
    password: str = ""


class UserInfo(BaseModel):
    id: uuid.UUID
    username: str
    created_at: datetime
    is_online: bool = False


class LoginResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class MessageResponse(BaseModel):
    message: str


class SessionStatus(BaseModel):
    authenticated: bool
    user: Optional[UserInfo] = None
