"""
User model. One registered chat identity.
"""
from datetime import datetime
from typing import Optional
import uuid
from pydantic import BaseModel, Field

from roomsync.utils.clock import utcnow


class UserPublic(BaseModel):
    """Session view of a user. Never carries the password digest."""
    id: uuid.UUID
    username: str
    created_at: datetime
    is_online: bool = False


class UserRecord(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    username: str
    password_digest: str
    created_at: datetime = Field(default_factory=utcnow)
    is_online: bool = True
    last_login_at: Optional[datetime] = None
    last_logout_at: Optional[datetime] = None

    def public(self) -> UserPublic:
        return UserPublic(
            id=self.id,
            username=self.username,
            created_at=self.created_at,
            is_online=self.is_online,
        )
