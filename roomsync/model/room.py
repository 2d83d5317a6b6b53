"""
Room model. A named chat room with its embedded membership list.
"""
from datetime import datetime
from typing import List, Optional
import uuid
from pydantic import BaseModel, Field, model_validator

from roomsync.model.user import UserPublic
from roomsync.utils.clock import utcnow


class Membership(BaseModel):
    """A user's presence record in one room. Never removed, only updated."""
    user_id: uuid.UUID
    username: str
    is_online: bool = True
    joined_at: datetime = Field(default_factory=utcnow)
    last_active: Optional[datetime] = None
    left_at: Optional[datetime] = None


class RoomRecord(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    created_by: UserPublic
    created_at: datetime = Field(default_factory=utcnow)
    is_private: bool = False
    password_digest: Optional[str] = None
    user_limit: Optional[int] = None
    members: List[Membership] = Field(default_factory=list)
    last_activity: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "RoomRecord":
        if self.is_private and not self.password_digest:
            raise ValueError("private room requires a password digest")
        if self.user_limit is not None and self.user_limit < 2:
            raise ValueError("user_limit must be at least 2")
        return self

    def find_member(self, user_id: uuid.UUID) -> Optional[Membership]:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def active_count(self) -> int:
        return sum(1 for m in self.members if m.is_online)

    def is_creator(self, user_id: uuid.UUID) -> bool:
        return self.created_by.id == user_id
