"""
Chat schemas: rooms, memberships and messages.
"""
from datetime import datetime
from typing import List, Optional
import uuid
from pydantic import BaseModel, Field

from roomsync.model.message import MessageRecord
from roomsync.model.room import RoomRecord
from roomsync.schema.auth import UserInfo


# --- Room ---

class RoomCreateBody(BaseModel):
    """Body for POST /chat/rooms."""
    name: str = ""
    is_private: bool = False
    password: Optional[str] = None
    user_limit: Optional[int] = None


class JoinRoomBody(BaseModel):
    """Body for POST /chat/rooms/{room_id}/join. Password only for private rooms."""
    password: Optional[str] = None


class MemberResponse(BaseModel):
    user_id: uuid.UUID
    username: str
    is_online: bool
    joined_at: datetime
    last_active: Optional[datetime] = None
    left_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoomResponse(BaseModel):
    """Room as seen by clients. The password digest never leaves the server."""
    id: uuid.UUID
    name: str
    created_by: UserInfo
    created_at: datetime
    is_private: bool
    user_limit: Optional[int] = None
    active_count: int = 0
    members: List[MemberResponse] = Field(default_factory=list)
    last_activity: Optional[datetime] = None

    @classmethod
    def from_record(cls, room: RoomRecord) -> "RoomResponse":
        return cls(
            id=room.id,
            name=room.name,
            created_by=UserInfo.model_validate(room.created_by.model_dump()),
            created_at=room.created_at,
            is_private=room.is_private,
            user_limit=room.user_limit,
            active_count=room.active_count(),
            members=[MemberResponse.model_validate(m) for m in room.members],
            last_activity=room.last_activity,
        )


class RoomListResponse(BaseModel):
    items: List[RoomResponse]
    total: int = Field(..., description="Total rooms.")


class MemberListResponse(BaseModel):
    items: List[MemberResponse]
    active_count: int = Field(..., description="Members currently online.")


# --- Message ---

class MessageCreateBody(BaseModel):
    """Body for POST /chat/rooms/{room_id}/messages."""
    content: str = Field(..., max_length=10_000)


class MessageResponse(BaseModel):
    id: uuid.UUID
    room_id: uuid.UUID
    sender: UserInfo
    content: str
    timestamp: datetime

    @classmethod
    def from_record(cls, msg: MessageRecord) -> "MessageResponse":
        return cls.model_validate(msg.model_dump())


class MessageListResponse(BaseModel):
    items: List[MessageResponse]
    total: int = Field(..., description="Messages in the room log.")
