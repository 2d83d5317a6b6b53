"""
Chat message model. One immutable entry in a room's log.
"""
from datetime import datetime
import uuid
from pydantic import BaseModel, Field

from roomsync.model.user import UserPublic
from roomsync.utils.clock import utcnow


class MessageRecord(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    room_id: uuid.UUID
    sender: UserPublic
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
