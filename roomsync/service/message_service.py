"""
Per-room message log.
"""
from typing import List
import logging
import uuid

from roomsync.core.config import settings
from roomsync.core.exceptions import RoomNotFound, ValidationError
from roomsync.crud import message_crud, room_crud
from roomsync.model.message import MessageRecord
from roomsync.model.user import UserPublic
from roomsync.service.room_service import RoomService
from roomsync.store import KeyValueStore

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self.rooms = RoomService(store)

    def append(self, room_id: uuid.UUID, sender: UserPublic, content: str) -> MessageRecord:
        """
        Append a message and refresh the room's activity and the sender's
        presence (sending implies being online).
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("Message content cannot be empty")
        # Checked outside the room transaction: a concurrent clear_all can leave
        # an orphan log behind, which the next clear_all removes.
        if room_crud.get_by_id(self.store, room_id) is None:
            raise RoomNotFound()

        msg = MessageRecord(room_id=room_id, sender=sender, content=content)
        message_crud.append(self.store, obj_in=msg, max_len=settings.MESSAGE_RETENTION)
        self.rooms.touch_activity(room_id)
        self.rooms.upsert_presence(room_id, sender)
        logger.debug("Message %s appended to room %s", msg.id, room_id)
        return msg

    def read(self, room_id: uuid.UUID) -> List[MessageRecord]:
        """Whole log in append order."""
        return message_crud.list_by_room(self.store, room_id=room_id)
