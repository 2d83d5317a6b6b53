"""
Room admission: password and capacity checks on join.
"""
from typing import Optional
import logging
import uuid

from roomsync.core.exceptions import BadPassword, RoomFull, RoomNotFound
from roomsync.crud import room_crud
from roomsync.model.room import RoomRecord
from roomsync.model.user import UserPublic
from roomsync.service.room_service import apply_presence
from roomsync.store import KeyValueStore
from roomsync.utils.passwords import verify_password

logger = logging.getLogger(__name__)


def check_admission(room: Optional[RoomRecord], user: UserPublic, password: Optional[str]) -> RoomRecord:
    """Raise the matching JoinError if ``user`` may not enter ``room``."""
    if room is None:
        raise RoomNotFound()
    if room.is_private and not room.is_creator(user.id):
        if not password or not verify_password(password, room.password_digest):
            raise BadPassword()
    if room.user_limit is not None:
        # Existing members, online or not, may always come back.
        if room.active_count() >= room.user_limit and room.find_member(user.id) is None:
            raise RoomFull(room.user_limit)
    return room


class JoinService:
    """
    Admission is only checked here, at the moment of joining. Presence
    refreshes later on go straight to the room directory and are never
    refused for capacity.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def join(self, room_id: uuid.UUID, user: UserPublic, password: Optional[str] = None) -> RoomRecord:
        """Admit ``user`` and record their presence; check and write in one transaction."""
        def _apply(room: Optional[RoomRecord]) -> RoomRecord:
            check_admission(room, user, password)
            apply_presence(room, user)
            return room

        room = room_crud.with_room(self.store, room_id, _apply)
        logger.info(f"User {user.username} joined room {room.name}")
        return room
