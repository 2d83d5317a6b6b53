"""
Room directory: rooms, their settings and membership/presence records.
"""
from typing import List, Optional
import logging
import uuid

from roomsync.core.exceptions import DuplicateName, ValidationError
from roomsync.crud import message_crud, room_crud
from roomsync.crud.room_crud import normalize_room_name
from roomsync.model.room import Membership, RoomRecord
from roomsync.model.user import UserPublic
from roomsync.store import KeyValueStore
from roomsync.utils.clock import utcnow
from roomsync.utils.passwords import hash_password

logger = logging.getLogger(__name__)

ROOM_PASSWORD_MIN_LENGTH = 4
USER_LIMIT_MIN = 2


def apply_presence(room: RoomRecord, user: UserPublic) -> Membership:
    """Mark ``user`` online in ``room``, adding a membership on first sight."""
    member = room.find_member(user.id)
    if member is None:
        member = Membership(user_id=user.id, username=user.username, is_online=True, joined_at=utcnow())
        room.members.append(member)
    else:
        member.is_online = True
        member.last_active = utcnow()
    return member


class RoomService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def list_rooms(self) -> List[RoomRecord]:
        """All rooms in creation order, read fresh from the store."""
        return room_crud.list_all(self.store)

    def get_room(self, room_id: uuid.UUID) -> Optional[RoomRecord]:
        return room_crud.get_by_id(self.store, room_id)

    def create_room(
        self,
        name: str,
        creator: UserPublic,
        is_private: bool = False,
        password: Optional[str] = None,
        user_limit: Optional[int] = None,
    ) -> RoomRecord:
        """Validate and create a room with ``creator`` as its only (online) member."""
        name = (name or "").strip()
        if not name or creator is None:
            raise ValidationError("Room name and creator are required")
        if is_private and not password:
            raise ValidationError("Private rooms require a password")
        if is_private and len(password) < ROOM_PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Room password must be at least {ROOM_PASSWORD_MIN_LENGTH} characters")
        if user_limit is not None and (isinstance(user_limit, bool) or user_limit < USER_LIMIT_MIN):
            raise ValidationError(f"User limit must be at least {USER_LIMIT_MIN}")

        room = RoomRecord(
            name=name,
            created_by=creator,
            is_private=is_private,
            password_digest=hash_password(password) if is_private else None,
            user_limit=user_limit,
            members=[
                Membership(user_id=creator.id, username=creator.username, is_online=True)
            ],
        )
        wanted = normalize_room_name(name)

        def _insert(rooms: List[RoomRecord]) -> RoomRecord:
            if any(normalize_room_name(r.name) == wanted for r in rooms):
                raise DuplicateName()
            rooms.append(room)
            return room

        room_crud.mutate(self.store, _insert)
        message_crud.init_room(self.store, room_id=room.id)
        logger.info(f"Room created: {room.name} ({room.id}) by {creator.username}")
        return room

    def get_members(self, room_id: uuid.UUID) -> List[Membership]:
        room = self.get_room(room_id)
        if not room:
            return []
        return room.members

    def upsert_presence(self, room_id: uuid.UUID, user: UserPublic) -> bool:
        """
        Idempotent presence refresh. Never checks capacity: a heartbeat from
        someone already inside must not be refused because the room is full.
        Returns False if the room does not exist.
        """
        def _apply(room: Optional[RoomRecord]) -> bool:
            if room is None:
                return False
            apply_presence(room, user)
            return True

        return room_crud.with_room(self.store, room_id, _apply)

    def mark_offline(self, room_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Set the membership offline. No-op if room or membership is absent."""
        def _apply(room: Optional[RoomRecord]) -> bool:
            if room is None:
                return False
            member = room.find_member(user_id)
            if member is None:
                return False
            member.is_online = False
            member.left_at = utcnow()
            return True

        changed = room_crud.with_room(self.store, room_id, _apply)
        if changed:
            logger.debug("User %s left room %s", user_id, room_id)
        return changed

    def touch_activity(self, room_id: uuid.UUID) -> None:
        def _apply(room: Optional[RoomRecord]) -> None:
            if room is not None:
                room.last_activity = utcnow()

        room_crud.with_room(self.store, room_id, _apply)

    def clear_all(self) -> int:
        """Remove every room and message log. Development reset only."""
        removed = message_crud.remove_all(self.store)
        room_crud.remove_all(self.store)
        logger.warning(f"Chat data cleared ({removed} message logs)")
        return removed
