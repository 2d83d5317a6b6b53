"""
Room CRUD. Rooms live in one collection with their memberships embedded.
"""
from typing import Callable, List, Optional, TypeVar
import uuid

from roomsync.model.room import RoomRecord
from roomsync.crud.base import CRUDCollection
from roomsync.store import KeyValueStore

T = TypeVar("T")


def normalize_room_name(name: str) -> str:
    return name.strip().lower()


class CRUDRoom(CRUDCollection[RoomRecord]):
    def with_room(
        self,
        store: KeyValueStore,
        room_id: uuid.UUID,
        fn: Callable[[Optional[RoomRecord]], T],
    ) -> T:
        """Run ``fn`` on the room (or None if absent) inside one transaction."""
        def _apply(records: List[RoomRecord]) -> T:
            room = next((r for r in records if r.id == room_id), None)
            return fn(room)

        return self.mutate(store, _apply)


room_crud = CRUDRoom(RoomRecord, "rooms")
