"""
User CRUD operations.
"""
from typing import List, Optional
import uuid

from roomsync.model.user import UserRecord
from roomsync.crud.base import CRUDCollection
from roomsync.store import KeyValueStore
from roomsync.utils.clock import utcnow


def normalize_username(username: str) -> str:
    return username.strip().lower()


class CRUDUser(CRUDCollection[UserRecord]):
    """User-specific CRUD operations."""

    def get_by_username(self, store: KeyValueStore, username: str) -> Optional[UserRecord]:
        """Case-insensitive lookup."""
        wanted = normalize_username(username)
        for user in self.list_all(store):
            if normalize_username(user.username) == wanted:
                return user
        return None

    def create_unique(self, store: KeyValueStore, *, obj_in: UserRecord, on_conflict) -> UserRecord:
        """Append ``obj_in`` unless the username is taken; ``on_conflict`` builds the error."""
        wanted = normalize_username(obj_in.username)

        def _append(records: List[UserRecord]) -> UserRecord:
            if any(normalize_username(u.username) == wanted for u in records):
                raise on_conflict()
            records.append(obj_in)
            return obj_in

        return self.mutate(store, _append)

    def set_online(self, store: KeyValueStore, *, user_id: uuid.UUID, online: bool) -> Optional[UserRecord]:
        def _apply(user: UserRecord) -> None:
            user.is_online = online
            if online:
                user.last_login_at = utcnow()
            else:
                user.last_logout_at = utcnow()

        return self.update_by_id(store, user_id, _apply)


user_crud = CRUDUser(UserRecord, "users")
