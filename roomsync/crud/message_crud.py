"""
Chat message CRUD. One Redis list per room, in append order.
"""
from typing import List, Optional
import uuid

from roomsync.model.message import MessageRecord
from roomsync.store import KeyValueStore

KEY_PATTERN = "messages:*"


class CRUDMessageLog:
    def key_for(self, room_id: uuid.UUID) -> str:
        return f"messages:{room_id}"

    def init_room(self, store: KeyValueStore, *, room_id: uuid.UUID) -> None:
        store.init_list(self.key_for(room_id))

    def append(
        self,
        store: KeyValueStore,
        *,
        obj_in: MessageRecord,
        max_len: Optional[int] = None,
    ) -> MessageRecord:
        store.append_item(self.key_for(obj_in.room_id), obj_in.model_dump(mode="json"), max_len=max_len)
        return obj_in

    def list_by_room(self, store: KeyValueStore, *, room_id: uuid.UUID) -> List[MessageRecord]:
        return [MessageRecord.model_validate(item) for item in store.read_items(self.key_for(room_id))]

    def remove_all(self, store: KeyValueStore) -> int:
        names = list(store.scan_names(KEY_PATTERN))
        return store.delete(*names)


message_crud = CRUDMessageLog()
