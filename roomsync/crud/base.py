"""
Base CRUD for collections stored as one JSON array per store key.
"""
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar
import uuid

from pydantic import BaseModel

from roomsync.store import KeyValueStore

ModelType = TypeVar("ModelType", bound=BaseModel)
T = TypeVar("T")


class CRUDCollection(Generic[ModelType]):
    """
    Reads return a fresh snapshot of the whole collection. Writes go through
    ``mutate`` so the read-modify-write is one store transaction.
    """

    def __init__(self, model: Type[ModelType], key: str):
        self.model = model
        self.key = key

    def list_all(self, store: KeyValueStore) -> List[ModelType]:
        return [self.model.model_validate(item) for item in store.read_json(self.key, default=[])]

    def get_by_id(self, store: KeyValueStore, obj_id: uuid.UUID) -> Optional[ModelType]:
        return self.get_by_field(store, "id", obj_id)

    def get_by_field(self, store: KeyValueStore, field: str, value: Any) -> Optional[ModelType]:
        for obj in self.list_all(store):
            if getattr(obj, field) == value:
                return obj
        return None

    def mutate(self, store: KeyValueStore, fn: Callable[[List[ModelType]], T]) -> T:
        """Run ``fn`` on the decoded records and write them back atomically."""
        def _apply(document: List[dict]) -> T:
            records = [self.model.model_validate(item) for item in document]
            result = fn(records)
            document[:] = [r.model_dump(mode="json") for r in records]
            return result

        return store.update_json(self.key, _apply, default=list)

    def create(self, store: KeyValueStore, *, obj_in: ModelType) -> ModelType:
        def _append(records: List[ModelType]) -> ModelType:
            records.append(obj_in)
            return obj_in

        return self.mutate(store, _append)

    def update_by_id(
        self,
        store: KeyValueStore,
        obj_id: uuid.UUID,
        fn: Callable[[ModelType], None],
    ) -> Optional[ModelType]:
        """Apply ``fn`` to the record with ``obj_id``. Returns None if absent."""
        def _update(records: List[ModelType]) -> Optional[ModelType]:
            for record in records:
                if record.id == obj_id:
                    fn(record)
                    return record
            return None

        return self.mutate(store, _update)

    def remove_all(self, store: KeyValueStore) -> None:
        store.delete(self.key)
