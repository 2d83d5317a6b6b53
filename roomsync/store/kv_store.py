"""
Key-value store over Redis.

Collections (users, rooms) are stored as one JSON document per key and are
only ever changed through ``update_json``, which wraps the
read-modify-write in a WATCH/MULTI/EXEC transaction and retries when
another client wrote the key in between. Message logs are Redis lists, so
appends are atomic on their own.
"""
from typing import Any, Callable, Iterator, List, Optional, TypeVar
import json
import logging

import redis

from roomsync.core.config import settings
from roomsync.store.redis_client import get_redis_client

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyValueStore:
    """Namespaced JSON access to the shared Redis keyspace."""

    def __init__(self, client: redis.Redis, prefix: str = ""):
        self.client = client
        self.prefix = prefix

    def key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    # --- documents ---

    def read_json(self, name: str, default: Any = None) -> Any:
        raw = self.client.get(self.key(name))
        if raw is None:
            return default
        return json.loads(raw)

    def write_json(self, name: str, value: Any, ttl: Optional[int] = None) -> None:
        payload = json.dumps(value, default=str)
        if ttl:
            self.client.setex(self.key(name), ttl, payload)
        else:
            self.client.set(self.key(name), payload)

    def update_json(
        self,
        name: str,
        mutator: Callable[[Any], T],
        default: Callable[[], Any] = list,
    ) -> T:
        """
        Atomically apply ``mutator`` to the document stored at ``name``.

        The mutator receives the decoded document, changes it in place and
        returns the value to hand back to the caller. If it raises, nothing
        is written. If the key changes before EXEC, the whole read-modify-write
        is replayed against the fresh value.
        """
        key = self.key(name)

        def _apply(pipe: redis.client.Pipeline) -> T:
            raw = pipe.get(key)
            document = json.loads(raw) if raw is not None else default()
            result = mutator(document)
            pipe.multi()
            pipe.set(key, json.dumps(document, default=str))
            return result

        return self.client.transaction(_apply, key, value_from_callable=True)

    # --- lists ---

    def append_item(self, name: str, value: Any, max_len: Optional[int] = None) -> int:
        """RPUSH one JSON item; trim to the newest ``max_len`` if given. Returns list length."""
        key = self.key(name)
        pipe = self.client.pipeline(transaction=True)
        pipe.rpush(key, json.dumps(value, default=str))
        if max_len:
            pipe.ltrim(key, -max_len, -1)
        length = pipe.execute()[0]
        if max_len and length > max_len:
            logger.debug("Trimmed %s to %d items", key, max_len)
            return max_len
        return length

    def read_items(self, name: str) -> List[Any]:
        return [json.loads(raw) for raw in self.client.lrange(self.key(name), 0, -1)]

    def init_list(self, name: str) -> None:
        """Start a fresh empty list (Redis has no empty lists, so just drop the key)."""
        self.client.delete(self.key(name))

    # --- housekeeping ---

    def delete(self, *names: str) -> int:
        if not names:
            return 0
        return self.client.delete(*(self.key(n) for n in names))

    def scan_names(self, pattern: str) -> Iterator[str]:
        """Yield unprefixed key names matching ``pattern``."""
        for key in self.client.scan_iter(match=self.key(pattern)):
            if isinstance(key, bytes):
                key = key.decode()
            yield key[len(self.prefix):]


def get_store() -> KeyValueStore:
    """Dependency: store bound to the process-wide Redis client."""
    return KeyValueStore(get_redis_client(), prefix=settings.KEY_PREFIX)
