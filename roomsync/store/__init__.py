from .redis_client import (
    init_redis,
    set_redis_client,
    get_redis_client,
    is_initialized,
    close_redis,
)
from .kv_store import KeyValueStore, get_store

__all__ = [
    "init_redis",
    "set_redis_client",
    "get_redis_client",
    "is_initialized",
    "close_redis",
    "KeyValueStore",
    "get_store",
]
