"""
Remove all rooms and message logs from the shared store. Users and sessions are kept.
Meant for local development and demos.

Run from project root: python -m scripts.clear_chat_data [--yes]
Uses REDIS_URL or REDIS_HOST/REDIS_PORT/REDIS_DB and KEY_PREFIX from settings.
"""
import logging
import sys
from typing import Optional

# Add project root so roomsync imports work
sys.path.insert(0, ".")

from roomsync.core.config import settings
from roomsync.service.room_service import RoomService
from roomsync.store import KeyValueStore, get_store, init_redis, is_initialized

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_clear(store: Optional[KeyValueStore] = None) -> int:
    if store is None:
        if not is_initialized():
            init_redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                url=settings.REDIS_URL,
            )
        store = get_store()
    service = RoomService(store)
    rooms = len(service.list_rooms())
    removed = service.clear_all()
    logger.info("Removed %s rooms and %s message logs from %s (prefix %r).", rooms, removed, settings.redis_target, store.prefix)
    return rooms


if __name__ == "__main__":
    if "--yes" not in sys.argv[1:]:
        logger.error("This deletes every room and message under prefix %r. Re-run with --yes.", settings.KEY_PREFIX)
        sys.exit(1)
    run_clear()
