"""
Polling synchronizer: keeps one client's view of the room list and of its
current room converged with the shared store.

There is no push channel between clients. Every client re-reads the store
on a fixed interval, so two clients agree within one interval of each
other; only the writer sees its own write immediately.
"""
import asyncio
import logging
import uuid
from typing import Awaitable, Callable, List, Optional

import redis

from roomsync.core.config import settings
from roomsync.core.exceptions import NotAMember
from roomsync.model.message import MessageRecord
from roomsync.model.room import Membership, RoomRecord
from roomsync.model.user import UserPublic
from roomsync.service.join_service import JoinService
from roomsync.service.message_service import MessageService
from roomsync.service.room_service import RoomService
from roomsync.store import KeyValueStore

logger = logging.getLogger(__name__)

RoomsCallback = Callable[[List[RoomRecord]], Awaitable[None]]
RoomCallback = Callable[[RoomRecord, List[MessageRecord], List[Membership]], Awaitable[None]]


class ChatSynchronizer:
    """One client's polling loops: room list (slow) and current room (fast)."""

    def __init__(
        self,
        user: UserPublic,
        store: KeyValueStore,
        *,
        on_rooms: Optional[RoomsCallback] = None,
        on_room: Optional[RoomCallback] = None,
        message_interval: Optional[float] = None,
        room_list_interval: Optional[float] = None,
        heartbeat_interval: Optional[float] = None,
    ) -> None:
        self.user = user
        self.on_rooms = on_rooms
        self.on_room = on_room
        self.message_interval = message_interval or settings.MESSAGE_POLL_INTERVAL
        self.room_list_interval = room_list_interval or settings.ROOM_LIST_POLL_INTERVAL
        self.heartbeat_interval = heartbeat_interval or settings.HEARTBEAT_INTERVAL

        self.room_service = RoomService(store)
        self.message_service = MessageService(store)
        self.join_service = JoinService(store)

        # Local view
        self.rooms: List[RoomRecord] = []
        self.current_room: Optional[RoomRecord] = None
        self.messages: List[MessageRecord] = []
        self.members: List[Membership] = []

        self._directory_task: Optional[asyncio.Task] = None
        self._room_task: Optional[asyncio.Task] = None
        self._last_heartbeat: float = 0.0

    async def __aenter__(self) -> "ChatSynchronizer":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()

    @property
    def current_room_id(self) -> Optional[uuid.UUID]:
        return self.current_room.id if self.current_room else None

    # --- room list ---

    async def start(self) -> None:
        """Fetch the room list now, then keep polling it."""
        if self._directory_task is not None:
            return
        await self.refresh_rooms(force=True)
        self._directory_task = asyncio.create_task(
            self._poll(self.room_list_interval, self.refresh_rooms),
            name=f"rooms:{self.user.id}",
        )

    async def refresh_rooms(self, force: bool = False) -> List[RoomRecord]:
        rooms = self.room_service.list_rooms()
        changed = force or rooms != self.rooms
        self.rooms = rooms
        if changed and self.on_rooms:
            await self.on_rooms(rooms)
        return rooms

    # --- current room ---

    async def enter_room(self, room_id: uuid.UUID, password: Optional[str] = None) -> RoomRecord:
        """Join through the admission checks, fetch the room now, then poll it."""
        if self.current_room is not None:
            await self.leave_room()

        room = self.join_service.join(room_id, self.user, password)
        self.current_room = room
        self._last_heartbeat = asyncio.get_running_loop().time()
        await self.refresh_room(force=True)
        self._room_task = asyncio.create_task(
            self._poll(self.message_interval, self._room_tick),
            name=f"room:{room_id}:{self.user.id}",
        )
        return room

    async def refresh_room(self, force: bool = False) -> None:
        if self.current_room is None:
            return
        room = self.room_service.get_room(self.current_room.id)
        if room is None:
            logger.warning("Room %s disappeared from the store", self.current_room.id)
            return
        messages = self.message_service.read(room.id)
        changed = force or messages != self.messages or room.members != self.members
        self.current_room = room
        self.messages = messages
        self.members = room.members
        if changed and self.on_room:
            await self.on_room(room, messages, room.members)

    async def send(self, content: str) -> MessageRecord:
        """Append to the current room and refresh our own view right away."""
        if self.current_room is None:
            raise NotAMember()
        msg = self.message_service.append(self.current_room.id, self.user, content)
        self._last_heartbeat = asyncio.get_running_loop().time()
        await self.refresh_room()
        return msg

    async def heartbeat(self) -> None:
        if self.current_room is None:
            return
        self.room_service.upsert_presence(self.current_room.id, self.user)
        self._last_heartbeat = asyncio.get_running_loop().time()

    async def leave_room(self) -> None:
        """Release presence, then tear down the room loop."""
        if self.current_room is None:
            return
        room_id = self.current_room.id
        try:
            self.room_service.mark_offline(room_id, self.user.id)
        finally:
            await self._cancel(self._room_task)
            self._room_task = None
            self.current_room = None
            self.messages = []
            self.members = []
        logger.debug("User %s left room %s", self.user.username, room_id)

    async def stop(self) -> None:
        await self.leave_room()
        await self._cancel(self._directory_task)
        self._directory_task = None

    # --- loop plumbing ---

    async def _room_tick(self) -> None:
        now = asyncio.get_running_loop().time()
        if now - self._last_heartbeat >= self.heartbeat_interval:
            await self.heartbeat()
        await self.refresh_room()

    async def _poll(self, interval: float, tick: Callable[[], Awaitable[object]]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await tick()
            except asyncio.CancelledError:
                raise
            except redis.RedisError as e:
                logger.warning("Store read failed, will poll again: %s", e)
            except Exception:
                logger.exception("Poll tick failed for %s, will poll again", self.user.username)

    @staticmethod
    async def _cancel(task: Optional[asyncio.Task]) -> None:
        if task is None:
            return
        if task.done():
            if not task.cancelled() and task.exception() is not None:
                logger.warning("Poll task for %s had failed: %s", task.get_name(), task.exception())
            return
        task.cancel()
        if task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
