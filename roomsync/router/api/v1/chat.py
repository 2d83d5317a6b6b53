"""
Chat API: rooms, membership and messages (REST). WebSocket sync in same module.
"""
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as PydanticValidationError

from roomsync.chat.synchronizer import ChatSynchronizer
from roomsync.core.config import settings
from roomsync.core.dependencies import get_current_user
from roomsync.core.exceptions import AppException, NotAMember, NotFound, RoomNotFound, ValidationError
from roomsync.model.message import MessageRecord
from roomsync.model.room import Membership, RoomRecord
from roomsync.model.user import UserPublic
from roomsync.schema.auth import MessageResponse as StatusResponse
from roomsync.schema.chat import (
    JoinRoomBody,
    MemberListResponse,
    MemberResponse,
    MessageCreateBody,
    MessageListResponse,
    MessageResponse,
    RoomCreateBody,
    RoomListResponse,
    RoomResponse,
)
from roomsync.service.auth_service import user_from_session
from roomsync.service.join_service import JoinService
from roomsync.service.message_service import MessageService
from roomsync.service.room_service import RoomService
from roomsync.session import get_session
from roomsync.store import KeyValueStore, get_store

router = APIRouter()
logger = logging.getLogger(__name__)


def _require_member(store: KeyValueStore, room_id: uuid.UUID, user: UserPublic) -> RoomRecord:
    """Room must exist and the user must have joined it at some point."""
    room = RoomService(store).get_room(room_id)
    if not room:
        raise RoomNotFound()
    if room.find_member(user.id) is None:
        raise NotAMember()
    return room


def _member_list(members: List[Membership]) -> MemberListResponse:
    return MemberListResponse(
        items=[MemberResponse.model_validate(m) for m in members],
        active_count=sum(1 for m in members if m.is_online),
    )


# --- REST: Rooms ---

@router.get("/rooms", response_model=RoomListResponse)
async def list_rooms(
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """All rooms in creation order."""
    rooms = RoomService(store).list_rooms()
    return RoomListResponse(
        items=[RoomResponse.from_record(r) for r in rooms],
        total=len(rooms),
    )


@router.post("/rooms", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    body: RoomCreateBody,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Create a room; the creator becomes its first online member."""
    room = RoomService(store).create_room(
        body.name,
        current_user,
        is_private=body.is_private,
        password=body.password,
        user_limit=body.user_limit,
    )
    return RoomResponse.from_record(room)


@router.get("/rooms/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: uuid.UUID,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    room = RoomService(store).get_room(room_id)
    if not room:
        raise RoomNotFound()
    return RoomResponse.from_record(room)


@router.post("/rooms/{room_id}/join", response_model=RoomResponse)
async def join_room(
    room_id: uuid.UUID,
    body: Optional[JoinRoomBody] = None,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Join with password/capacity checks. Existing members may always rejoin."""
    password = body.password if body else None
    room = JoinService(store).join(room_id, current_user, password)
    return RoomResponse.from_record(room)


@router.post("/rooms/{room_id}/leave", response_model=StatusResponse)
async def leave_room(
    room_id: uuid.UUID,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Mark the current user offline in the room."""
    RoomService(store).mark_offline(room_id, current_user.id)
    return StatusResponse(message="Left room")


@router.post("/rooms/{room_id}/presence", response_model=MemberListResponse)
async def refresh_presence(
    room_id: uuid.UUID,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Heartbeat for members polling over REST. Returns the fresh member list."""
    _require_member(store, room_id, current_user)
    rooms = RoomService(store)
    rooms.upsert_presence(room_id, current_user)
    return _member_list(rooms.get_members(room_id))


@router.get("/rooms/{room_id}/members", response_model=MemberListResponse)
async def list_members(
    room_id: uuid.UUID,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Memberships of the room (empty if the room does not exist)."""
    return _member_list(RoomService(store).get_members(room_id))


# --- REST: Messages ---

@router.get("/rooms/{room_id}/messages", response_model=MessageListResponse)
async def list_messages(
    room_id: uuid.UUID,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Full log in append order."""
    _require_member(store, room_id, current_user)
    items = MessageService(store).read(room_id)
    return MessageListResponse(
        items=[MessageResponse.from_record(m) for m in items],
        total=len(items),
    )


@router.post("/rooms/{room_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    room_id: uuid.UUID,
    body: MessageCreateBody,
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Append a message. Also refreshes room activity and the sender's presence."""
    _require_member(store, room_id, current_user)
    msg = MessageService(store).append(room_id, current_user, body.content)
    return MessageResponse.from_record(msg)


@router.delete("/data", response_model=StatusResponse)
async def clear_chat_data(
    current_user: UserPublic = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
):
    """Wipe all rooms and message logs. Only available with DEBUG on."""
    if not settings.DEBUG:
        raise NotFound()
    removed = RoomService(store).clear_all()
    return StatusResponse(message=f"Cleared rooms and {removed} message logs")


# --- WebSocket ---

def _room_payload(room: RoomRecord, messages: List[MessageRecord]) -> Dict[str, Any]:
    return {
        "room": RoomResponse.from_record(room).model_dump(mode="json"),
        "messages": [MessageResponse.from_record(m).model_dump(mode="json") for m in messages],
    }


@router.websocket("/ws")
async def websocket_chat(
    websocket: WebSocket,
    token: Optional[str] = None,
):
    """
    Server-side synchronizer for one client. Auth via query ?token=.
    Actions: enter {room_id, password?}, leave, send {content}, rooms.
    Events: rooms, room, message_sent, left, error.
    """
    await websocket.accept()
    session = get_session(token) if token else None
    if not session:
        await websocket.close(code=4001)
        return
    user = user_from_session(session)

    async def send_event(event: str, payload: Any = None, **extra: Any) -> None:
        await websocket.send_text(json.dumps({"event": event, "payload": payload, **extra}, default=str))

    async def send_error(code: str, message: str) -> None:
        try:
            await send_event("error", code=code, message=message)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("Could not deliver error frame to %s: %s", user.username, e)

    async def push_rooms(rooms: List[RoomRecord]) -> None:
        await send_event("rooms", [RoomResponse.from_record(r).model_dump(mode="json") for r in rooms])

    async def push_room(room: RoomRecord, messages: List[MessageRecord], members: List[Membership]) -> None:
        await send_event("room", _room_payload(room, messages), room_id=str(room.id))

    sync = ChatSynchronizer(user, get_store(), on_rooms=push_rooms, on_room=push_room)
    try:
        await sync.start()
        while True:
            data = await websocket.receive_text()
            try:
                obj = json.loads(data)
            except json.JSONDecodeError:
                await send_error("INVALID_JSON", "Request body must be valid JSON.")
                continue
            if not isinstance(obj, dict):
                await send_error("INVALID_JSON", "Request body must be a JSON object.")
                continue
            action = obj.get("action")
            try:
                if action == "enter":
                    try:
                        room_id = uuid.UUID(str(obj.get("room_id")))
                    except ValueError:
                        await send_error("INVALID_ROOM_ID", "room_id must be a valid UUID.")
                        continue
                    try:
                        body = JoinRoomBody.model_validate({"password": obj.get("password")})
                    except PydanticValidationError:
                        await send_error(
                            ValidationError.code, "password must be a string."
                        )
                        continue
                    await sync.enter_room(room_id, body.password)
                elif action == "leave":
                    left = sync.current_room_id
                    await sync.leave_room()
                    await send_event("left", room_id=str(left) if left else None)
                elif action == "send":
                    msg = await sync.send(str(obj.get("content") or ""))
                    await send_event("message_sent", MessageResponse.from_record(msg).model_dump(mode="json"))
                elif action == "rooms":
                    await sync.refresh_rooms(force=True)
                else:
                    await send_error(
                        "UNKNOWN_ACTION",
                        "Expected action: enter, leave, send, or rooms.",
                    )
            except AppException as e:
                await send_error(e.code, e.message)
    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected for %s", user.username)
    except Exception as e:
        logger.warning("WebSocket closed: %s", e)
    finally:
        await sync.stop()
