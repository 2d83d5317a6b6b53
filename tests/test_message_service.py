"""
Tests for the per-room message log.
"""
import uuid

import pytest

from roomsync.core.config import settings
from roomsync.core.exceptions import RoomNotFound, ValidationError
from roomsync.service.message_service import MessageService
from roomsync.service.room_service import RoomService


def test_append_then_read_on_empty_log(store, alice):
    room = RoomService(store).create_room("Lobby", alice)
    log = MessageService(store)

    msg = log.append(room.id, alice, "  hello there  ")
    messages = log.read(room.id)

    assert messages == [msg]
    assert isinstance(msg.id, uuid.UUID)
    assert msg.timestamp.tzinfo is not None
    assert msg.content == "hello there"
    assert msg.sender.id == alice.id
    assert msg.room_id == room.id


def test_append_touches_activity_and_refreshes_sender_presence(store, alice, bob):
    rooms = RoomService(store)
    room = rooms.create_room("Lobby", alice)

    MessageService(store).append(room.id, bob, "hi")

    updated = rooms.get_room(room.id)
    assert updated.last_activity is not None
    assert updated.find_member(bob.id).is_online
    assert len(MessageService(store).read(room.id)) == 1


def test_blank_content_is_rejected_without_writing(store, alice):
    room = RoomService(store).create_room("Lobby", alice)
    log = MessageService(store)

    with pytest.raises(ValidationError):
        log.append(room.id, alice, "   \n ")
    assert log.read(room.id) == []
    assert RoomService(store).get_room(room.id).last_activity is None


def test_append_to_missing_room(store, alice):
    with pytest.raises(RoomNotFound):
        MessageService(store).append(uuid.uuid4(), alice, "hi")


def test_log_is_in_append_order(store, alice, bob):
    room = RoomService(store).create_room("Lobby", alice)
    log = MessageService(store)
    for n, sender in enumerate([alice, bob, alice, bob]):
        log.append(room.id, sender, f"m{n}")

    assert [m.content for m in log.read(room.id)] == ["m0", "m1", "m2", "m3"]


def test_retention_keeps_newest_messages(store, alice, monkeypatch):
    monkeypatch.setattr(settings, "MESSAGE_RETENTION", 2)
    room = RoomService(store).create_room("Lobby", alice)
    log = MessageService(store)
    for n in range(4):
        log.append(room.id, alice, f"m{n}")

    assert [m.content for m in log.read(room.id)] == ["m2", "m3"]
