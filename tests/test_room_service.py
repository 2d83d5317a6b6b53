"""
Tests for the room directory: creation rules and presence records.
"""
import pytest

from roomsync.core.exceptions import DuplicateName, ValidationError
from roomsync.service.message_service import MessageService
from roomsync.service.room_service import RoomService


def test_create_room_makes_creator_sole_online_member(store, alice):
    room = RoomService(store).create_room("  Lobby ", alice)

    assert room.name == "Lobby"
    assert room.created_by.id == alice.id
    assert [m.user_id for m in room.members] == [alice.id]
    assert room.members[0].is_online is True
    assert room.password_digest is None
    assert MessageService(store).read(room.id) == []


def test_list_rooms_keeps_creation_order(store, alice):
    service = RoomService(store)
    for name in ["b", "a", "c"]:
        service.create_room(name, alice)
    assert [r.name for r in service.list_rooms()] == ["b", "a", "c"]


def test_room_names_unique_ignoring_case(store, alice, bob):
    service = RoomService(store)
    service.create_room("Lobby", alice)
    with pytest.raises(DuplicateName):
        service.create_room(" lobby", bob)
    assert len(service.list_rooms()) == 1


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"name": "   "}, "Room name and creator are required"),
        ({"name": "Den", "is_private": True}, "Private rooms require a password"),
        ({"name": "Den", "is_private": True, "password": "abc"}, "Room password must be at least 4 characters"),
        ({"name": "Den", "user_limit": 1}, "User limit must be at least 2"),
        ({"name": "Den", "user_limit": 0}, "User limit must be at least 2"),
    ],
)
def test_create_room_validation_leaves_store_untouched(store, alice, kwargs, message):
    service = RoomService(store)
    with pytest.raises(ValidationError) as exc:
        service.create_room(creator=alice, **kwargs)
    assert exc.value.message == message
    assert service.list_rooms() == []


def test_private_room_stores_digest_not_password(store, alice):
    room = RoomService(store).create_room("Den", alice, is_private=True, password="open sesame", user_limit=2)
    assert room.is_private
    assert room.password_digest and room.password_digest != "open sesame"
    assert room.user_limit == 2


def test_upsert_presence_is_idempotent(store, alice, bob):
    service = RoomService(store)
    room = service.create_room("Lobby", alice)

    service.upsert_presence(room.id, bob)
    service.upsert_presence(room.id, bob)

    members = service.get_members(room.id)
    assert [m.user_id for m in members].count(bob.id) == 1
    bob_member = next(m for m in members if m.user_id == bob.id)
    assert bob_member.is_online is True
    assert bob_member.last_active is not None


def test_mark_offline_keeps_membership(store, alice, bob):
    service = RoomService(store)
    room = service.create_room("Lobby", alice)
    service.upsert_presence(room.id, bob)

    assert service.mark_offline(room.id, bob.id) is True

    member = next(m for m in service.get_members(room.id) if m.user_id == bob.id)
    assert member.is_online is False
    assert member.left_at is not None
    assert service.get_room(room.id).active_count() == 1


def test_presence_calls_on_missing_room_or_member_are_noops(store, alice, bob):
    import uuid

    service = RoomService(store)
    room = service.create_room("Lobby", alice)
    missing = uuid.uuid4()

    assert service.get_members(missing) == []
    assert service.upsert_presence(missing, bob) is False
    assert service.mark_offline(missing, bob.id) is False
    assert service.mark_offline(room.id, bob.id) is False


def test_touch_activity_sets_timestamp(store, alice):
    service = RoomService(store)
    room = service.create_room("Lobby", alice)
    assert room.last_activity is None

    service.touch_activity(room.id)

    assert service.get_room(room.id).last_activity is not None


def test_concurrent_creates_never_lose_a_room(store, alice, bob):
    """Two creates racing on the same collection both survive."""
    import threading

    service = RoomService(store)
    service.create_room("existing", alice)
    start = threading.Barrier(2)

    def create(name, user):
        start.wait()
        RoomService(store).create_room(name, user)

    threads = [
        threading.Thread(target=create, args=("north", alice)),
        threading.Thread(target=create, args=("south", bob)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(r.name for r in service.list_rooms()) == ["existing", "north", "south"]


def test_clear_all_removes_rooms_and_logs(store, alice):
    service = RoomService(store)
    room = service.create_room("Lobby", alice)
    MessageService(store).append(room.id, alice, "hi")

    assert service.clear_all() == 1
    assert service.list_rooms() == []
    assert MessageService(store).read(room.id) == []
