"""
Tests for the polling synchronizer.
"""
import asyncio

import pytest

from roomsync.chat.synchronizer import ChatSynchronizer
from roomsync.core.exceptions import BadPassword, NotAMember
from roomsync.service.message_service import MessageService
from roomsync.service.room_service import RoomService

FAST = dict(message_interval=0.01, room_list_interval=0.01, heartbeat_interval=60)


def test_start_fetches_room_list_and_picks_up_new_rooms(store, alice, bob):
    rooms = RoomService(store)
    rooms.create_room("first", alice)

    async def scenario():
        seen = []

        async def on_rooms(current):
            seen.append([r.name for r in current])

        sync = ChatSynchronizer(bob, store, on_rooms=on_rooms, **FAST)
        await sync.start()
        assert seen == [["first"]]
        rooms.create_room("second", alice)
        await asyncio.sleep(0.1)
        await sync.stop()
        return seen

    seen = asyncio.run(scenario())
    assert seen[-1] == ["first", "second"]
    # no change, no callback
    assert seen.count(["first", "second"]) == 1


def test_enter_room_reads_immediately_then_converges(store, alice, bob):
    room = RoomService(store).create_room("Lobby", alice)
    log = MessageService(store)
    log.append(room.id, alice, "before")

    async def scenario():
        snapshots = []

        async def on_room(current, messages, members):
            snapshots.append([m.content for m in messages])

        sync = ChatSynchronizer(bob, store, on_room=on_room, **FAST)
        await sync.enter_room(room.id)
        assert snapshots == [["before"]]
        assert sync.current_room_id == room.id
        assert sync.current_room.find_member(bob.id).is_online

        log.append(room.id, alice, "after")
        await asyncio.sleep(0.1)
        await sync.stop()
        return snapshots

    snapshots = asyncio.run(scenario())
    assert snapshots[-1] == ["before", "after"]


def test_room_loop_survives_a_failing_callback(store, alice, bob):
    room = RoomService(store).create_room("Lobby", alice)
    log = MessageService(store)

    async def scenario():
        snapshots = []
        calls = []

        async def on_room(current, messages, members):
            calls.append(len(messages))
            if len(calls) == 2:
                raise RuntimeError("client went away for a moment")
            snapshots.append([m.content for m in messages])

        sync = ChatSynchronizer(bob, store, on_room=on_room, **FAST)
        await sync.enter_room(room.id)
        log.append(room.id, alice, "one")
        await asyncio.sleep(0.1)
        log.append(room.id, alice, "two")
        await asyncio.sleep(0.1)
        alive = not sync._room_task.done()
        await sync.stop()
        return snapshots, calls, alive

    snapshots, calls, alive = asyncio.run(scenario())
    assert alive
    assert len(calls) >= 3
    assert snapshots[-1] == ["one", "two"]


def test_send_is_visible_to_writer_immediately(store, alice):
    room = RoomService(store).create_room("Lobby", alice)

    async def scenario():
        sync = ChatSynchronizer(alice, store, **FAST)
        await sync.enter_room(room.id)
        msg = await sync.send("  hi ")
        contents = [m.content for m in sync.messages]
        await sync.stop()
        return msg, contents

    msg, contents = asyncio.run(scenario())
    assert msg.content == "hi"
    assert contents == ["hi"]


def test_send_without_room_fails(store, alice):
    async def scenario():
        sync = ChatSynchronizer(alice, store, **FAST)
        with pytest.raises(NotAMember):
            await sync.send("hi")

    asyncio.run(scenario())


def test_leave_marks_offline_and_cancels_loop(store, alice, bob):
    rooms = RoomService(store)
    room = rooms.create_room("Lobby", alice)

    async def scenario():
        sync = ChatSynchronizer(bob, store, **FAST)
        await sync.enter_room(room.id)
        task = sync._room_task
        await sync.leave_room()
        return sync, task

    sync, task = asyncio.run(scenario())
    assert task.cancelled()
    assert sync.current_room is None
    assert sync.messages == []
    member = rooms.get_room(room.id).find_member(bob.id)
    assert member.is_online is False
    assert member.left_at is not None


def test_entering_another_room_leaves_the_first(store, alice, bob):
    rooms = RoomService(store)
    lobby = rooms.create_room("Lobby", alice)
    den = rooms.create_room("Den", alice)

    async def scenario():
        sync = ChatSynchronizer(bob, store, **FAST)
        await sync.enter_room(lobby.id)
        await sync.enter_room(den.id)
        current = sync.current_room_id
        await sync.stop()
        return current

    assert asyncio.run(scenario()) == den.id
    assert rooms.get_room(lobby.id).find_member(bob.id).is_online is False
    assert rooms.get_room(den.id).find_member(bob.id).is_online is False


def test_failed_enter_keeps_client_outside(store, alice, bob):
    room = RoomService(store).create_room("Den", alice, is_private=True, password="letmein")

    async def scenario():
        sync = ChatSynchronizer(bob, store, **FAST)
        with pytest.raises(BadPassword):
            await sync.enter_room(room.id, "nope")
        return sync

    sync = asyncio.run(scenario())
    assert sync.current_room is None
    assert sync._room_task is None


def test_heartbeat_republishes_presence_even_when_full(store, make_user):
    owner, guest, late = make_user("owner"), make_user("guest"), make_user("late")
    rooms = RoomService(store)
    room = rooms.create_room("Tiny", owner, user_limit=2)

    async def scenario():
        sync = ChatSynchronizer(guest, store, message_interval=0.01, room_list_interval=1, heartbeat_interval=0.02)
        await sync.enter_room(room.id)
        # Someone else flips guest offline behind the synchronizer's back.
        rooms.mark_offline(room.id, guest.id)
        rooms.upsert_presence(room.id, late)  # room is now at capacity without guest
        await asyncio.sleep(0.1)
        online = rooms.get_room(room.id).find_member(guest.id).is_online
        await sync.stop()
        return online

    assert asyncio.run(scenario()) is True


def test_async_context_manager_stops_everything(store, alice, bob):
    rooms = RoomService(store)
    room = rooms.create_room("Lobby", alice)

    async def scenario():
        async with ChatSynchronizer(bob, store, **FAST) as sync:
            await sync.enter_room(room.id)
        return sync

    sync = asyncio.run(scenario())
    assert sync._directory_task is None
    assert rooms.get_room(room.id).find_member(bob.id).is_online is False
