import asyncio

import pytest

from gooddeeds.chat.backend import pair_key
from gooddeeds.chat.resolver import RoomResolver
from gooddeeds.core.errors import InvalidChatTarget, LookupFailure, MutationFailure

from fakes import ALICE, BOB, CAROL


async def test_first_resolution_creates_room_with_both_participants(backend):
    room_id = await RoomResolver(backend).resolve(ALICE, BOB)

    assert list(backend.rooms) == [room_id]
    assert backend.rooms[room_id].type == "direct"
    assert backend.rooms[room_id].created_by == ALICE
    assert backend.room_members(room_id) == sorted([ALICE, BOB])


async def test_reverse_direction_finds_the_same_room(backend):
    resolver = RoomResolver(backend)

    room_ab = await resolver.resolve(ALICE, BOB)
    room_ba = await resolver.resolve(BOB, ALICE)

    assert room_ab == room_ba
    assert len(backend.rooms) == 1
    assert backend.calls["create_room"] == 1


async def test_existing_room_is_found_without_creating(backend):
    resolver = RoomResolver(backend)
    await resolver.resolve(ALICE, CAROL)
    room_ab = await resolver.resolve(ALICE, BOB)
    backend.calls.clear()

    assert await resolver.resolve(ALICE, BOB) == room_ab
    assert backend.calls["create_room"] == 0
    assert backend.calls["add_participants"] == 0


async def test_rooms_with_other_friends_are_not_reused(backend):
    resolver = RoomResolver(backend)

    room_ac = await resolver.resolve(ALICE, CAROL)
    room_ab = await resolver.resolve(ALICE, BOB)

    assert room_ac != room_ab
    assert backend.room_members(room_ab) == sorted([ALICE, BOB])


async def test_concurrent_first_contact_converges_on_one_room(backend):
    resolver = RoomResolver(backend)

    room_ab, room_ba = await asyncio.gather(
        resolver.resolve(ALICE, BOB), resolver.resolve(BOB, ALICE)
    )

    assert room_ab == room_ba
    assert len(backend.rooms) == 1
    assert backend.room_members(room_ab) == sorted([ALICE, BOB])


async def test_room_missing_a_participant_is_repaired(backend):
    room = await backend.create_room(ALICE, key=pair_key(ALICE, BOB))
    await backend.add_participants(room.id, [ALICE])

    room_id = await RoomResolver(backend).resolve(ALICE, BOB)

    assert room_id == room.id
    assert backend.room_members(room.id) == sorted([ALICE, BOB])


async def test_self_chat_is_rejected(backend):
    with pytest.raises(InvalidChatTarget):
        await RoomResolver(backend).resolve(ALICE, ALICE)

    assert backend.calls["create_room"] == 0


async def test_lookup_failure_propagates(backend):
    backend.fail.add("list_my_room_memberships")

    with pytest.raises(LookupFailure):
        await RoomResolver(backend).resolve(ALICE, BOB)

    assert backend.rooms == {}


async def test_participant_insert_failure_leaves_room_behind(backend):
    backend.fail.add("add_participants")

    with pytest.raises(MutationFailure):
        await RoomResolver(backend).resolve(ALICE, BOB)

    # The room row is already committed; nothing cleans it up.
    assert len(backend.rooms) == 1
    assert backend.participants == []


def test_pair_key_is_order_independent():
    assert pair_key(ALICE, BOB) == pair_key(BOB, ALICE) == f"{ALICE}:{BOB}"
