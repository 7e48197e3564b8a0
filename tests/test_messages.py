from datetime import timedelta

import pytest

from gooddeeds.chat.messages import MessageStore
from gooddeeds.chat.schemas import Message
from gooddeeds.core.errors import MutationFailure

from fakes import ALICE, BOB, EPOCH


async def test_fetch_orders_by_creation_and_names_senders(backend):
    store = MessageStore(backend)
    await store.send_message("room-1", ALICE, "first")
    await store.send_message("room-1", BOB, "second")
    await store.send_message("room-2", BOB, "elsewhere")

    messages = await store.fetch_messages("room-1")

    assert [m.content for m in messages] == ["first", "second"]
    assert [m.sender_name for m in messages] == ["Alice", "Bob"]
    assert all(a.created_at <= b.created_at for a, b in zip(messages, messages[1:]))


async def test_fetch_sorts_out_of_order_rows(backend):
    backend.messages = [
        Message(id="m2", room_id="r", sender_id=BOB, content="later", created_at=EPOCH + timedelta(minutes=5)),
        Message(id="m1", room_id="r", sender_id=ALICE, content="earlier", created_at=EPOCH),
    ]

    messages = await MessageStore(backend).fetch_messages("r")

    assert [m.id for m in messages] == ["m1", "m2"]


async def test_senders_are_looked_up_once_per_fetch(backend):
    store = MessageStore(backend)
    for text in ["a", "b", "c"]:
        await store.send_message("room-1", ALICE, text)

    await store.fetch_messages("room-1")

    assert backend.calls["get_profiles"] == 1


async def test_unknown_sender_is_anonymous(backend):
    await MessageStore(backend).send_message("room-1", "ghost", "boo")

    messages = await MessageStore(backend).fetch_messages("room-1")

    assert messages[0].sender_name == "Anonymous"


async def test_empty_room_skips_profile_lookup(backend):
    assert await MessageStore(backend).fetch_messages("empty") == []
    assert backend.calls["get_profiles"] == 0


async def test_send_trims_content(backend):
    message = await MessageStore(backend).send_message("room-1", ALICE, "  Hello  ")

    assert message.content == "Hello"
    assert message.sender_id == ALICE
    assert message.room_id == "room-1"


@pytest.mark.parametrize("text", ["", "   ", "\n\t "])
async def test_blank_text_is_a_no_op(backend, text):
    assert await MessageStore(backend).send_message("room-1", ALICE, text) is None
    assert backend.calls["insert_message"] == 0


async def test_insert_failure_propagates(backend):
    backend.fail.add("insert_message")

    with pytest.raises(MutationFailure):
        await MessageStore(backend).send_message("room-1", ALICE, "Hello")
