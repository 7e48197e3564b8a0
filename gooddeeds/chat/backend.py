"""
Data access for the chat core.

`ChatBackend` is the set of operations the room resolver, message store and
live subscriber need from the hosted backend. `SupabaseChatBackend` is the
production implementation over the Supabase async client: PostgREST tables
for rooms, participants and messages, and a Realtime channel per room for
insert notifications.
"""

import abc
import logging
import uuid
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from supabase import AsyncClient

from gooddeeds.core.config import MESSAGES_TABLE, PARTICIPANTS_TABLE, ROOMS_TABLE
from gooddeeds.core.errors import LookupFailure, MutationFailure
from gooddeeds.profiles.lookup import fetch_profiles
from gooddeeds.profiles.schemas import Profile
from .schemas import Message, Room


logger = logging.getLogger(__name__)

InsertCallback = Callable[[], None]
Unsubscribe = Callable[[], Awaitable[None]]


def pair_key(user_a: str, user_b: str) -> str:
    """Canonical key for a direct room, identical for (a, b) and (b, a)."""
    u1, u2 = sorted([str(user_a), str(user_b)])
    return f"{u1}:{u2}"


class ChatBackend(abc.ABC):
    @abc.abstractmethod
    async def list_my_room_memberships(self, user_id: str) -> List[str]:
        """Ids of every room `user_id` participates in."""

    @abc.abstractmethod
    async def list_room_participants(self, room_id: str, excluding_user_id: str) -> List[str]:
        """User ids in `room_id`, minus `excluding_user_id`."""

    @abc.abstractmethod
    async def create_room(self, creator_id: str, key: Optional[str] = None) -> Room:
        """Create a direct room. With `key`, return the existing room on conflict."""

    @abc.abstractmethod
    async def add_participants(self, room_id: str, user_ids: List[str]) -> None:
        pass

    @abc.abstractmethod
    async def list_messages(self, room_id: str) -> List[Message]:
        """Messages of `room_id`, oldest first."""

    @abc.abstractmethod
    async def insert_message(self, room_id: str, sender_id: str, content: str) -> Message:
        pass

    @abc.abstractmethod
    async def subscribe(self, room_id: str, on_insert: InsertCallback) -> Unsubscribe:
        """Call `on_insert` for every new message in `room_id` until unsubscribed."""

    @abc.abstractmethod
    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        pass

    async def is_participant(self, room_id: str, user_id: str) -> bool:
        rooms = await self.list_my_room_memberships(user_id)
        return room_id in rooms


class SupabaseChatBackend(ChatBackend):
    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, operation: str, query, failure=LookupFailure):
        try:
            return await query.execute()
        except Exception as e:
            logger.error(f"supabase_error operation={operation} error={e}")
            raise failure(operation) from e

    async def list_my_room_memberships(self, user_id: str) -> List[str]:
        response = await self._execute(
            "list_my_room_memberships",
            self.client.table(PARTICIPANTS_TABLE).select("room_id").eq("user_id", user_id),
        )
        return [row["room_id"] for row in response.data or []]

    async def list_room_participants(self, room_id: str, excluding_user_id: str) -> List[str]:
        response = await self._execute(
            "list_room_participants",
            self.client.table(PARTICIPANTS_TABLE)
            .select("user_id")
            .eq("room_id", room_id)
            .neq("user_id", excluding_user_id),
        )
        return [row["user_id"] for row in response.data or []]

    async def is_participant(self, room_id: str, user_id: str) -> bool:
        response = await self._execute(
            "is_participant",
            self.client.table(PARTICIPANTS_TABLE)
            .select("room_id")
            .eq("room_id", room_id)
            .eq("user_id", user_id)
            .limit(1),
        )
        return bool(response.data)

    async def create_room(self, creator_id: str, key: Optional[str] = None) -> Room:
        row = {"type": "direct", "created_by": creator_id}

        if key is None:
            response = await self._execute(
                "create_room", self.client.table(ROOMS_TABLE).insert(row), MutationFailure
            )
            return Room(**response.data[0])

        # Insert-or-ignore on the unique pair key, then read back whichever row won.
        row["pair_key"] = key
        response = await self._execute(
            "create_room",
            self.client.table(ROOMS_TABLE).upsert(
                row, on_conflict="pair_key", ignore_duplicates=True
            ),
            MutationFailure,
        )
        if response.data:
            return Room(**response.data[0])

        existing = await self._execute(
            "create_room",
            self.client.table(ROOMS_TABLE).select("*").eq("pair_key", key).limit(1),
        )
        if not existing.data:
            raise MutationFailure("create_room", f"Room with pair_key={key} vanished")

        logger.info(f"room_create_conflict pair_key={key} room_id={existing.data[0]['id']}")
        return Room(**existing.data[0])

    async def add_participants(self, room_id: str, user_ids: List[str]) -> None:
        await self._execute(
            "add_participants",
            self.client.table(PARTICIPANTS_TABLE).upsert(
                [{"room_id": room_id, "user_id": user_id} for user_id in user_ids],
                on_conflict="room_id,user_id",
                ignore_duplicates=True,
            ),
            MutationFailure,
        )

    async def list_messages(self, room_id: str) -> List[Message]:
        response = await self._execute(
            "list_messages",
            self.client.table(MESSAGES_TABLE)
            .select("id, room_id, sender_id, content, created_at")
            .eq("room_id", room_id)
            .order("created_at", desc=False),
        )
        return [Message(**row) for row in response.data or []]

    async def insert_message(self, room_id: str, sender_id: str, content: str) -> Message:
        response = await self._execute(
            "insert_message",
            self.client.table(MESSAGES_TABLE).insert(
                {"room_id": room_id, "sender_id": sender_id, "content": content}
            ),
            MutationFailure,
        )
        return Message(**response.data[0])

    async def subscribe(self, room_id: str, on_insert: InsertCallback) -> Unsubscribe:
        # The client reuses an open channel per topic, so each viewer needs its own.
        topic = f"messages:{room_id}:{uuid.uuid4()}"
        channel = self.client.channel(topic)
        channel.on_postgres_changes(
            "INSERT",
            schema="public",
            table=MESSAGES_TABLE,
            filter=f"room_id=eq.{room_id}",
            callback=lambda payload: on_insert(),
        )

        try:
            await channel.subscribe()
        except Exception as e:
            logger.error(f"realtime_subscribe_failed room_id={room_id} error={e}")
            raise LookupFailure("subscribe") from e

        logger.info(f"realtime_subscribed room_id={room_id} topic={topic}")

        async def unsubscribe():
            try:
                await self.client.remove_channel(channel)
            except Exception as e:
                logger.error(f"realtime_unsubscribe_failed room_id={room_id} error={e}")
                raise LookupFailure("unsubscribe") from e
            logger.info(f"realtime_unsubscribed room_id={room_id} topic={topic}")

        return unsubscribe

    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        return await fetch_profiles(self.client, user_ids)
