import logging
from typing import List, Optional

from supabase import AsyncClient

from gooddeeds.core.config import FRIENDS_TABLE
from gooddeeds.core.errors import LookupFailure, MutationFailure
from gooddeeds.profiles.lookup import fetch_profiles
from gooddeeds.profiles.schemas import Profile


logger = logging.getLogger(__name__)


class FriendshipStore:
    """
    Friend relationships, stored as directional `friends` rows.

    A request is a single `pending` row (requester -> receiver). Accepting it
    flips that row to `accepted` and inserts the mirrored accepted row, so
    both users see each other from their own side.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, operation: str, query, failure=LookupFailure):
        try:
            return await query.execute()
        except Exception as e:
            logger.error(f"supabase_error operation={operation} error={e}")
            raise failure(operation) from e

    async def list_friend_ids(self, user_id: str) -> List[str]:
        as_requester = await self._execute(
            "list_friends",
            self.client.table(FRIENDS_TABLE)
            .select("friend_id")
            .eq("user_id", user_id)
            .eq("status", "accepted"),
        )
        as_receiver = await self._execute(
            "list_friends",
            self.client.table(FRIENDS_TABLE)
            .select("user_id")
            .eq("friend_id", user_id)
            .eq("status", "accepted"),
        )

        # Mirrored rows mean most friends show up from both sides.
        friend_ids = [row["friend_id"] for row in as_requester.data or []]
        friend_ids += [row["user_id"] for row in as_receiver.data or []]
        return list(dict.fromkeys(friend_ids))

    async def list_friends(self, user_id: str) -> List[Profile]:
        friend_ids = await self.list_friend_ids(user_id)
        profiles = await fetch_profiles(self.client, friend_ids)
        return [profiles.get(friend_id) or Profile(id=friend_id) for friend_id in friend_ids]

    async def list_pending_requests(self, user_id: str) -> List[Profile]:
        """Profiles of users waiting for `user_id` to answer their request."""
        pending = await self._execute(
            "list_pending_requests",
            self.client.table(FRIENDS_TABLE)
            .select("user_id")
            .eq("friend_id", user_id)
            .eq("status", "pending"),
        )
        sender_ids = [row["user_id"] for row in pending.data or []]
        profiles = await fetch_profiles(self.client, sender_ids)
        return [profiles.get(sender_id) or Profile(id=sender_id) for sender_id in sender_ids]

    async def get_relationship(self, user_id: str, other_id: str) -> Optional[dict]:
        """The row linking the two users in either direction, if any."""
        response = await self._execute(
            "get_relationship",
            self.client.table(FRIENDS_TABLE)
            .select("user_id, friend_id, status")
            .or_(
                f"and(user_id.eq.{user_id},friend_id.eq.{other_id}),"
                f"and(user_id.eq.{other_id},friend_id.eq.{user_id})"
            )
            .limit(1),
        )
        return response.data[0] if response.data else None

    async def send_request(self, user_id: str, friend_id: str) -> dict:
        response = await self._execute(
            "send_request",
            self.client.table(FRIENDS_TABLE).insert(
                {"user_id": user_id, "friend_id": friend_id, "status": "pending"}
            ),
            MutationFailure,
        )
        logger.info(f"friend_request_sent user_id={user_id} friend_id={friend_id}")
        return response.data[0]

    async def accept_request(self, user_id: str, requester_id: str) -> bool:
        """Accept `requester_id`'s pending request. False when there is none."""
        updated = await self._execute(
            "accept_request",
            self.client.table(FRIENDS_TABLE)
            .update({"status": "accepted"})
            .eq("user_id", requester_id)
            .eq("friend_id", user_id)
            .eq("status", "pending"),
            MutationFailure,
        )
        if not updated.data:
            return False

        await self._execute(
            "accept_request",
            self.client.table(FRIENDS_TABLE).upsert(
                {"user_id": user_id, "friend_id": requester_id, "status": "accepted"},
                on_conflict="user_id,friend_id",
            ),
            MutationFailure,
        )
        logger.info(f"friend_request_accepted user_id={user_id} requester_id={requester_id}")
        return True

    async def reject_request(self, user_id: str, requester_id: str) -> bool:
        deleted = await self._execute(
            "reject_request",
            self.client.table(FRIENDS_TABLE)
            .delete()
            .eq("user_id", requester_id)
            .eq("friend_id", user_id)
            .eq("status", "pending"),
            MutationFailure,
        )
        if deleted.data:
            logger.info(f"friend_request_rejected user_id={user_id} requester_id={requester_id}")
        return bool(deleted.data)
