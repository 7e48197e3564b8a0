import logging

from gooddeeds.core.errors import InvalidChatTarget
from .backend import ChatBackend, pair_key


logger = logging.getLogger(__name__)


class RoomResolver:
    """
    Find the direct room shared by two users, or create it.

    Existing rooms are found by scanning the current user's memberships and
    checking who else is in each one; the first room containing the friend
    wins. The backend returns memberships in no particular order, so with
    several matching rooms the pick is arbitrary.

    Creation goes through the pair-keyed upsert, so two users opening their
    first chat at the same time end up in the same room, and a room that
    lost a participant row gets it back on the next resolution.
    """

    def __init__(self, backend: ChatBackend):
        self.backend = backend

    async def find_existing(self, user_id: str, friend_id: str):
        for room_id in await self.backend.list_my_room_memberships(user_id):
            others = await self.backend.list_room_participants(room_id, excluding_user_id=user_id)
            if friend_id in others:
                return room_id
        return None

    async def resolve(self, user_id: str, friend_id: str) -> str:
        if not friend_id or str(friend_id) == str(user_id):
            raise InvalidChatTarget("Cannot start a chat with yourself.")

        room_id = await self.find_existing(user_id, friend_id)
        if room_id:
            logger.info(f"room_found room_id={room_id} user_id={user_id} friend_id={friend_id}")
            return room_id

        room = await self.backend.create_room(user_id, key=pair_key(user_id, friend_id))
        await self.backend.add_participants(room.id, [user_id, friend_id])

        logger.info(f"room_created room_id={room.id} user_id={user_id} friend_id={friend_id}")
        return room.id
