import logging
from typing import List, Optional

from gooddeeds.profiles.schemas import ANONYMOUS
from .backend import ChatBackend
from .schemas import Message


logger = logging.getLogger(__name__)


class MessageStore:
    def __init__(self, backend: ChatBackend):
        self.backend = backend

    async def fetch_messages(self, room_id: str) -> List[Message]:
        """All messages in the room, oldest first, with `sender_name` filled in."""
        messages = await self.backend.list_messages(room_id)
        if not messages:
            return []

        # Stable sort keeps backend order for equal timestamps.
        messages = sorted(messages, key=lambda m: m.created_at)

        profiles = await self.backend.get_profiles({m.sender_id for m in messages})

        return [
            message.model_copy(
                update={
                    "sender_name": profiles[message.sender_id].full_name
                    if message.sender_id in profiles
                    else ANONYMOUS
                }
            )
            for message in messages
        ]

    async def send_message(self, room_id: str, sender_id: str, text: str) -> Optional[Message]:
        """Append a message. Blank text is ignored and returns None."""
        content = (text or "").strip()
        if not content:
            return None

        message = await self.backend.insert_message(room_id, sender_id, content)
        logger.info(f"message_sent room_id={room_id} sender_id={sender_id} message_id={message.id}")
        return message
