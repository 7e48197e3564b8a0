"""
View-model for the direct-message screen.

A `ChatSession` holds what a chat view renders (friend list, active chat,
ordered messages, composer text, failure notice) for one signed-in user and
drives the chat core:

    session = ChatSession(user, backend, friends=FriendshipStore(client))
    await session.load_friends()
    await session.start_chat(friend_id)   # resolve room, load history, go live
    session.composer = "Hi"
    await session.send_message()          # the live event refreshes `messages`
    await session.close()

Every failure of a user action is caught here, logged, and left in `notice`;
the view keeps whatever state it had before the action.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from gooddeeds.core.dependencies import UserContext
from gooddeeds.core.errors import BackendError, InvalidChatTarget
from gooddeeds.profiles.schemas import ANONYMOUS, Profile
from .backend import ChatBackend
from .live import LiveUpdateSubscriber
from .messages import MessageStore
from .resolver import RoomResolver
from .schemas import ActiveChat, Message


logger = logging.getLogger(__name__)

START_CHAT_FAILED = "Failed to start chat"
SEND_FAILED = "Failed to send message"
LOAD_FRIENDS_FAILED = "Failed to load friends"
LOAD_MESSAGES_FAILED = "Failed to load messages"
LIVE_UPDATES_FAILED = "Live updates unavailable"

MessagesListener = Callable[[List[Message]], Awaitable[None]]


class ChatSession:
    def __init__(
        self,
        user: UserContext,
        backend: ChatBackend,
        friends=None,
        on_messages: Optional[MessagesListener] = None,
    ):
        self.user = user
        self.backend = backend
        self.friends_source = friends
        self.on_messages = on_messages

        self.resolver = RoomResolver(backend)
        self.store = MessageStore(backend)
        self.subscriber = LiveUpdateSubscriber(backend)

        self.friends: List[Profile] = []
        self.active_chat: Optional[ActiveChat] = None
        self.messages: List[Message] = []
        self.composer = ""
        self.notice: Optional[str] = None
        self.active = True

        # Bumped whenever the room changes or the view closes; responses
        # fetched under an older generation are discarded.
        self._generation = 0
        self._refreshes: Set[asyncio.Task] = set()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def load_friends(self) -> List[Profile]:
        if self.friends_source is None:
            return self.friends

        try:
            self.friends = await self.friends_source.list_friends(self.user.user_id)
        except BackendError:
            logger.exception(f"friends_load_failed user_id={self.user.user_id}")
            self.notice = LOAD_FRIENDS_FAILED

        return self.friends

    def _friend_name(self, friend_id: str) -> str:
        return next((f.full_name for f in self.friends if f.id == friend_id), ANONYMOUS)

    async def start_chat(self, friend_id: str, name: Optional[str] = None) -> Optional[ActiveChat]:
        """Open the direct room with `friend_id`, creating it if needed.

        Returns the new active chat, or None when the room could not be
        resolved; in that case the previous active chat (if any) stays.
        """
        self.notice = None

        try:
            room_id = await self.resolver.resolve(self.user.user_id, friend_id)
        except (BackendError, InvalidChatTarget) as e:
            logger.error(
                f"start_chat_failed user_id={self.user.user_id} friend_id={friend_id} error={e}"
            )
            self.notice = START_CHAT_FAILED
            return None

        return await self.open_room(room_id, friend_id=friend_id, name=name)

    async def open_room(
        self, room_id: str, friend_id: str = "", name: Optional[str] = None
    ) -> Optional[ActiveChat]:
        """Make `room_id` the active chat: load its history and go live."""
        if not self.active:
            return None

        self._generation += 1
        self.active_chat = ActiveChat(
            room_id=room_id,
            friend_id=friend_id,
            name=name or self._friend_name(friend_id),
        )
        self.messages = []

        # Subscribe before the first read so no insert falls in between.
        try:
            await self.subscriber.attach(room_id, self._on_insert)
        except BackendError:
            logger.exception(f"live_attach_failed room_id={room_id}")
            self.notice = LIVE_UPDATES_FAILED

        await self.refresh()
        return self.active_chat

    async def refresh(self) -> List[Message]:
        """Re-read the active room's messages and replace the local list."""
        if self.active_chat is None or not self.active:
            return self.messages

        generation = self._generation
        room_id = self.active_chat.room_id

        try:
            messages = await self.store.fetch_messages(room_id)
        except BackendError:
            logger.exception(f"messages_fetch_failed room_id={room_id}")
            if generation == self._generation and self.active:
                self.notice = LOAD_MESSAGES_FAILED
            return self.messages

        if generation != self._generation or not self.active:
            logger.debug(f"stale_messages_dropped room_id={room_id}")
            return self.messages

        self.messages = messages
        if self.notice == LOAD_MESSAGES_FAILED:
            self.notice = None

        if self.on_messages is not None:
            await self.on_messages(messages)

        return self.messages

    def _on_insert(self):
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._refreshes.add(task)
        task.add_done_callback(self._refresh_done)

    def _refresh_done(self, task: asyncio.Task):
        self._refreshes.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"live_refresh_failed error={task.exception()}")

    async def send_message(self, text: Optional[str] = None) -> Optional[Message]:
        """Send `text` (or the composer) to the active chat.

        Blank text does nothing and leaves the composer as typed. The message
        shows up in `messages` through the live refresh, not optimistically.
        """
        text = self.composer if text is None else text

        if not text.strip() or self.active_chat is None:
            return None

        self.notice = None
        try:
            message = await self.store.send_message(
                self.active_chat.room_id, self.user.user_id, text
            )
        except BackendError as e:
            logger.error(f"send_message_failed room_id={self.active_chat.room_id} error={e}")
            self.notice = SEND_FAILED
            return None

        self.composer = ""
        return message

    async def close(self):
        self.active = False
        self._generation += 1
        try:
            await self.subscriber.detach()
        except BackendError:
            logger.exception(f"live_detach_failed user_id={self.user.user_id}")
