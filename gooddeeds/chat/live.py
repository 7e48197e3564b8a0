import logging
from contextlib import asynccontextmanager
from typing import Optional

from .backend import ChatBackend, InsertCallback, Unsubscribe


logger = logging.getLogger(__name__)


class LiveUpdateSubscriber:
    """
    Holds at most one room-scoped insert subscription.

    Events only signal that something changed; the callback is expected to
    re-read the room. Attaching to a new room always releases the previous
    subscription first, and events still in flight for a room that is no
    longer attached are dropped.
    """

    def __init__(self, backend: ChatBackend):
        self.backend = backend
        self.room_id: Optional[str] = None
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    async def attach(self, room_id: str, on_insert: InsertCallback):
        await self.detach()

        def handle_insert():
            if self.room_id != room_id:
                logger.debug(f"live_event_dropped room_id={room_id} active={self.room_id}")
                return
            on_insert()

        self.room_id = room_id
        try:
            self._unsubscribe = await self.backend.subscribe(room_id, handle_insert)
        except Exception:
            self.room_id = None
            raise

        logger.info(f"live_attached room_id={room_id}")

    async def detach(self):
        if self._unsubscribe is None:
            return

        unsubscribe, self._unsubscribe = self._unsubscribe, None
        room_id, self.room_id = self.room_id, None

        await unsubscribe()
        logger.info(f"live_detached room_id={room_id}")

    @asynccontextmanager
    async def attached(self, room_id: str, on_insert: InsertCallback):
        await self.attach(room_id, on_insert)
        try:
            yield self
        finally:
            await self.detach()
