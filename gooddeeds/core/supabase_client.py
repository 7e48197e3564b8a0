import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from gooddeeds.core.config import SUPABASE_KEY, SUPABASE_URL


logger = logging.getLogger(__name__)

# Realtime channels need the async client, so the whole service shares one.
_client: Optional[AsyncClient] = None


async def get_supabase() -> AsyncClient:
    """Return the shared async Supabase client, creating it on first use."""
    global _client

    if _client is None:
        _client = await acreate_client(SUPABASE_URL, SUPABASE_KEY)
        logger.info(f"supabase_client_created url={SUPABASE_URL}")

    return _client


async def close_supabase():
    global _client

    if _client is None:
        return

    try:
        await _client.remove_all_channels()
    finally:
        _client = None
        logger.info("supabase_client_closed")
