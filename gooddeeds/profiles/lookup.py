import logging
from typing import Dict, Iterable

from supabase import AsyncClient

from gooddeeds.core.config import PROFILES_TABLE
from gooddeeds.core.errors import LookupFailure
from .schemas import Profile


logger = logging.getLogger(__name__)


async def fetch_profiles(client: AsyncClient, user_ids: Iterable[str]) -> Dict[str, Profile]:
    """Batch lookup of profiles, keyed by user id.

    Duplicate ids are collapsed into one query; ids with no profile row are
    simply absent from the result.
    """
    ids = sorted({str(user_id) for user_id in user_ids})
    if not ids:
        return {}

    try:
        response = (
            await client.table(PROFILES_TABLE)
            .select("id, full_name, avatar_url, email")
            .in_("id", ids)
            .execute()
        )
    except Exception as e:
        logger.error(f"profile_lookup_failed count={len(ids)} error={e}")
        raise LookupFailure("fetch_profiles") from e

    return {row["id"]: Profile(**row) for row in response.data or []}


async def search_profiles(
    client: AsyncClient, term: str, exclude_user_id: str, limit: int = 10
) -> list[Profile]:
    """Case-insensitive substring search on display names, excluding yourself."""
    try:
        response = (
            await client.table(PROFILES_TABLE)
            .select("id, full_name, avatar_url, email")
            .neq("id", exclude_user_id)
            .ilike("full_name", f"%{term}%")
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.error(f"profile_search_failed term={term} error={e}")
        raise LookupFailure("search_profiles") from e

    return [Profile(**row) for row in response.data or []]
