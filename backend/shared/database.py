"""
Supabase client factory.

The application acts on behalf of a single signed-in user, so it always
talks to Supabase with the anon key; Row Level Security scopes every query
to the session's user.
"""

from typing import Optional
from supabase import acreate_client, AsyncClient

from .config import get_settings

# Module-level client cache
_client: Optional[AsyncClient] = None


async def get_supabase_client() -> AsyncClient:
    """
    Get the shared async Supabase client.

    The same client carries the auth session and the realtime socket, so
    auth and document store adapters must share one instance.

    Returns:
        Async Supabase client configured with the anon key

    Raises:
        RuntimeError: If the Supabase URL or anon key is not configured
    """
    global _client

    if _client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        _client = await acreate_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def reset_client_cache() -> None:
    """
    Reset the cached client.

    Useful for testing or when configuration changes.
    """
    global _client
    _client = None
