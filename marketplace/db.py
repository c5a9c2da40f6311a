"""
Database Module - Supabase clients

Provides a lazily created async Supabase client authenticated with the
service-role key. Workers write through it, so it must never be built
with the public anon key.
"""

import asyncio
from typing import Optional

from supabase._async.client import AsyncClient, create_client as acreate_client

from marketplace.config import Settings
from marketplace.logging import get_logger

logger = get_logger(__name__)

_async_supabase_client: Optional[AsyncClient] = None
_client_lock = asyncio.Lock()


async def get_supabase(settings: Optional[Settings] = None) -> AsyncClient:
    """
    Get async Supabase client (one per process).

    Raises:
        ConfigurationError: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing
    """
    global _async_supabase_client

    if _async_supabase_client is not None:
        return _async_supabase_client

    async with _client_lock:
        if _async_supabase_client is None:
            settings = settings or Settings.from_env()
            settings.require_supabase()
            _async_supabase_client = await acreate_client(settings.supabase_url, settings.service_role_key)
            logger.debug("Created async Supabase client")

    return _async_supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client (tests, credential rotation)."""
    global _async_supabase_client, _client_lock
    _async_supabase_client = None
    _client_lock = asyncio.Lock()
