"""
Supabase Client Management
==========================

The worker only runs privileged updates (batch progress, lead statuses), so
it uses a single SERVICE_ROLE client.

ASYNC CLIENT:
- get_async_write_client() releases the event loop while waiting for
  Supabase HTTP responses, so provider downloads and store writes can
  interleave inside one tick.
"""

import asyncio
from typing import Optional

from supabase import create_async_client, AsyncClient

from verification_worker import config
from verification_worker.exceptions import WorkerConfigError
from verification_worker.utils.logger import get_logger

logger = get_logger(__name__)

# ============================================================
# Async Singleton Client (lazily initialized)
# ============================================================
_async_write_client: Optional[AsyncClient] = None
_async_lock = asyncio.Lock()


async def get_async_write_client() -> AsyncClient:
    """
    Get async Supabase client for WRITE operations (uses SERVICE_ROLE key).
    """
    global _async_write_client

    if _async_write_client is not None:
        return _async_write_client

    async with _async_lock:
        if _async_write_client is not None:
            return _async_write_client

        if not config.SUPABASE_URL:
            raise WorkerConfigError("SUPABASE_URL not configured")

        if not config.SUPABASE_SERVICE_ROLE_KEY:
            raise WorkerConfigError("SUPABASE_SERVICE_ROLE_KEY not configured")

        _async_write_client = await create_async_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
        logger.info("supabase_client_initialized", url=config.SUPABASE_URL)

        return _async_write_client


def reset_client():
    """Drop the cached client (used by tests and after config changes)."""
    global _async_write_client
    _async_write_client = None
