"""Shared async Redis client used by the job queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as redis

from grove.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

# Module-level client (initialized lazily)
_redis_client: Redis | None = None


async def get_redis() -> Redis:
    """Get or create the Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            encoding="utf-8",
            decode_responses=False,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None
