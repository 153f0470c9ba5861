"""Shared asyncio Redis client, used for rate-limit counters.

Balances and ledger rows never live in Redis; PostgreSQL is the single
source of truth for every customer aggregate. Short socket timeouts keep a
slow Redis from stalling requests: the rate limiter lets traffic through
when Redis errors.
"""

import redis.asyncio as aioredis

from config.settings import settings

_SOCKET_TIMEOUT_SECONDS = 0.5

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=_SOCKET_TIMEOUT_SECONDS,
            health_check_interval=30,
        )
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
