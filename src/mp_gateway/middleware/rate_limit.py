"""Order placement throttling, the only Redis consumer in the service.

Fixed-window counter, one window per buyer per minute:
    key = "ratelimit:{buyer_id}:orders"
    MULTI; SET key 0 EX 60 NX; INCR key; EXEC
    count > ORDER_RATE_LIMIT_PER_MINUTE -> RateLimitError (9001)

The window and its expiry are created in the same transaction as the
first increment, so a key can never exist without a TTL.

Wired as a route dependency rather than middleware because the buyer id
is only known after the Bearer token is verified. Stock, orders and
payments never touch Redis.
"""

import logging

import redis.asyncio as aioredis
from fastapi import Depends

from config.settings import settings
from src.mp_common.errors import RateLimitError
from src.mp_gateway.auth.dependencies import get_current_buyer_id

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the shared throttling connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


def rate_limit_key(buyer_id: str, group: str = "orders") -> str:
    return f"ratelimit:{buyer_id}:{group}"


async def check_rate_limit(
    redis: aioredis.Redis, buyer_id: str, limit: int, group: str = "orders"
) -> int:
    """Count one hit for ``buyer_id`` and raise once the window is exhausted.

    Returns the hit count inside the current window.
    """
    key = rate_limit_key(buyer_id, group)
    async with redis.pipeline(transaction=True) as pipe:
        pipe.set(key, 0, ex=_WINDOW_SECONDS, nx=True)
        pipe.incr(key)
        _, count = await pipe.execute()
    count = int(count)
    if count > limit:
        logger.warning("Rate limit hit for buyer %s (%d/%d)", buyer_id, count, limit)
        raise RateLimitError()
    return count


async def enforce_order_rate_limit(
    buyer_id: str = Depends(get_current_buyer_id),
) -> str:
    """Route dependency for POST /orders; passes the buyer id through."""
    redis = await get_redis()
    await check_rate_limit(redis, buyer_id, settings.ORDER_RATE_LIMIT_PER_MINUTE)
    return buyer_id
