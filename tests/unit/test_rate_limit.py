# tests/unit/test_rate_limit.py
"""Per-buyer fixed-window order throttling."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.mp_common.errors import RateLimitError
from src.mp_gateway.middleware import rate_limit
from src.mp_gateway.middleware.rate_limit import (
    check_rate_limit,
    close_redis,
    enforce_order_rate_limit,
    rate_limit_key,
)


def _redis(count: int) -> tuple[MagicMock, MagicMock]:
    pipe = MagicMock()
    pipe.__aenter__.return_value = pipe
    pipe.__aexit__.return_value = False
    pipe.execute = AsyncMock(return_value=[None, count])
    redis = MagicMock()
    redis.pipeline.return_value = pipe
    return redis, pipe


def test_key_format() -> None:
    assert rate_limit_key("buyer-1") == "ratelimit:buyer-1:orders"


async def test_window_and_increment_share_one_transaction() -> None:
    redis, pipe = _redis(1)
    assert await check_rate_limit(redis, "buyer-1", limit=5) == 1
    redis.pipeline.assert_called_once_with(transaction=True)
    pipe.set.assert_called_once_with("ratelimit:buyer-1:orders", 0, ex=60, nx=True)
    pipe.incr.assert_called_once_with("ratelimit:buyer-1:orders")
    assert [name for name, _, _ in pipe.mock_calls if name in ("set", "incr")] == ["set", "incr"]
    pipe.execute.assert_awaited_once()


async def test_no_standalone_expire() -> None:
    redis, pipe = _redis(3)
    await check_rate_limit(redis, "buyer-1", limit=5)
    pipe.expire.assert_not_called()
    redis.expire.assert_not_called()


async def test_at_limit_is_allowed() -> None:
    redis, _ = _redis(5)
    assert await check_rate_limit(redis, "buyer-1", limit=5) == 5


async def test_over_limit_raises() -> None:
    redis, _ = _redis(6)
    with pytest.raises(RateLimitError) as exc_info:
        await check_rate_limit(redis, "buyer-1", limit=5)
    assert exc_info.value.http_status == 429


async def test_dependency_uses_settings_limit() -> None:
    redis, pipe = _redis(1)
    with patch(
        "src.mp_gateway.middleware.rate_limit.get_redis", AsyncMock(return_value=redis)
    ):
        assert await enforce_order_rate_limit("buyer-9") == "buyer-9"
    pipe.incr.assert_called_once_with("ratelimit:buyer-9:orders")


async def test_close_redis_releases_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    pool = AsyncMock()
    monkeypatch.setattr(rate_limit, "_redis_pool", pool)
    await close_redis()
    pool.aclose.assert_awaited_once()
    assert rate_limit._redis_pool is None
