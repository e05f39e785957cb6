"""Tests for the shared Redis client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from grove import redis as grove_redis


class TestRedisClient:
    @pytest.mark.asyncio
    async def test_client_is_created_once(self) -> None:
        client = MagicMock()

        with (
            patch.object(grove_redis, "_redis_client", None),
            patch.object(grove_redis.redis, "from_url", return_value=client) as from_url,
        ):
            assert await grove_redis.get_redis() is client
            assert await grove_redis.get_redis() is client

        from_url.assert_called_once()
        assert from_url.call_args[0][0] == grove_redis.settings.redis_url

    @pytest.mark.asyncio
    async def test_close_redis(self) -> None:
        client = MagicMock()
        client.close = AsyncMock()

        with patch.object(grove_redis, "_redis_client", client):
            await grove_redis.close_redis()

            client.close.assert_called_once()
            assert grove_redis._redis_client is None
