"""Tests for the Redis resolve cache."""

from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from snip.database.cache import RedisCache
from snip.database.models import Link


class FakeRedis:
    """Minimal async stand-in for a redis client."""

    def __init__(self, fail=False):
        self.data = {}
        self.ttls = {}
        self.fail = fail
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("redis down")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    async def ping(self):
        self._check()
        return True

    async def aclose(self):
        self.closed = True


def make_cache(client, logger):
    cache = RedisCache(redis_url="redis://localhost:6379/0", ttl_seconds=60, logger=logger)
    cache.client = client
    return cache


def make_link(clock, expires_at=None):
    now = clock()
    return Link(
        code="abc1234",
        original_url="https://example.com",
        created_at=now,
        updated_at=now,
        expires_at=expires_at,
    )


class TestRedisCache:
    """Test cache reads, writes and failure handling."""

    async def test_disabled_without_url(self, clock):
        cache = RedisCache()

        assert not cache.enabled
        assert await cache.get_link("abc1234") is None
        assert await cache.set_link(make_link(clock)) is False
        assert await cache.ping()

    async def test_set_and_get(self, clock, logger):
        client = FakeRedis()
        cache = make_cache(client, logger)
        expiry = clock() + timedelta(hours=1)

        assert await cache.set_link(make_link(clock, expires_at=expiry))

        assert client.ttls["snip:link:abc1234"] == 60
        cached = await cache.get_link("abc1234")
        assert cached == {"original_url": "https://example.com", "expires_at": expiry}

    async def test_miss(self, logger):
        cache = make_cache(FakeRedis(), logger)

        assert await cache.get_link("nothere") is None

    async def test_delete(self, clock, logger):
        cache = make_cache(FakeRedis(), logger)
        await cache.set_link(make_link(clock))

        assert await cache.delete("abc1234")
        assert not await cache.delete("abc1234")
        assert await cache.get_link("abc1234") is None

    async def test_errors_are_treated_as_misses(self, clock, logger, caplog):
        cache = make_cache(FakeRedis(fail=True), logger)

        assert await cache.get_link("abc1234") is None
        assert await cache.set_link(make_link(clock)) is False
        assert await cache.delete("abc1234") is False
        assert await cache.ping() is False
        assert "Cache get error" in caplog.text

    async def test_close(self, logger):
        client = FakeRedis()
        cache = make_cache(client, logger)

        await cache.close()

        assert client.closed

    @pytest.mark.parametrize("code", ["abc", "X_y-Z"])
    def test_cache_key(self, code):
        assert RedisCache().get_cache_key(code) == f"snip:link:{code}"
