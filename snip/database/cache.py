"""Redis cache for the redirect path."""

import json
import logging
from datetime import datetime
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .models import Link


class RedisCache:
    """Caches ``code -> (original_url, expires_at)`` for active links.

    Cache failures are logged and treated as misses; the store stays the
    source of truth.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached items
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if redis_url:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def get_link(self, code: str) -> Optional[dict]:
        """Cached ``{"original_url", "expires_at"}`` for a code, or None."""
        if not self.enabled or not self.client:
            return None

        try:
            raw = await self.client.get(self.get_cache_key(code))
        except RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None

        if raw is None:
            return None
        data = json.loads(raw)
        expires_at = data.get("expires_at")
        return {
            "original_url": data["original_url"],
            "expires_at": datetime.fromisoformat(expires_at) if expires_at else None,
        }

    async def set_link(self, link: Link, ttl: Optional[int] = None) -> bool:
        """Cache a link's destination and expiry."""
        if not self.enabled or not self.client:
            return False

        value = json.dumps({
            "original_url": link.original_url,
            "expires_at": link.expires_at.isoformat() if link.expires_at else None,
        })
        try:
            await self.client.setex(self.get_cache_key(link.code), ttl or self.ttl_seconds, value)
            return True
        except RedisError as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def delete(self, code: str) -> bool:
        """Drop a code from the cache."""
        if not self.enabled or not self.client:
            return False

        try:
            result = await self.client.delete(self.get_cache_key(code))
            return result > 0
        except RedisError as e:
            self.logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        """True if Redis answers (or caching is disabled)."""
        if not self.enabled or not self.client:
            return True
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, code: str) -> str:
        """Generate cache key for short code."""
        return f"snip:link:{code}"
