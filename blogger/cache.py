# blogger/cache.py
import redis.asyncio as redis
import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

CATEGORIES_KEY = "blogger:categories:list"
POSTS_KEY = "blogger:posts:list"


class BlogCache:
    """Read cache for the unfiltered category and post lists.

    Passing ``redis_url=None`` disables it; every method then behaves as a miss.
    Redis failures are logged and never reach the caller.
    """

    def __init__(self, redis_url: Optional[str] = None, ttl: int = 60):
        self.ttl = ttl
        self.redis_client = None
        if redis_url:
            try:
                self.redis_client = redis.from_url(redis_url, decode_responses=True)
                logger.info(f"Blog cache service initialized and connected to Redis at {redis_url}")
            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")
                self.redis_client = None

    async def initialize(self):
        """Verify Redis connection on startup."""
        if self.redis_client:
            try:
                is_connected = await self.redis_client.ping()
                if is_connected:
                    logger.info("Redis connection verified successfully")
                else:
                    logger.warning("Redis connection verification failed")
            except Exception as e:
                logger.warning(f"Redis ping failed: {e}")

    async def _get(self, key: str) -> Optional[list]:
        if not self.redis_client:
            return None
        try:
            data = await self.redis_client.get(key)
            if data:
                logger.info(f"Cache HIT for {key}")
                return json.loads(data)
            logger.info(f"Cache MISS for {key}")
            return None
        except Exception as e:
            logger.error(f"Redis GET error for {key}: {e}")
            return None

    async def _set(self, key: str, data: list):
        if not self.redis_client:
            return
        try:
            await self.redis_client.setex(key, self.ttl, json.dumps(data, default=str))
            logger.info(f"Cached {key} with {self.ttl}s TTL")
        except Exception as e:
            logger.error(f"Redis SET error for {key}: {e}")

    async def get_categories(self) -> Optional[list]:
        """Get cached categories list."""
        return await self._get(CATEGORIES_KEY)

    async def set_categories(self, data: list):
        await self._set(CATEGORIES_KEY, data)

    async def get_posts(self) -> Optional[list]:
        """Get cached posts list."""
        return await self._get(POSTS_KEY)

    async def set_posts(self, data: list):
        await self._set(POSTS_KEY, data)

    async def invalidate(self):
        """Drop both lists. Posts embed the category name, so any write clears both."""
        if not self.redis_client:
            return
        try:
            await self.redis_client.delete(CATEGORIES_KEY, POSTS_KEY)
            logger.info("Invalidated category and post list cache")
        except Exception as e:
            logger.error(f"Redis cache invalidation error: {e}")

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            logger.info("Redis connection closed")
