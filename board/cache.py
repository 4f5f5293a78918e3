import json
import logging

import redis.asyncio as redis

from board.config import settings

logger = logging.getLogger(__name__)

SEARCH_KEY_PREFIX = "board:articles:search"
DETAIL_KEY_PREFIX = "board:articles:detail"


def search_key(*parts) -> str:
    """Cache key for one search page; every argument that shapes the page is encoded."""
    return ":".join([SEARCH_KEY_PREFIX, *("" if p is None else str(p) for p in parts)])


def detail_key(article_id: int) -> str:
    return f"{DETAIL_KEY_PREFIX}:{article_id}"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Every public method tolerates an unavailable Redis: reads report a miss
    and writes are skipped, so the board keeps serving straight from the
    database.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """Store *value* as JSON; failures are logged and dropped."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        if not self._redis:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except Exception as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Board invalidation
    # ------------------------------------------------------------------

    async def invalidate_article(self, article_id: int | None = None) -> None:
        """
        Drop cached search pages and, when *article_id* is given, that
        article's detail view.

        Any article write can reorder or reshape search results, so search
        pages are always purged.
        """
        await self.delete_pattern(f"{SEARCH_KEY_PREFIX}:*")
        if article_id is not None:
            await self.delete_pattern(detail_key(article_id))

    async def invalidate_comments(self, article_id: int) -> None:
        """Comment writes only change the detail view of their article."""
        await self.delete_pattern(detail_key(article_id))

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
