"""
Async Redis client for the feed caching layer.

Uses redis.asyncio so cache round-trips never block the event loop.

Pattern: Read-Through with TTL + coarse invalidation
- Feed reads check the cache first, fall back to the DB on a miss
- Cacheable results are written back with a short TTL (5-30 min)
- Any post mutation wipes the whole feed namespace (feed:*)

Why coarse invalidation:
1. Short TTLs already bound staleness
2. No bookkeeping of which cached pages a post appears on
3. One SCAN + DEL per write is cheap at this key volume
"""
import json
from urllib.parse import quote
from typing import Any, Optional, Sequence
import redis.asyncio as redis
from portlink.config.settings import settings
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class CacheKeys:
    """
    Centralized cache key definitions.

    Pattern: {namespace}:{entity}:{identifier}
    Examples:
        feed:latest:1:10:React,Vue::::
        feed:editor-picks
        feed:trending-tags
    """

    FEED_PATTERN = "feed:*"

    @staticmethod
    def _join(values: Optional[Sequence[str]]) -> str:
        # Tags are percent-encoded so a "," or ":" inside a name cannot collide with the separators
        return ",".join(quote(value, safe="") for value in sorted(values)) if values else ""

    @staticmethod
    def _flag(value: Optional[bool]) -> str:
        if value is None:
            return ""
        return "true" if value else "false"

    @classmethod
    def feed_page(
        cls,
        sort_by: str,
        page: int,
        limit: int,
        tech_stack: Optional[Sequence[str]] = None,
        skills: Optional[Sequence[str]] = None,
        category: Optional[str] = None,
        profession: Optional[str] = None,
        is_team_project: Optional[bool] = None,
    ) -> str:
        """One feed page; filter lists are sorted so order never splits the key"""
        return ":".join([
            "feed",
            sort_by,
            str(page),
            str(limit),
            cls._join(tech_stack),
            cls._join(skills),
            category or "",
            profession or "",
            cls._flag(is_team_project),
        ])

    @staticmethod
    def editor_picks() -> str:
        return "feed:editor-picks"

    @staticmethod
    def trending_tags() -> str:
        return "feed:trending-tags"


class RedisCache:
    """
    Async Redis cache client.

    Usage:
        cache = RedisCache()
        await cache.connect()

        await cache.set("key", {"data": "value"}, ttl=300)
        data = await cache.get("key")
        await cache.delete_pattern("feed:*")

    Command errors are logged and re-raised; callers that can live without
    the cache are handed None instead of a disconnected instance.
    """

    TTL_FEED = 300  # 5 minutes - feed pages

    def __init__(self, client: Optional[redis.Redis] = None, url: Optional[str] = None):
        self._url = url or settings.redis_url
        self._client: Optional[redis.Redis] = client
        self._connected = client is not None

    async def connect(self) -> None:
        """
        Establish connection to Redis.

        Leaves the cache disconnected (instead of raising) when Redis is
        unreachable; the app then runs uncached.
        """
        if self._connected:
            return

        try:
            self._client = redis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,  # Return strings, not bytes
                socket_connect_timeout=5,
                socket_keepalive=True,
                health_check_interval=30,
            )

            await self._client.ping()
            self._connected = True
            logger.info("✅ Redis cache connected")

        except Exception as e:
            logger.error(f"❌ Redis connection failed: {e}")
            self._connected = False

    async def disconnect(self) -> None:
        """Close Redis connection gracefully."""
        if self._client:
            await self._client.aclose()
            self._connected = False
            logger.info("Redis cache disconnected")

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client is not None

    @property
    def client(self) -> Optional[redis.Redis]:
        """Raw client, shared with the rate limiter."""
        return self._client if self.is_connected else None

    # ─────────────────────────────────────────────────────────────────
    # Core Operations
    # ─────────────────────────────────────────────────────────────────

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Returns None on cache miss. Deserializes JSON automatically.
        """
        if not self.is_connected:
            return None

        try:
            value = await self._client.get(key)
        except Exception as e:
            logger.warning(f"Cache GET error for {key}: {e}")
            raise

        if value is None:
            logger.debug(f"Cache MISS {key}")
            return None

        logger.debug(f"Cache HIT {key}")
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            # Return raw string if not JSON
            return value

    async def set(self, key: str, value: Any, ttl: int = TTL_FEED) -> bool:
        """
        Set value in cache with TTL.

        Args:
            key: Cache key
            value: Any JSON-serializable value
            ttl: Time-to-live in seconds (default 5 min)

        Returns:
            True if cached, False if the cache is disconnected
        """
        if not self.is_connected:
            return False

        serialized = value if isinstance(value, str) else json.dumps(value, default=str)

        try:
            await self._client.setex(key, ttl, serialized)
        except Exception as e:
            logger.warning(f"Cache SET error for {key}: {e}")
            raise
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a glob pattern.

        Example: delete_pattern("feed:*") removes every cached feed page.
        Uses SCAN (incremental) rather than KEYS so Redis is never blocked.
        """
        if not self.is_connected:
            return 0

        try:
            keys = [key async for key in self._client.scan_iter(match=pattern, count=500)]
            if not keys:
                return 0
            deleted = await self._client.delete(*keys)
        except Exception as e:
            logger.warning(f"Cache DELETE PATTERN error for {pattern}: {e}")
            raise

        logger.info(f"Deleted {deleted} keys matching '{pattern}'")
        return deleted

    # ─────────────────────────────────────────────────────────────────
    # Cache Stats (for /health)
    # ─────────────────────────────────────────────────────────────────

    async def get_stats(self) -> dict:
        if not self.is_connected:
            return {"status": "disconnected"}

        try:
            info = await self._client.info("stats")
            memory = await self._client.info("memory")
        except Exception as e:
            return {"status": "error", "error": str(e)}

        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
            "memory_used_mb": round(memory.get("used_memory", 0) / 1024 / 1024, 2),
        }
