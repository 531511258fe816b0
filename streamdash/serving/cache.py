"""
Redis Cache Module

Dashboard result caching with:
- Connection pooling
- Automatic JSON serialization
- TTL management
- Stale-if-error fallback to the last successful result
"""

import json
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from streamdash.config import get_settings

logger = structlog.get_logger(__name__)

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=settings.redis.decode_responses,
    )
    _redis_client = Redis(connection_pool=_redis_pool)

    try:
        await _redis_client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        logger.error("Redis connection failed", error=str(e))
        await close_redis()
        raise

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.close()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Args:
        key: Cache key

    Returns:
        Cached value or None if not found
    """
    client = get_redis()
    value = await client.get(key)

    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time-to-live in seconds or timedelta, ``None`` keeps it forever

    Returns:
        True if successful
    """
    client = get_redis()

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    if ttl:
        if isinstance(ttl, timedelta):
            ttl = int(ttl.total_seconds())
        await client.setex(key, ttl, serialized)
    else:
        await client.set(key, serialized)

    return True


class CacheManager:
    """
    Cache manager with namespace support and stale-if-error reads.

    Every successful computation is stored twice: under the fresh key with a
    TTL, and under a ``last:`` key without expiry that serves as the fallback
    when a later refresh fails.

    Example:
        cache = CacheManager("dashboards")
        value, stale = await cache.get_or_stale("overview:30d", compute)
    """

    def __init__(self, namespace: str, default_ttl: int = 600):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        """Generate namespaced key"""
        return f"{self.namespace}:{key}"

    def _last_key(self, key: str) -> str:
        return f"{self.namespace}:last:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        return await cache_get(self._key(key))

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        """Set value in cache"""
        return await cache_set(self._key(key), value, ttl or self.default_ttl)

    async def invalidate_all(self) -> int:
        """Invalidate all fresh keys in namespace, keeping stale fallbacks"""
        deleted = 0
        client = get_redis()
        for cache_key in await client.keys(f"{self.namespace}:*"):
            if not cache_key.startswith(f"{self.namespace}:last:"):
                deleted += await client.delete(cache_key)
        return deleted

    async def _safe_get(self, cache_key: str) -> Optional[Any]:
        try:
            return await cache_get(cache_key)
        except (RedisError, RuntimeError) as e:
            logger.warning("Cache read failed", key=cache_key, error=str(e))
            return None

    async def _safe_store(self, key: str, value: Any, ttl: Optional[int]) -> None:
        try:
            await cache_set(self._key(key), value, ttl or self.default_ttl)
            await cache_set(self._last_key(key), value)
        except (RedisError, RuntimeError) as e:
            logger.warning("Cache write failed", key=key, error=str(e))

    async def get_or_stale(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Tuple[Any, bool]:
        """
        Get a fresh value from cache or compute it, falling back to the last
        successful value when computing fails.

        Args:
            key: Cache key
            factory: Async function computing a JSON-serializable value
            ttl: Time-to-live of the fresh value

        Returns:
            ``(value, stale)`` where ``stale`` is True for a fallback value

        Raises:
            Whatever ``factory`` raised, when no previous value exists
        """
        cached = await self._safe_get(self._key(key))
        if cached is not None:
            logger.debug("Cache hit", key=key)
            return cached, False

        try:
            value = await factory()
        except Exception as e:
            last = await self._safe_get(self._last_key(key))
            if last is None:
                logger.error("Refresh failed with no previous result", key=key, error=str(e))
                raise
            logger.warning("Refresh failed, serving previous result", key=key, error=str(e))
            return last, True

        await self._safe_store(key, value, ttl)
        return value, False


# Pre-configured cache managers
dashboard_cache = CacheManager("dashboards", default_ttl=get_settings().redis.dashboard_ttl_seconds)
