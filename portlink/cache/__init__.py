"""
Redis cache module for feed caching.

This module provides async Redis operations for caching:
- Feed pages (5-minute TTL)
- Editor picks (10-minute TTL)
- Trending tags (30-minute TTL)

Pattern: Read-Through with TTL, invalidated by prefix on post writes
- Cache miss falls back to DB
- Search and viewer-scoped queries bypass the cache entirely
"""
from portlink.cache.redis_client import (
    RedisCache,
    CacheKeys,
)

__all__ = ["RedisCache", "CacheKeys"]
