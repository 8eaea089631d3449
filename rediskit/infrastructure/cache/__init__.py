"""
Cache infrastructure module.
Provides the Redis client and the high-level cache service.
"""

from .redis_client import RedisClient
from .cache_service import CacheService, create_cache_service

__all__ = [
    "RedisClient",
    "CacheService",
    "create_cache_service"
]
