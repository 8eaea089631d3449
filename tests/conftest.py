import os
import sys
from datetime import timedelta

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from rediskit.core.config import ConnectConfig  # noqa: E402
from rediskit.infrastructure.cache import CacheService, RedisClient  # noqa: E402


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering the commands rediskit issues."""

    def __init__(self):
        self.strings = {}
        self.sets = {}
        self.expiry = {}
        self.closed = False

    async def ping(self):
        return True

    async def get(self, key):
        return self.strings.get(key)

    async def set(self, key, value, ex=None):
        self.strings[key] = value if isinstance(value, str) else str(value)
        if ex is None:
            self.expiry.pop(key, None)
        elif isinstance(ex, timedelta):
            self.expiry[key] = int(ex.total_seconds())
        else:
            self.expiry[key] = ex
        return True

    async def sadd(self, key, *members):
        existing = self.sets.setdefault(key, [])
        added = 0
        for member in members:
            member = str(member)
            if member not in existing:
                existing.append(member)
                added += 1
        return added

    async def smembers(self, key):
        # Insertion order stands in for the server's iteration order
        return list(self.sets.get(key, []))

    async def mget(self, keys):
        return [self.strings.get(key) for key in keys]

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.strings.pop(key, None) is not None or self.sets.pop(key, None) is not None:
                self.expiry.pop(key, None)
                removed += 1
        return removed

    async def exists(self, key):
        return int(key in self.strings or key in self.sets)

    async def ttl(self, key):
        if not await self.exists(key):
            return -2
        return self.expiry.get(key, -1)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def connect_config() -> ConnectConfig:
    return ConnectConfig(addr="localhost:6379", ping_timeout=0.5)


@pytest.fixture
async def redis_client(fake_redis, connect_config) -> RedisClient:
    """Client connected to the in-memory store."""
    client = RedisClient(connect_config, "test", client=fake_redis)
    await client.connect()
    return client


@pytest.fixture
async def cache_service(redis_client) -> CacheService:
    return CacheService(redis_client)
