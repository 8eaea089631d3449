"""
Redis client for cache store operations.
Handles connection management, deadlines and error handling.
"""

import asyncio
from datetime import timedelta
from typing import Any, Awaitable, Callable, List, Optional, Union

import redis.asyncio as redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from rediskit.core.config import ConnectConfig
from rediskit.core.context import RequestContext
from rediskit.core.exceptions import (
    CacheConnectionError,
    CacheDisconnectError,
    CacheError,
    CacheKeyNotFoundError,
    CacheNotConnectedError,
    CacheTimeoutError,
)
from rediskit.core.logging import get_logger, log_cache_operation

logger = get_logger(__name__)

Expire = Optional[Union[int, timedelta]]


class RedisClient:
    """Redis client that logs and raises every store failure."""

    def __init__(
        self,
        config: ConnectConfig,
        trace_name: str = "rediskit",
        client: Optional[redis.Redis] = None
    ):
        """
        Initialize Redis client.

        Args:
            config (ConnectConfig): Connection parameters
            trace_name (str): Name attached to every log line
            client (Optional[redis.Redis]): Pre-built client to use instead of
                building one from ``config``
        """
        self._config = config
        self._prebuilt = client
        self._client: Optional[redis.Redis] = None
        self.trace_name = f"[{trace_name}_RedisService]"
        self.logger = logger.bind(trace=self.trace_name)

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _build_client(self) -> redis.Redis:
        host, port = self._config.host_port()
        return redis.Redis(
            host=host,
            port=port,
            username=self._config.user,
            password=self._config.password,
            db=self._config.db,
            decode_responses=True,
        )

    async def connect(self) -> None:
        """
        Establish connection to Redis and probe it with PING.

        Raises:
            CacheConnectionError: If the probe fails or times out
        """
        client = self._prebuilt or self._build_client()
        try:
            await asyncio.wait_for(client.ping(), timeout=self._config.ping_timeout)
        except (asyncio.TimeoutError, RedisError, OSError) as e:
            self.logger.error(
                "Failed to connect to redis", addr=self._config.addr, error=str(e)
            )
            log_cache_operation("connect", status="failed", addr=self._config.addr)
            raise CacheConnectionError(
                f"Failed to connect to Redis at {self._config.addr}",
                {"addr": self._config.addr, "db": self._config.db, "error": str(e)},
            ) from e

        self._client = client
        self.logger.info("Successfully connected to redis", addr=self._config.addr)
        log_cache_operation("connect", addr=self._config.addr, db=self._config.db)

    async def disconnect(self) -> None:
        """
        Close Redis connection.

        Raises:
            CacheDisconnectError: If closing the connection fails
        """
        if not self._client:
            self.logger.debug("Disconnect requested on a closed client")
            return

        try:
            await self._client.aclose()
        except (RedisError, OSError) as e:
            self.logger.error("Failed to disconnect from redis", error=str(e))
            raise CacheDisconnectError(details={"error": str(e)}) from e

        self._client = None
        self.logger.info("Successfully disconnected from redis")
        log_cache_operation("disconnect", addr=self._config.addr)

    async def _execute(
        self,
        operation: str,
        call: Callable[[redis.Redis], Awaitable[Any]],
        ctx: Optional[RequestContext] = None,
        **fields: Any
    ) -> Any:
        """
        Run one store call under the request deadline.

        Args:
            operation (str): Human readable operation, used in log lines
            call (Callable): Receives the redis client and returns the awaitable
            ctx (Optional[RequestContext]): Deadline and cancellation token
            **fields: Key(s) and other context for logs and error details

        Returns:
            Any: Raw result of the store call
        """
        if not self._client:
            self.logger.error(f"Failed to {operation}: not connected", **fields)
            raise CacheNotConnectedError(details=dict(fields))

        ctx = ctx or RequestContext.background()
        try:
            ctx.check(dict(fields))
            return await asyncio.wait_for(call(self._client), timeout=ctx.remaining())
        except CacheError as e:
            self.logger.error(f"Failed to {operation}", error=e.message, **fields)
            raise
        except (asyncio.TimeoutError, RedisTimeoutError) as e:
            self.logger.error(f"Failed to {operation}: timed out", error=str(e), **fields)
            raise CacheTimeoutError(
                f"Redis {operation} timed out", {**fields, "error": str(e)}
            ) from e
        except RedisConnectionError as e:
            self.logger.error(f"Failed to {operation}", error=str(e), **fields)
            raise CacheConnectionError(
                f"Redis {operation} failed: {e}", {**fields, "error": str(e)}
            ) from e
        except RedisError as e:
            self.logger.error(f"Failed to {operation}", error=str(e), **fields)
            raise CacheError(
                f"Redis {operation} failed: {e}", {**fields, "error": str(e)}
            ) from e

    async def ping(self, ctx: Optional[RequestContext] = None) -> bool:
        """Probe the connection."""
        return bool(await self._execute("ping redis", lambda c: c.ping(), ctx))

    async def get(self, key: str, ctx: Optional[RequestContext] = None) -> str:
        """
        Get value from Redis.

        Args:
            key (str): Cache key
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            str: Stored value

        Raises:
            CacheKeyNotFoundError: If the key is missing or holds an empty string
        """
        value = await self._execute("get key", lambda c: c.get(key), ctx, key=key)
        if not value:
            self.logger.debug(f"Cache miss for key: {key}")
            raise CacheKeyNotFoundError(key)
        return value

    async def set(
        self,
        key: str,
        value: Any,
        expire: Expire = None,
        ctx: Optional[RequestContext] = None
    ) -> bool:
        """
        Set value in Redis.

        Args:
            key (str): Cache key
            value (Any): Value accepted by redis-py (str, bytes, int, float)
            expire (Optional[Union[int, timedelta]]): Expiration in seconds or timedelta;
                None or zero keeps the key without expiry
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            bool: True once stored
        """
        result = await self._execute(
            "set key", lambda c: c.set(key, value, ex=expire or None), ctx, key=key
        )
        self.logger.debug(f"Cache set for key: {key}")
        return bool(result)

    async def sadd(
        self, key: str, *members: Any, ctx: Optional[RequestContext] = None
    ) -> int:
        """
        Add members to the set at key.

        Returns:
            int: Number of members that were not already present
        """
        return await self._execute(
            "add members at key", lambda c: c.sadd(key, *members), ctx, key=key
        )

    async def smembers(self, key: str, ctx: Optional[RequestContext] = None) -> List[str]:
        """
        Get all members of the set at key.

        Args:
            key (str): Set key
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            List[str]: Members in the order the store returned them
        """
        members = await self._execute(
            "get members at key", lambda c: c.smembers(key), ctx, key=key
        )
        return list(members or [])

    async def mget(
        self, *keys: str, ctx: Optional[RequestContext] = None
    ) -> List[Optional[str]]:
        """
        Get several keys at once.

        Returns:
            List[Optional[str]]: One entry per key, None where the key is missing
        """
        return await self._execute(
            "get keys", lambda c: c.mget(list(keys)), ctx, keys=list(keys)
        )

    async def delete(self, *keys: str, ctx: Optional[RequestContext] = None) -> int:
        """
        Delete keys from Redis.

        Returns:
            int: Number of keys removed
        """
        return await self._execute(
            "delete keys", lambda c: c.delete(*keys), ctx, keys=list(keys)
        )

    async def exists(self, key: str, ctx: Optional[RequestContext] = None) -> bool:
        """Check if key exists in Redis."""
        result = await self._execute(
            "check key", lambda c: c.exists(key), ctx, key=key
        )
        return bool(result)

    async def ttl(self, key: str, ctx: Optional[RequestContext] = None) -> int:
        """
        Get time to live for a key.

        Returns:
            int: TTL in seconds, -1 if no expiration, -2 if key doesn't exist
        """
        return await self._execute("get ttl of key", lambda c: c.ttl(key), ctx, key=key)
