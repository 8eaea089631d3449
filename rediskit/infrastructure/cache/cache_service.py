"""
Cache service for high-level caching operations.
Provides JSON helpers and reference-set expansion on top of RedisClient.
"""

from functools import lru_cache
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Type, TypeVar
import hashlib
import json

from pydantic import TypeAdapter, ValidationError

from rediskit.core.config import ConnectConfig, settings
from rediskit.core.context import RequestContext
from rediskit.core.exceptions import CacheDecodeError, CacheError, CacheKeyNotFoundError
from rediskit.infrastructure.cache.redis_client import Expire, RedisClient

T = TypeVar("T")

# Longest key generate_key returns before hashing
MAX_KEY_LENGTH = 250


@lru_cache(maxsize=256)
def _type_adapter(item_type: Any) -> TypeAdapter:
    return TypeAdapter(item_type)


class CacheService:
    """High-level cache service bound to one connected RedisClient."""

    def __init__(self, client: RedisClient):
        """
        Initialize cache service.

        Args:
            client (RedisClient): Client shared by every call on this service
        """
        self._client = client
        self.logger = client.logger

    @property
    def client(self) -> RedisClient:
        return self._client

    async def get(self, key: str, ctx: Optional[RequestContext] = None) -> str:
        """Get raw value; raises CacheKeyNotFoundError when missing or empty."""
        return await self._client.get(key, ctx)

    async def set(
        self,
        key: str,
        value: Any,
        expire: Expire = None,
        ctx: Optional[RequestContext] = None
    ) -> bool:
        """Set raw value with optional expiration."""
        return await self._client.set(key, value, expire, ctx)

    async def delete(self, *keys: str, ctx: Optional[RequestContext] = None) -> int:
        """Delete keys, returning how many were removed."""
        return await self._client.delete(*keys, ctx=ctx)

    async def exists(self, key: str, ctx: Optional[RequestContext] = None) -> bool:
        return await self._client.exists(key, ctx)

    async def sadd(self, key: str, *members: Any, ctx: Optional[RequestContext] = None) -> int:
        return await self._client.sadd(key, *members, ctx=ctx)

    async def smembers(self, key: str, ctx: Optional[RequestContext] = None) -> List[str]:
        return await self._client.smembers(key, ctx)

    async def mget(
        self, *keys: str, ctx: Optional[RequestContext] = None
    ) -> List[Optional[str]]:
        return await self._client.mget(*keys, ctx=ctx)

    def _decode(self, adapter: TypeAdapter, key: str, value: str, **fields: Any) -> Any:
        try:
            return adapter.validate_json(value)
        except ValidationError as e:
            self.logger.error("Failed to decode cached value", key=key, error=str(e), **fields)
            raise CacheDecodeError(key, {"error": str(e), **fields}) from e

    async def json_get(
        self,
        key: str,
        item_type: Type[T] = Any,
        ctx: Optional[RequestContext] = None
    ) -> T:
        """
        Get a JSON value and decode it.

        Args:
            key (str): Cache key
            item_type (Type[T]): Type to decode into; plain JSON when omitted
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            T: Decoded value

        Raises:
            CacheKeyNotFoundError: If the key is missing or empty
            CacheDecodeError: If the payload does not decode into ``item_type``
        """
        value = await self._client.get(key, ctx)
        return self._decode(_type_adapter(item_type), key, value)

    async def json_set(
        self,
        key: str,
        value: Any,
        expire: Expire = None,
        ctx: Optional[RequestContext] = None
    ) -> bool:
        """
        Encode a value as JSON and store it.

        Args:
            key (str): Cache key
            value (Any): Pydantic model, dataclass or plain JSON-compatible value
            expire (Optional[Union[int, timedelta]]): Expiration time
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            bool: True once stored
        """
        payload = _type_adapter(type(value)).dump_json(value).decode("utf-8")
        return await self._client.set(key, payload, expire, ctx)

    async def json_mget(
        self,
        keys: Sequence[str],
        item_type: Type[T] = Any,
        ctx: Optional[RequestContext] = None
    ) -> List[Optional[T]]:
        """
        Get several JSON values at once.

        Returns:
            List[Optional[T]]: Decoded values, None where the key is missing or empty
        """
        values = await self._client.mget(*keys, ctx=ctx)
        adapter = _type_adapter(item_type)
        return [
            self._decode(adapter, key, value) if value else None
            for key, value in zip(keys, values)
        ]

    async def resolve_expanded_members(
        self, key: str, ctx: Optional[RequestContext] = None
    ) -> List[str]:
        """
        Resolve every member of the reference set at ``key`` as a key of its own.

        Members that are missing, empty, or fail to load are skipped and logged;
        only a failure to read the set itself is raised.

        Args:
            key (str): Reference key holding a set of member keys
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            List[str]: Resolved values in the order the members were returned

        Raises:
            CacheError: If the set members cannot be read
        """
        self.logger.info("Get members child by key", key=key)
        members = await self._client.smembers(key, ctx)

        result: List[str] = []
        for member in members:
            try:
                value = await self._client.get(member, ctx)
            except CacheError as e:
                self.logger.error(
                    "Failed to get member", member=member, reference_key=key, error=e.message
                )
                continue
            result.append(value)

        return result

    async def resolve_expanded_members_into(
        self,
        key: str,
        item_type: Type[T],
        out: Optional[List[T]] = None,
        ctx: Optional[RequestContext] = None
    ) -> List[T]:
        """
        Resolve the reference set at ``key`` and decode each value into ``item_type``.

        Args:
            key (str): Reference key holding a set of member keys
            item_type (Type[T]): Type each resolved JSON payload decodes into
            out (Optional[List[T]]): List to append to; a new one is created when omitted
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            List[T]: ``out`` with the decoded items appended

        Raises:
            CacheError: If the set members cannot be read
            CacheDecodeError: On the first payload that fails to decode; items
                decoded before it stay in ``out``
        """
        if out is None:
            out = []

        try:
            values = await self.resolve_expanded_members(key, ctx)
        except CacheError as e:
            self.logger.error("Failed to get members at key", key=key, error=e.message)
            raise

        adapter = _type_adapter(item_type)
        for index, value in enumerate(values):
            out.append(self._decode(adapter, key, value, index=index))

        return out

    def generate_key(self, prefix: str, *args, **kwargs) -> str:
        """
        Generate a cache key from prefix and arguments.

        Args:
            prefix (str): Key prefix
            *args: Positional arguments to include in key
            **kwargs: Keyword arguments to include in key

        Returns:
            str: Generated cache key
        """
        key_parts = [prefix]

        for arg in args:
            if isinstance(arg, (dict, list)):
                key_parts.append(json.dumps(arg, sort_keys=True))
            else:
                key_parts.append(str(arg))

        for name, value in sorted(kwargs.items()):
            if isinstance(value, (dict, list)):
                key_parts.append(f"{name}:{json.dumps(value, sort_keys=True)}")
            else:
                key_parts.append(f"{name}:{value}")

        key_string = ":".join(key_parts)
        if len(key_string) > MAX_KEY_LENGTH:
            key_hash = hashlib.md5(key_string.encode()).hexdigest()
            return f"{prefix}:{key_hash}"

        return key_string

    async def get_or_set_json(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        item_type: Type[T] = Any,
        expire: Expire = None,
        ctx: Optional[RequestContext] = None
    ) -> Any:
        """
        Get a JSON value from cache or store the one produced by ``factory``.

        Only a missing key triggers the factory; connectivity and decode
        errors are raised.

        Args:
            key (str): Cache key
            factory (Callable): Async function producing the value on a miss
            item_type (Type[T]): Type cached values decode into
            expire (Optional[Union[int, timedelta]]): Expiration for a new value
            ctx (Optional[RequestContext]): Deadline and cancellation token

        Returns:
            Any: Cached or generated value
        """
        try:
            return await self.json_get(key, item_type, ctx)
        except CacheKeyNotFoundError:
            self.logger.debug(f"Cache miss for key: {key}, generating new value")

        new_value = await factory()
        await self.json_set(key, new_value, expire, ctx)

        return new_value


async def create_cache_service(
    config: Optional[ConnectConfig] = None,
    trace_name: Optional[str] = None
) -> CacheService:
    """
    Connect a new Redis client and wrap it in a CacheService.

    Args:
        config (Optional[ConnectConfig]): Connection parameters; read from settings when omitted
        trace_name (Optional[str]): Log trace name; ``REDIS_TRACE_NAME`` when omitted

    Returns:
        CacheService: Service bound to the connected client

    Raises:
        CacheConnectionError: If the connectivity probe fails
    """
    client = RedisClient(
        config or ConnectConfig.from_settings(settings),
        trace_name or settings.REDIS_TRACE_NAME,
    )
    await client.connect()
    return CacheService(client)
