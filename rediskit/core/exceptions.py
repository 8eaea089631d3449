"""
Custom exceptions for rediskit.
Provides structured error handling for cache store operations.
"""

from typing import Any, Dict, Optional


class RedisKitException(Exception):
    """Base exception for rediskit."""

    def __init__(
        self,
        message: str,
        error_code: str = "REDISKIT_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(RedisKitException):
    """Raised when connection settings are invalid."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


# Cache Operations
class CacheError(RedisKitException):
    """Raised when cache operations fail."""

    def __init__(
        self,
        message: str = "Cache operation failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "CACHE_ERROR"
    ):
        super().__init__(message, error_code, details)


class CacheConnectionError(CacheError):
    """Raised when the store is unreachable, refuses auth, or the probe fails."""

    def __init__(
        self,
        message: str = "Cache connection failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "CACHE_CONNECTION_ERROR"
    ):
        super().__init__(message, details, error_code)


class CacheTimeoutError(CacheConnectionError):
    """Raised when a store call or request deadline times out."""

    def __init__(self, message: str = "Cache operation timed out", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, "CACHE_TIMEOUT")


class CacheCancelledError(CacheError):
    """Raised when the request context was cancelled."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Cache operation cancelled", details, "CACHE_CANCELLED")


class CacheNotConnectedError(CacheError):
    """Raised when the client is used before connect()."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Cache client is not connected", details, "CACHE_NOT_CONNECTED")


class CacheDisconnectError(CacheError):
    """Raised when closing the connection fails."""

    def __init__(self, message: str = "Cache disconnect failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, "CACHE_DISCONNECT_ERROR")


class CacheKeyNotFoundError(CacheError):
    """Raised when a key is missing or holds an empty value."""

    def __init__(self, key: str, details: Optional[Dict[str, Any]] = None):
        message = f"Cache key not found: {key}"
        super().__init__(message, details, "CACHE_KEY_NOT_FOUND")
        self.key = key


class CacheDecodeError(CacheError):
    """Raised when a cached payload cannot be decoded into the requested type."""

    def __init__(self, key: str, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to decode cached value: {key}"
        super().__init__(message, details, "CACHE_DECODE_ERROR")
        self.key = key
