"""
Request-scoped deadline and cancellation token.
Threaded explicitly through every store call.
"""

import time
from typing import Any, Dict, Optional

from rediskit.core.exceptions import CacheCancelledError, CacheTimeoutError


class RequestContext:
    """Deadline and cancellation signal for one unit of work."""

    def __init__(self, deadline: Optional[float] = None):
        """
        Initialize request context.

        Args:
            deadline (Optional[float]): Absolute ``time.monotonic()`` deadline,
                or None for no deadline
        """
        self._deadline = deadline
        self._cancelled = False

    @classmethod
    def background(cls) -> "RequestContext":
        """Context with no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        """Context that expires ``seconds`` from now."""
        return cls(time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        """Cancel the context; later store calls fail immediately."""
        self._cancelled = True

    def remaining(self) -> Optional[float]:
        """
        Seconds left before the deadline.

        Returns:
            Optional[float]: Remaining seconds (never negative) or None without a deadline
        """
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Raise if the context can no longer be used.

        Raises:
            CacheCancelledError: If cancel() was called
            CacheTimeoutError: If the deadline has passed
        """
        if self._cancelled:
            raise CacheCancelledError(details)
        if self.expired:
            raise CacheTimeoutError("Request deadline exceeded", details)
