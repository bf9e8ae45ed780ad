"""Rate limiting types and the counter store interface.

The limiter never keeps counts in process memory; it only issues atomic
primitives (increment, expire, ttl) against a shared counter store, so the
HTTP layer can scale horizontally without multiplying the effective limit.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

# Values returned by ``AbstractCounterStore.ttl`` when no expiry applies
TTL_KEY_MISSING = -2
TTL_NO_EXPIRY = -1


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-endpoint rate limit policy.

    Attributes:
        limit: Maximum requests allowed per window.
        window_ms: Window length in milliseconds.
    """

    limit: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("limit must be >= 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be >= 1")

    @property
    def window_seconds(self) -> int:
        """Window length rounded up to whole seconds (store TTL granularity)."""
        return math.ceil(self.window_ms / 1000)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window (0 when blocked).
        reset: UNIX epoch milliseconds when the current window ends.
    """

    allowed: bool
    limit: int
    remaining: int
    reset: int

    def retry_after_seconds(self, now_ms: int) -> int:
        """Whole seconds until ``reset``, never negative."""
        return max(0, math.ceil((self.reset - now_ms) / 1000))


class AbstractCounterStore(ABC):
    """Shared counter store with expiring integer keys.

    Implementations must make ``incr`` atomic across every process that
    shares the store.
    """

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Increment ``key`` by one (creating it at 0) and return the new count."""
        raise NotImplementedError

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> bool:
        """Set ``key`` to expire in ``seconds``. Returns False if the key is missing."""
        raise NotImplementedError

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining time-to-live of ``key`` in seconds.

        Returns:
            Seconds left, ``TTL_NO_EXPIRY`` (-1) for a key without expiry, or
            ``TTL_KEY_MISSING`` (-2) for a missing key.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release connections held by the store."""
        return None
