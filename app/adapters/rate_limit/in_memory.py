"""In-memory counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
  Use the Redis store anywhere more than one worker serves webhooks.
- Thread-safe: uses a lock around shared state.
- Mirrors Redis TTL semantics (-2 missing key, -1 no expiry).
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import (
    TTL_KEY_MISSING,
    TTL_NO_EXPIRY,
    AbstractCounterStore,
)


@dataclass
class _CounterState:
    count: int
    expires_at: float | None = None


class InMemoryCounterStore(AbstractCounterStore):
    """Counter store backed by a dict, with lazily evicted expiring keys."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _CounterState] = {}

    def _live_state(self, key: str, now: float) -> _CounterState | None:
        """Return the state for ``key``, dropping it first if it has expired."""
        state = self._state_by_key.get(key)
        if state is not None and state.expires_at is not None and state.expires_at <= now:
            del self._state_by_key[key]
            return None
        return state

    async def incr(self, key: str) -> int:
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            state = self._live_state(key, self._clock())
            if state is None:
                state = _CounterState(count=0)
                self._state_by_key[key] = state
            state.count += 1
            return state.count

    async def expire(self, key: str, seconds: int) -> bool:
        now = self._clock()
        with self._lock:
            state = self._live_state(key, now)
            if state is None:
                return False
            state.expires_at = now + seconds
            return True

    async def ttl(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            state = self._live_state(key, now)
            if state is None:
                return TTL_KEY_MISSING
            if state.expires_at is None:
                return TTL_NO_EXPIRY
            return max(0, math.ceil(state.expires_at - now))

    async def close(self) -> None:
        with self._lock:
            self._state_by_key.clear()
