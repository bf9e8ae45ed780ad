"""Redis-backed counter store.

Shared by every worker and instance, so limits hold under horizontal
scaling. Redis errors and socket timeouts propagate to the caller; the rate
limiter decides whether that means fail-open or fail-closed.
"""

from __future__ import annotations

import logging

from redis.asyncio import Redis

from app.adapters.rate_limit.base import AbstractCounterStore

logger = logging.getLogger(__name__)


class RedisCounterStore(AbstractCounterStore):
    """Counter store issuing INCR / EXPIRE / TTL against Redis."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: float = 1.0) -> "RedisCounterStore":
        """Create a store with its own connection pool.

        Args:
            url: Redis connection URL.
            socket_timeout: Connect and read timeout in seconds.

        Returns:
            RedisCounterStore bound to a new client.
        """
        client = Redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        logger.info("rate_limit.redis_store_initialized")
        return cls(client)

    async def incr(self, key: str) -> int:
        return int(await self._client.incr(key))

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._client.expire(key, seconds))

    async def ttl(self, key: str) -> int:
        return int(await self._client.ttl(key))

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("rate_limit.redis_store_closed")
