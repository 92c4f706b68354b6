"""
Distributed lock.

Prevents two workers from running the same periodic job at the same time.
Uses Redis ``SET NX EX`` when a client is available and falls back to an
in-process asyncio lock otherwise (single worker deployments, tests).
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger


# Releases the key only if it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

_local_locks: dict[str, asyncio.Lock] = {}


class DistributedLock:
    """Redis-backed lock with in-process fallback."""

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str = "lock:",
    ) -> None:
        """
        Initialize lock.

        Args:
            redis_client: Async Redis client (optional)
            prefix: Key prefix for lock keys
        """
        self.redis_client = redis_client
        self.prefix = prefix

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        timeout: int = 60,
        blocking: bool = False,
        blocking_timeout: float = 5.0,
    ) -> AsyncIterator[bool]:
        """
        Acquire lock for the duration of the block.

        Args:
            key: Lock name
            timeout: Lock expiry in seconds (Redis only)
            blocking: Wait for the lock instead of giving up immediately
            blocking_timeout: Max seconds to wait when blocking

        Yields:
            True if the lock was acquired, False otherwise
        """
        if self.redis_client is None:
            async with self._local_lock(key, blocking, blocking_timeout) as acquired:
                yield acquired
            return

        full_key = f"{self.prefix}{key}"
        token = uuid.uuid4().hex
        acquired = await self._acquire_redis(
            full_key, token, timeout, blocking, blocking_timeout
        )
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await self.redis_client.eval(_RELEASE_SCRIPT, 1, full_key, token)
                except Exception as e:
                    # Key expires on its own after timeout
                    logger.warning(f"Failed to release lock {full_key}: {e}")

    async def _acquire_redis(
        self,
        full_key: str,
        token: str,
        timeout: int,
        blocking: bool,
        blocking_timeout: float,
    ) -> bool:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + blocking_timeout
        while True:
            if await self.redis_client.set(full_key, token, nx=True, ex=timeout):
                logger.debug(f"Lock acquired: {full_key}")
                return True
            if not blocking or loop.time() >= deadline:
                return False
            await asyncio.sleep(0.1)

    @asynccontextmanager
    async def _local_lock(
        self, key: str, blocking: bool, blocking_timeout: float
    ) -> AsyncIterator[bool]:
        local = _local_locks.setdefault(key, asyncio.Lock())
        if local.locked() and not blocking:
            yield False
            return
        try:
            await asyncio.wait_for(local.acquire(), timeout=blocking_timeout)
        except TimeoutError:
            yield False
            return
        try:
            yield True
        finally:
            local.release()
