"""
Earnings task.

Async entry point shared by the dramatiq actor and the APScheduler job.
Runs one earnings scheduler tick under a distributed lock so concurrent
workers never process the same tick twice.
"""

import redis.asyncio as redis
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from capital.config.platform import PlatformConfig
from capital.services.investment.earnings_scheduler import (
    EarningsRunResult,
    EarningsScheduler,
)
from capital.utils.datetime_utils import Clock
from capital.utils.distributed_lock import DistributedLock

LOCK_KEY = "daily_earnings_processing"
# Must stay above the longest expected tick duration
LOCK_TIMEOUT_SECONDS = 300


async def run_daily_earnings(
    session_maker: async_sessionmaker[AsyncSession],
    config: PlatformConfig,
    clock: Clock | None = None,
    redis_client: redis.Redis | None = None,
) -> EarningsRunResult | None:
    """
    Run one daily earnings tick.

    Args:
        session_maker: Session factory for per-investment transactions
        config: Platform configuration
        clock: Time source (system clock if omitted)
        redis_client: Redis client for the distributed lock (in-process
            lock if omitted)

    Returns:
        EarningsRunResult, or None if another worker holds the lock
    """
    lock = DistributedLock(redis_client=redis_client)

    async with lock.lock(
        LOCK_KEY, timeout=LOCK_TIMEOUT_SECONDS, blocking=False
    ) as acquired:
        if not acquired:
            logger.warning(
                "Daily earnings already running in another worker, skipping"
            )
            return None

        scheduler = EarningsScheduler(session_maker, config, clock)
        result = await scheduler.process_daily_earnings()

    if result.failed:
        logger.error(
            f"Daily earnings tick had {result.failed} failed investments",
            extra=result.as_dict(),
        )
    return result
