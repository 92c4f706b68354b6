"""
Daily earnings task.

Pays due VIP investment earnings and completes matured investments.
Enqueued periodically; safe to run more often than daily.
"""

import dramatiq
from loguru import logger

from capital.config.settings import settings
from capital.tasks.earnings_task import run_daily_earnings
from jobs.async_runner import run_async
from jobs.broker import broker  # noqa: F401
from jobs.utils.database import (
    create_redis_client,
    create_task_engine,
    create_task_session_maker,
)


# Time limit must stay above the lock timeout
@dramatiq.actor(max_retries=3, time_limit=600_000)
def process_daily_earnings() -> None:
    """Run one daily earnings tick in a dramatiq worker."""
    logger.info("Starting daily earnings processing...")
    result = run_async(_process_daily_earnings_async())
    if result is None:
        logger.info("Daily earnings skipped: lock held by another worker")
        return
    logger.info(
        f"Daily earnings processing complete: {result.paid} paid, "
        f"{result.completed} completed, {result.failed} failed, "
        f"total: {result.total_paid} {settings.currency}"
    )


async def _process_daily_earnings_async():
    """Async implementation of daily earnings processing."""
    engine = create_task_engine()
    redis_client = create_redis_client()
    try:
        return await run_daily_earnings(
            session_maker=create_task_session_maker(engine),
            config=settings.platform_config(),
            redis_client=redis_client,
        )
    finally:
        await redis_client.aclose()
        await engine.dispose()
