"""
Earnings scheduler runner.

Runs the daily earnings tick in-process every few minutes with
APScheduler and serves health checks over aiohttp.

Usage:
    python -m jobs.scheduler
"""

import asyncio
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from capital.config.database import async_session_maker
from capital.config.settings import settings
from capital.tasks.earnings_task import run_daily_earnings
from capital.utils.logging import setup_logging
from jobs.health import (
    record_tick,
    set_scheduler,
    start_health_server,
    stop_health_server,
)
from jobs.utils.database import create_redis_client

EARNINGS_JOB_ID = "daily_earnings"


async def earnings_job() -> None:
    """Scheduled job: one earnings tick."""
    redis_client = create_redis_client()
    try:
        result = await run_daily_earnings(
            session_maker=async_session_maker,
            config=settings.platform_config(),
            redis_client=redis_client,
        )
        record_tick(result)
    except Exception as e:
        logger.exception(
            "Earnings job failed", extra={"error": str(e)}
        )
    finally:
        await redis_client.aclose()


def create_scheduler() -> AsyncIOScheduler:
    """
    Build the scheduler with the earnings job registered.

    Returns:
        Configured (not started) scheduler
    """
    scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 120,
        },
        timezone="UTC",
    )
    scheduler.add_job(
        earnings_job,
        trigger=IntervalTrigger(minutes=settings.earnings_interval_minutes),
        id=EARNINGS_JOB_ID,
        name="Process Daily VIP Earnings",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


async def main() -> None:
    """Run scheduler and health server until a stop signal arrives."""
    setup_logging(settings.log_level, settings.log_file)

    scheduler = create_scheduler()
    scheduler.start()
    set_scheduler(scheduler)
    logger.info(
        f"Earnings scheduler started, interval "
        f"{settings.earnings_interval_minutes} min"
    )

    runner = await start_health_server(port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
    finally:
        scheduler.shutdown(wait=False)
        await stop_health_server(runner)
        logger.info("Earnings scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
