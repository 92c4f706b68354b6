"""
Base service class.

Provides common functionality for all service classes including session
management, injected configuration and clock, and bound logging.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import PlatformConfig
from capital.utils.datetime_utils import Clock, SystemClock
from capital.utils.formatters import format_amount


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Immutable platform configuration
    - Injectable clock
    - Logging with bound service context
    """

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            config: Platform configuration (defaults if omitted)
            clock: Time source (system clock if omitted)
        """
        self.session = session
        self.config = config or PlatformConfig()
        self.clock = clock or SystemClock()
        self.logger = logger.bind(service=self.__class__.__name__)

    def money(self, amount: Any) -> str:
        """Format an amount in the configured currency for messages."""
        return format_amount(amount, self.config.currency)


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method entry/exit with timing.

    Logs:
    - Method entry
    - Method exit with duration
    - Exceptions if any

    Usage:
        @log_operation
        async def process_daily_earnings(self):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()

        self.logger.info(
            f"Starting {func.__name__}",
            extra={"function": func.__name__},
        )

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            duration = time.time() - start_time
            self.logger.error(
                f"Failed {func.__name__}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(duration, 3),
                    "error": str(e),
                    "success": False,
                },
            )
            raise

        duration = time.time() - start_time
        self.logger.info(
            f"Completed {func.__name__}",
            extra={
                "function": func.__name__,
                "duration_seconds": round(duration, 3),
                "success": True,
            },
        )
        return result

    return wrapper
