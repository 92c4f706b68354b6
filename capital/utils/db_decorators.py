"""
Database decorators for automatic commit and rollback.

Every public service operation that mutates state is one transactional
unit: either all of its writes are committed or none are.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger


T = TypeVar("T")


def transactional(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """
    Commit the service session on success and roll back on error.

    The decorated coroutine must be a method of an object exposing
    ``self.session`` (AsyncSession).

    Usage:
        class DepositService(BaseService):
            @transactional
            async def approve_deposit(self, deposit_id, admin_id):
                ...  # flush only, commit happens automatically

    Args:
        func: Async method to wrap

    Returns:
        Wrapped method with automatic commit/rollback
    """
    @wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        session = self.session
        try:
            result = await func(self, *args, **kwargs)
            await session.commit()
            return result
        except Exception as e:
            try:
                await session.rollback()
                logger.debug(
                    f"Rollback performed in {func.__name__} due to error: "
                    f"{type(e).__name__}"
                )
            except Exception as rollback_error:
                logger.error(
                    f"Failed to rollback in {func.__name__}: {rollback_error}"
                )
            raise

    return wrapper
