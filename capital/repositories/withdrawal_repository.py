"""
Withdrawal repository.

Data access layer for Withdrawal model.
"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.enums import WithdrawalStatus
from capital.models.withdrawal import Withdrawal
from capital.repositories.base import BaseRepository

# Statuses counted against the daily withdrawal limit
COUNTED_STATUSES = (
    WithdrawalStatus.PENDING.value,
    WithdrawalStatus.APPROVED.value,
    WithdrawalStatus.COMPLETED.value,
)


class WithdrawalRepository(BaseRepository[Withdrawal]):
    """Withdrawal repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(Withdrawal, session)

    async def count_in_window(
        self, user_id: int, start: datetime, end: datetime
    ) -> int:
        """
        Count user withdrawals created in [start, end) that count
        toward the daily limit.

        Args:
            user_id: User ID
            start: Window start (inclusive, UTC)
            end: Window end (exclusive, UTC)

        Returns:
            Number of withdrawals
        """
        stmt = (
            select(func.count(Withdrawal.id))
            .where(Withdrawal.user_id == user_id)
            .where(Withdrawal.status.in_(COUNTED_STATUSES))
            .where(Withdrawal.created_at >= start)
            .where(Withdrawal.created_at < end)
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_user_withdrawals(
        self, user_id: int, limit: int = 50
    ) -> list[Withdrawal]:
        """
        Get user withdrawals newest first.

        Args:
            user_id: User ID
            limit: Max number of results

        Returns:
            List of withdrawals
        """
        return await self.find_recent(limit=limit, user_id=user_id)

    async def list_by_status(
        self, status: str | None = None, limit: int = 100
    ) -> list[Withdrawal]:
        """
        List withdrawals newest first, optionally filtered by status.

        Args:
            status: Optional status filter
            limit: Max number of results

        Returns:
            List of withdrawals
        """
        if status:
            return await self.find_recent(limit=limit, status=status)
        return await self.find_recent(limit=limit)
