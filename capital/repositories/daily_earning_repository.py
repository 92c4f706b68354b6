"""
Daily earning repository.

Data access layer for DailyEarning model.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.daily_earning import DailyEarning
from capital.repositories.base import BaseRepository


class DailyEarningRepository(BaseRepository[DailyEarning]):
    """Daily earning repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize daily earning repository."""
        super().__init__(DailyEarning, session)

    async def exists_for_date(
        self, investment_id: int, earning_date: date
    ) -> bool:
        """Check whether an investment already earned on a date."""
        return await self.exists(
            investment_id=investment_id, earning_date=earning_date
        )

    async def get_user_earnings(
        self, user_id: int, limit: int = 50
    ) -> list[DailyEarning]:
        """
        Get user earnings newest first.

        Args:
            user_id: User ID
            limit: Max number of results

        Returns:
            List of daily earnings
        """
        stmt = (
            select(DailyEarning)
            .where(DailyEarning.user_id == user_id)
            .order_by(DailyEarning.earned_at.desc(), DailyEarning.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
