"""
VIP investment repository.

Data access layer for VIPInvestment model.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.enums import InvestmentStatus
from capital.models.vip_investment import VIPInvestment
from capital.repositories.base import BaseRepository


class VIPInvestmentRepository(BaseRepository[VIPInvestment]):
    """VIP investment repository with scheduler queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize VIP investment repository."""
        super().__init__(VIPInvestment, session)

    async def get_due_ids(self, now: datetime) -> list[int]:
        """
        Get IDs of active investments whose next earning is due.

        Selects ``status = active``, ``next_earning_time <= now`` and
        ``end_date >= now``, oldest due first.

        Args:
            now: Current time

        Returns:
            List of investment IDs
        """
        stmt = (
            select(VIPInvestment.id)
            .where(VIPInvestment.status == InvestmentStatus.ACTIVE.value)
            .where(VIPInvestment.next_earning_time <= now)
            .where(VIPInvestment.end_date >= now)
            .order_by(VIPInvestment.next_earning_time, VIPInvestment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_investments(
        self, user_id: int, status: str | None = None
    ) -> list[VIPInvestment]:
        """
        Get user investments newest first.

        Args:
            user_id: User ID
            status: Optional status filter

        Returns:
            List of investments
        """
        stmt = select(VIPInvestment).where(VIPInvestment.user_id == user_id)
        if status:
            stmt = stmt.where(VIPInvestment.status == status)
        stmt = stmt.order_by(
            VIPInvestment.purchase_time.desc(), VIPInvestment.id.desc()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_matured_ids(self, now: datetime) -> list[int]:
        """
        Get IDs of investments still active after their end date.

        Args:
            now: Current time

        Returns:
            List of investment IDs
        """
        stmt = (
            select(VIPInvestment.id)
            .where(VIPInvestment.status == InvestmentStatus.ACTIVE.value)
            .where(VIPInvestment.end_date < now)
            .order_by(VIPInvestment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
