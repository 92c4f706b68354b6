"""
Referral commission repository.

Data access layer for ReferralCommission model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.enums import CommissionStatus
from capital.models.referral_commission import ReferralCommission
from capital.repositories.base import BaseRepository


class ReferralCommissionRepository(BaseRepository[ReferralCommission]):
    """Referral commission repository with reporting queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral commission repository."""
        super().__init__(ReferralCommission, session)

    async def exists_for_deposit(self, deposit_id: int) -> bool:
        """Check whether any commission was recorded for a deposit."""
        return await self.exists(deposit_id=deposit_id)

    async def get_by_referrer(
        self, referrer_id: int, limit: int = 50
    ) -> list[ReferralCommission]:
        """
        Get commissions earned by a referrer, newest first.

        Args:
            referrer_id: Referrer user ID
            limit: Max number of results

        Returns:
            List of commissions
        """
        return await self.find_recent(limit=limit, referrer_id=referrer_id)

    async def get_stats(self, referrer_id: int) -> dict:
        """
        Aggregate paid commissions of a referrer.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Dict with unique_referred, total_paid and level_counts
        """
        base = (
            select(ReferralCommission)
            .where(ReferralCommission.referrer_id == referrer_id)
            .where(
                ReferralCommission.status == CommissionStatus.PAID.value
            )
            .subquery()
        )

        totals_stmt = select(
            func.count(func.distinct(base.c.referred_id)),
            func.coalesce(func.sum(base.c.amount), 0),
        )
        totals = (await self.session.execute(totals_stmt)).one()

        levels_stmt = (
            select(base.c.level, func.count(base.c.id))
            .group_by(base.c.level)
        )
        rows = (await self.session.execute(levels_stmt)).all()

        # Build result dict with all levels (default to 0)
        level_counts = {1: 0, 2: 0, 3: 0}
        for level, count in rows:
            level_counts[level] = count

        return {
            "unique_referred": totals[0] or 0,
            "total_paid": Decimal(str(totals[1] or 0)),
            "level_counts": level_counts,
        }
