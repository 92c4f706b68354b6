"""
Referral statistics module.

Read-only reporting over commissions and the referral tree.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import REFERRAL_DEPTH
from capital.models.referral_commission import ReferralCommission
from capital.models.user import User
from capital.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from capital.repositories.user_repository import UserRepository


class ReferralStatisticsManager:
    """Manages referral statistics."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize statistics manager."""
        self.session = session
        self.commission_repo = ReferralCommissionRepository(session)
        self.user_repo = UserRepository(session)

    async def get_user_commissions(
        self, user_id: int, limit: int = 50
    ) -> list[ReferralCommission]:
        """Get commissions earned by a user, newest first."""
        return await self.commission_repo.get_by_referrer(user_id, limit=limit)

    async def get_referral_stats(self, user_id: int) -> dict:
        """
        Get referral statistics for user.

        Args:
            user_id: Referrer user ID

        Returns:
            Dict with unique_referred, total_paid and level_counts
        """
        return await self.commission_repo.get_stats(user_id)

    async def get_referral_tree(
        self, user_id: int, max_level: int = REFERRAL_DEPTH
    ) -> dict[int, list[User]]:
        """
        Get the downline of a user grouped by level.

        Args:
            user_id: Root user ID
            max_level: Deepest level to return

        Returns:
            Dict mapping level (1..max_level) to referred users
        """
        tree: dict[int, list[User]] = {}
        visited = {user_id}
        frontier = [user_id]

        for level in range(1, max_level + 1):
            users = await self.user_repo.get_direct_referrals(frontier)
            users = [u for u in users if u.id not in visited]
            if not users:
                break
            tree[level] = users
            visited.update(u.id for u in users)
            frontier = [u.id for u in users]

        return tree
