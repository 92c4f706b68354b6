"""
Deposit repository.

Data access layer for Deposit model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.deposit import Deposit
from capital.models.enums import DepositStatus
from capital.repositories.base import BaseRepository


class DepositRepository(BaseRepository[Deposit]):
    """Deposit repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize deposit repository."""
        super().__init__(Deposit, session)

    async def has_open_or_approved(self, user_id: int) -> bool:
        """
        Check whether the user has a deposit that is pending or approved.

        Args:
            user_id: User ID

        Returns:
            True if such a deposit exists
        """
        stmt = (
            select(Deposit.id)
            .where(Deposit.user_id == user_id)
            .where(
                Deposit.status.in_(
                    [
                        DepositStatus.PENDING.value,
                        DepositStatus.APPROVED.value,
                    ]
                )
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_user_deposits(
        self, user_id: int, limit: int = 50
    ) -> list[Deposit]:
        """
        Get user deposits newest first.

        Args:
            user_id: User ID
            limit: Max number of results

        Returns:
            List of deposits
        """
        return await self.find_recent(limit=limit, user_id=user_id)

    async def list_by_status(
        self, status: str | None = None, limit: int = 100
    ) -> list[Deposit]:
        """
        List deposits newest first, optionally filtered by status.

        Args:
            status: Optional status filter
            limit: Max number of results

        Returns:
            List of deposits
        """
        if status:
            return await self.find_recent(limit=limit, status=status)
        return await self.find_recent(limit=limit)
