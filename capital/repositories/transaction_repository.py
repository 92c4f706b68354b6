"""
Transaction repository.

Data access layer for Transaction model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.transaction import Transaction
from capital.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def get_by_reference(
        self, reference_id: int, type: str
    ) -> Transaction | None:
        """
        Get the audit entry paired with a deposit or withdrawal.

        Args:
            reference_id: Deposit / withdrawal ID
            type: Transaction type value

        Returns:
            Transaction or None
        """
        stmt = (
            select(Transaction)
            .where(Transaction.reference_id == reference_id)
            .where(Transaction.type == type)
            .order_by(Transaction.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_transactions(
        self, user_id: int, limit: int = 50
    ) -> list[Transaction]:
        """
        Get user transactions newest first.

        Args:
            user_id: User ID
            limit: Max number of results

        Returns:
            List of transactions
        """
        return await self.find_recent(limit=limit, user_id=user_id)
