"""
Bank repository.

Data access layer for Bank model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.bank import Bank
from capital.repositories.base import BaseRepository


class BankRepository(BaseRepository[Bank]):
    """Bank repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize bank repository."""
        super().__init__(Bank, session)

    async def get_active(self, bank_id: int) -> Bank | None:
        """Get bank by ID if it is active."""
        return await self.get_by(id=bank_id, is_active=True)

    async def list_active(self) -> list[Bank]:
        """
        List active banks ordered by name.

        Returns:
            List of banks
        """
        stmt = (
            select(Bank)
            .where(Bank.is_active == True)  # noqa: E712
            .order_by(Bank.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
