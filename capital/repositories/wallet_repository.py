"""
Wallet repository.

Data access layer for Wallet model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.wallet import Wallet
from capital.repositories.base import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """Wallet repository with row locking support."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize wallet repository."""
        super().__init__(Wallet, session)

    async def get_by_user_id(
        self, user_id: int, for_update: bool = False
    ) -> Wallet | None:
        """
        Get wallet by owner.

        Args:
            user_id: User ID
            for_update: Lock the row (serializes balance mutations per user)

        Returns:
            Wallet or None
        """
        stmt = (
            select(Wallet)
            .where(Wallet.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
