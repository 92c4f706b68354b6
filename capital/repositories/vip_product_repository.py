"""
VIP product repository.

Data access layer for VIPProduct model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.vip_product import VIPProduct
from capital.repositories.base import BaseRepository


class VIPProductRepository(BaseRepository[VIPProduct]):
    """VIP product catalog repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize VIP product repository."""
        super().__init__(VIPProduct, session)

    async def get_active_by_level(self, level: int) -> VIPProduct | None:
        """
        Get active product by VIP level.

        Args:
            level: VIP level

        Returns:
            Product or None
        """
        return await self.get_by(level=level, is_active=True)

    async def list_active(self) -> list[VIPProduct]:
        """
        List active products ordered by level.

        Returns:
            List of products
        """
        stmt = (
            select(VIPProduct)
            .where(VIPProduct.is_active == True)  # noqa: E712
            .order_by(VIPProduct.level)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
