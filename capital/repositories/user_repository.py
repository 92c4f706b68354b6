"""
User repository.

Data access layer for User model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capital.models.user import User
from capital.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_phone(
        self, phone: str, country_code: str
    ) -> User | None:
        """
        Get user by phone number within a country.

        Args:
            phone: Normalized national phone number
            country_code: ISO country code (TG, BJ, ...)

        Returns:
            User or None
        """
        return await self.get_by(phone=phone, country_code=country_code)

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Referral code (stored uppercase)

        Returns:
            User or None
        """
        return await self.get_by(referral_code=referral_code.upper())

    async def get_direct_referrals(
        self, user_ids: list[int]
    ) -> list[User]:
        """
        Get users directly referred by any of the given users.

        Args:
            user_ids: Upline user IDs

        Returns:
            List of referred users ordered by signup time
        """
        if not user_ids:
            return []
        stmt = (
            select(User)
            .where(User.referred_by.in_(user_ids))
            .order_by(User.created_at, User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
