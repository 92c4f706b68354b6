"""
Referral chain management module.

Walks a user's upline by following ``referred_by`` links.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import PlatformConfig
from capital.models.user import User
from capital.repositories.user_repository import UserRepository


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(
        self, session: AsyncSession, config: PlatformConfig | None = None
    ) -> None:
        """Initialize chain manager."""
        self.session = session
        self.config = config or PlatformConfig()
        self.user_repo = UserRepository(session)

    async def get_referral_chain(
        self, user_id: int, depth: int | None = None
    ) -> list[User]:
        """
        Get the upline of a user.

        Bounded iterative walk: stops when a user has no referrer, when
        ``depth`` levels were collected, or when a user id repeats.

        Args:
            user_id: User whose upline is requested
            depth: Max number of levels (configured referral depth if None)

        Returns:
            List of referrers, index 0 is level 1 (direct referrer)
        """
        max_depth = depth if depth is not None else self.config.referral_depth
        chain: list[User] = []
        visited = {user_id}

        user = await self.user_repo.get_by_id(user_id)
        level = 0
        while user is not None and user.referred_by is not None:
            if level >= max_depth:
                break

            referrer_id = user.referred_by
            if referrer_id in visited:
                logger.warning(
                    "Referral loop detected",
                    extra={
                        "user_id": user_id,
                        "chain_ids": [u.id for u in chain],
                        "repeated_id": referrer_id,
                    },
                )
                break

            referrer = await self.user_repo.get_by_id(referrer_id)
            if referrer is None:
                break

            visited.add(referrer_id)
            chain.append(referrer)
            level += 1
            user = referrer

        logger.debug(
            "Referral chain retrieved",
            extra={
                "user_id": user_id,
                "depth": max_depth,
                "chain_length": len(chain),
            },
        )
        return chain
