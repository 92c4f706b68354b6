"""
Investment service.

Sells VIP products against the wallet balance and exposes the product
catalog and a user's positions and earnings.
"""

from collections.abc import Iterable
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import (
    DEFAULT_VIP_PRODUCTS,
    PlatformConfig,
    VIPProductSeed,
)
from capital.models.daily_earning import DailyEarning
from capital.models.enums import (
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
    WalletStat,
)
from capital.models.vip_investment import VIPInvestment
from capital.models.vip_product import VIPProduct
from capital.repositories.daily_earning_repository import (
    DailyEarningRepository,
)
from capital.repositories.vip_investment_repository import (
    VIPInvestmentRepository,
)
from capital.repositories.vip_product_repository import VIPProductRepository
from capital.services.base_service import BaseService
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import Clock
from capital.utils.db_decorators import transactional
from capital.utils.exceptions import (
    BelowMinimumError,
    InsufficientFundsError,
    ProductNotFoundError,
)
from capital.utils.formatters import to_money


class InvestmentService(BaseService):
    """VIP product catalog and investment purchases."""

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize investment service."""
        super().__init__(session, config, clock)
        self.product_repo = VIPProductRepository(session)
        self.investment_repo = VIPInvestmentRepository(session)
        self.earning_repo = DailyEarningRepository(session)
        self.ledger = WalletLedger(session, self.config, self.clock)

    @transactional
    async def seed_products(
        self, products: Iterable[VIPProductSeed] = DEFAULT_VIP_PRODUCTS
    ) -> int:
        """
        Insert catalog entries for levels that do not exist yet.

        Existing levels are left untouched.

        Args:
            products: Product definitions

        Returns:
            Number of products created
        """
        created = 0
        for seed in products:
            if await self.product_repo.exists(level=seed.level):
                continue
            await self.product_repo.create(
                level=seed.level,
                name=seed.name,
                min_amount=seed.min_amount,
                daily_return=seed.daily_return,
                duration_days=seed.duration_days,
                color=seed.color,
                is_active=True,
            )
            created += 1

        if created:
            self.logger.info(
                "VIP products seeded", extra={"created": created}
            )
        return created

    async def get_products(self) -> list[VIPProduct]:
        """Get active products ordered by level."""
        return await self.product_repo.list_active()

    async def get_product(self, level: int) -> VIPProduct | None:
        """Get the active product of a level."""
        return await self.product_repo.get_active_by_level(level)

    @transactional
    async def purchase(
        self, user_id: int, level: int, amount: Decimal
    ) -> VIPInvestment:
        """
        Buy a VIP product.

        The daily return is frozen at purchase time as an absolute amount.

        Args:
            user_id: Buying user ID
            level: VIP level
            amount: Principal

        Returns:
            Created active investment

        Raises:
            ProductNotFoundError: If the level has no active product
            BelowMinimumError: If amount is below the product minimum
            InsufficientFundsError: If the balance is below amount
        """
        amount = to_money(amount)

        product = await self.product_repo.get_active_by_level(level)
        if not product:
            raise ProductNotFoundError("VIP product not found")

        if amount < product.min_amount:
            raise BelowMinimumError(
                f"Minimum amount is {self.money(product.min_amount)}",
                minimum=product.min_amount,
            )

        wallet = await self.ledger.get_wallet(user_id, for_update=True)
        if wallet.balance < amount:
            raise InsufficientFundsError(
                available=wallet.balance, requested=amount
            )

        daily_return_amount = to_money(amount * product.daily_return)
        now = self.clock.now()

        investment = await self.investment_repo.create(
            user_id=user_id,
            vip_level=product.level,
            amount=amount,
            daily_return_amount=daily_return_amount,
            purchase_time=now,
            next_earning_time=now
            + timedelta(hours=self.config.earning_interval_hours),
            start_date=now,
            end_date=now + timedelta(days=product.duration_days),
            days_elapsed=0,
            total_earned=Decimal("0"),
            status=InvestmentStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )

        await self.ledger.debit(user_id, amount)
        await self.ledger.record_stat(
            user_id, WalletStat.TOTAL_INVESTED, amount
        )
        await self.ledger.append_transaction(
            user_id=user_id,
            kind=TransactionType.VIP_PURCHASE,
            amount=amount,
            description=f"{product.name} purchase",
            reference_id=investment.id,
            status=TransactionStatus.COMPLETED,
        )

        self.logger.info(
            "VIP investment purchased",
            extra={
                "investment_id": investment.id,
                "user_id": user_id,
                "level": product.level,
                "amount": str(amount),
                "daily_return_amount": str(daily_return_amount),
            },
        )
        return investment

    async def get_user_investments(
        self, user_id: int, status: InvestmentStatus | str | None = None
    ) -> list[VIPInvestment]:
        """Get a user's investments, newest first."""
        value = InvestmentStatus(status).value if status else None
        return await self.investment_repo.get_user_investments(
            user_id, status=value
        )

    async def get_daily_earnings(
        self, user_id: int, limit: int = 50
    ) -> list[DailyEarning]:
        """Get a user's daily earnings, newest first."""
        return await self.earning_repo.get_user_earnings(user_id, limit=limit)
