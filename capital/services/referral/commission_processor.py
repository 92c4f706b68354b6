"""
Referral commission processor.

Pays tiered commissions to the upline of a user on that user's first
deposit. Runs inside the deposit approval transaction; it only flushes.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import PlatformConfig
from capital.models.enums import (
    COMMISSION_TRANSITIONS,
    CommissionStatus,
    TransactionStatus,
    TransactionType,
    WalletStat,
    check_transition,
)
from capital.models.referral_commission import ReferralCommission
from capital.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from capital.services.referral.chain_manager import ReferralChainManager
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import Clock, SystemClock
from capital.utils.formatters import to_money


@dataclass
class CommissionResult:
    """Result of commission processing for one deposit."""

    deposit_id: int
    total_paid: Decimal = Decimal("0")
    commissions: list[ReferralCommission] = field(default_factory=list)
    skipped_levels: list[int] = field(default_factory=list)
    already_processed: bool = False

    @property
    def commissions_count(self) -> int:
        return len(self.commissions)


class ReferralCommissionProcessor:
    """Computes and pays referral commissions through the wallet ledger."""

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize commission processor.

        Args:
            session: Async database session
            config: Platform configuration (referral rates and depth)
            clock: Time source
        """
        self.session = session
        self.config = config or PlatformConfig()
        self.clock = clock or SystemClock()
        self.commission_repo = ReferralCommissionRepository(session)
        self.chain_manager = ReferralChainManager(session, self.config)
        self.ledger = WalletLedger(session, self.config, self.clock)

    async def process_referral_commissions(
        self, user_id: int, deposit_id: int, deposit_amount: Decimal
    ) -> CommissionResult:
        """
        Pay commissions to the upline of a depositing user.

        Each level present in the chain earns ``deposit_amount * rate``.
        Inactive referrers forfeit their level but the walk continues.
        Idempotent on ``deposit_id``.

        Args:
            user_id: User who made the deposit
            deposit_id: Qualifying first deposit ID
            deposit_amount: Approved deposit amount

        Returns:
            CommissionResult with created commissions and total paid
        """
        result = CommissionResult(deposit_id=deposit_id)

        if await self.commission_repo.exists_for_deposit(deposit_id):
            logger.warning(
                "Referral commissions already processed for deposit",
                extra={"deposit_id": deposit_id, "user_id": user_id},
            )
            result.already_processed = True
            return result

        chain = await self.chain_manager.get_referral_chain(user_id)
        if not chain:
            logger.debug(
                "No referrers found for user",
                extra={"user_id": user_id, "deposit_id": deposit_id},
            )
            return result

        for level, referrer in enumerate(chain, start=1):
            if not referrer.is_active:
                logger.warning(
                    "Skipping inactive referrer",
                    extra={
                        "referrer_id": referrer.id,
                        "level": level,
                        "deposit_id": deposit_id,
                    },
                )
                result.skipped_levels.append(level)
                continue

            rate = self.config.referral_rate(level)
            amount = to_money(deposit_amount * rate)
            if amount <= 0:
                continue

            commission = await self.commission_repo.create(
                referrer_id=referrer.id,
                referred_id=user_id,
                deposit_id=deposit_id,
                level=level,
                rate=rate,
                amount=amount,
                status=CommissionStatus.PENDING.value,
                created_at=self.clock.now(),
            )
            commission = await self.pay_commission(commission.id)

            result.commissions.append(commission)
            result.total_paid += amount

        logger.info(
            "Referral commissions processed",
            extra={
                "user_id": user_id,
                "deposit_id": deposit_id,
                "total_paid": str(result.total_paid),
                "commissions_count": result.commissions_count,
                "skipped_levels": result.skipped_levels,
            },
        )
        return result

    async def pay_commission(
        self, commission_id: int
    ) -> ReferralCommission | None:
        """
        Pay a pending commission to the referrer's wallet.

        No-op for a missing or already paid commission.

        Args:
            commission_id: Commission ID

        Returns:
            The commission (paid), or None if it does not exist
        """
        commission = await self.commission_repo.get_by_id(
            commission_id, for_update=True
        )
        if commission is None:
            logger.warning(
                "Commission not found",
                extra={"commission_id": commission_id},
            )
            return None
        if commission.status == CommissionStatus.PAID.value:
            return commission

        check_transition(
            COMMISSION_TRANSITIONS, commission.status, CommissionStatus.PAID
        )

        await self.ledger.credit(commission.referrer_id, commission.amount)
        await self.ledger.record_stat(
            commission.referrer_id, WalletStat.TOTAL_EARNED, commission.amount
        )
        await self.ledger.append_transaction(
            user_id=commission.referrer_id,
            kind=TransactionType.COMMISSION,
            amount=commission.amount,
            description=f"Referral commission level {commission.level}",
            reference_id=commission.id,
            status=TransactionStatus.COMPLETED,
        )

        commission.status = CommissionStatus.PAID.value
        commission.paid_at = self.clock.now()
        await self.session.flush()

        logger.info(
            "Referral commission paid",
            extra={
                "commission_id": commission.id,
                "referrer_id": commission.referrer_id,
                "referred_id": commission.referred_id,
                "level": commission.level,
                "rate": str(commission.rate),
                "amount": str(commission.amount),
            },
        )
        return commission
