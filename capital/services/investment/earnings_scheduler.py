"""
Earnings scheduler.

Advances every due active investment by one earning. Each investment is
processed in its own session and transaction so one failure never
aborts the rest of the batch.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from enum import StrEnum

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from capital.config.platform import PlatformConfig
from capital.models.enums import (
    INVESTMENT_TRANSITIONS,
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
    WalletStat,
    check_transition,
)
from capital.models.vip_investment import VIPInvestment
from capital.repositories.daily_earning_repository import (
    DailyEarningRepository,
)
from capital.repositories.vip_investment_repository import (
    VIPInvestmentRepository,
)
from capital.services.base_service import log_operation
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import Clock, SystemClock, local_date


class EarningOutcome(StrEnum):
    """What happened to one investment during a tick."""

    PAID = "paid"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    COMPLETED = "completed"
    NOOP = "noop"


@dataclass
class EarningsRunResult:
    """Outcome of one scheduler tick."""

    processed: int = 0
    paid: int = 0
    skipped_duplicate: int = 0
    completed: int = 0
    failed: int = 0
    total_paid: Decimal = Decimal("0")

    def record(self, outcome: EarningOutcome, amount: Decimal) -> None:
        if outcome == EarningOutcome.PAID:
            self.paid += 1
            self.total_paid += amount
        elif outcome == EarningOutcome.SKIPPED_DUPLICATE:
            self.skipped_duplicate += 1
        elif outcome == EarningOutcome.COMPLETED:
            self.completed += 1

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "paid": self.paid,
            "skipped_duplicate": self.skipped_duplicate,
            "completed": self.completed,
            "failed": self.failed,
            "total_paid": str(self.total_paid),
        }


Handler = Callable[
    [AsyncSession, int], Awaitable[tuple[EarningOutcome, Decimal]]
]


class EarningsScheduler:
    """Periodic daily earnings processor."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize earnings scheduler.

        Args:
            session_maker: Factory for per-investment sessions
            config: Platform configuration
            clock: Time source
        """
        self.session_maker = session_maker
        self.config = config or PlatformConfig()
        self.clock = clock or SystemClock()
        self.interval = timedelta(hours=self.config.earning_interval_hours)
        self.logger = logger.bind(service=self.__class__.__name__)

    @log_operation
    async def process_daily_earnings(self) -> EarningsRunResult:
        """
        Run one scheduler tick.

        Selects active investments with ``next_earning_time <= now`` and
        ``end_date >= now`` and pays each one at most once per calendar
        date. Active investments whose end date already passed are
        marked completed.

        Returns:
            EarningsRunResult with per-outcome counters
        """
        result = EarningsRunResult()
        now = self.clock.now()

        async with self.session_maker() as session:
            repo = VIPInvestmentRepository(session)
            matured_ids = await repo.get_matured_ids(now)
            due_ids = await repo.get_due_ids(now)

        for investment_id in matured_ids:
            await self._run_isolated(investment_id, result, self._complete)

        for investment_id in due_ids:
            await self._run_isolated(investment_id, result, self._process)

        logger.info(
            "Daily earnings tick finished",
            extra=result.as_dict(),
        )
        return result

    async def _run_isolated(
        self,
        investment_id: int,
        result: EarningsRunResult,
        handler: Handler,
    ) -> None:
        result.processed += 1
        async with self.session_maker() as session:
            try:
                outcome, amount = await handler(session, investment_id)
                await session.commit()
            except Exception as e:
                await session.rollback()
                result.failed += 1
                logger.exception(
                    "Failed to process investment",
                    extra={"investment_id": investment_id, "error": str(e)},
                )
                return
        result.record(outcome, amount)

    async def _complete(
        self, session: AsyncSession, investment_id: int
    ) -> tuple[EarningOutcome, Decimal]:
        repo = VIPInvestmentRepository(session)
        investment = await repo.get_by_id(investment_id, for_update=True)
        if investment is None or not self._is_active(investment):
            return EarningOutcome.NOOP, Decimal("0")
        self._mark_completed(investment)
        await session.flush()
        return EarningOutcome.COMPLETED, Decimal("0")

    async def _process(
        self, session: AsyncSession, investment_id: int
    ) -> tuple[EarningOutcome, Decimal]:
        investment_repo = VIPInvestmentRepository(session)
        earning_repo = DailyEarningRepository(session)
        ledger = WalletLedger(session, self.config, self.clock)

        investment = await investment_repo.get_by_id(
            investment_id, for_update=True
        )
        if investment is None or not self._is_active(investment):
            return EarningOutcome.NOOP, Decimal("0")

        now = self.clock.now()

        # Matured since selection: stop earning
        if investment.is_matured(now):
            self._mark_completed(investment)
            await session.flush()
            return EarningOutcome.COMPLETED, Decimal("0")

        if investment.next_earning_time > now:
            return EarningOutcome.NOOP, Decimal("0")

        today = local_date(now, self.config.timezone)
        if await earning_repo.exists_for_date(investment.id, today):
            investment.next_earning_time = (
                investment.next_earning_time + self.interval
            )
            investment.updated_at = now
            await session.flush()
            logger.debug(
                "Earning already recorded today, schedule rolled forward",
                extra={
                    "investment_id": investment.id,
                    "earning_date": today.isoformat(),
                },
            )
            return EarningOutcome.SKIPPED_DUPLICATE, Decimal("0")

        amount = investment.daily_return_amount
        await earning_repo.create(
            user_id=investment.user_id,
            investment_id=investment.id,
            amount=amount,
            earning_date=today,
            earned_at=now,
        )

        await ledger.credit(investment.user_id, amount)
        await ledger.record_stat(
            investment.user_id, WalletStat.TOTAL_EARNED, amount
        )
        await ledger.append_transaction(
            user_id=investment.user_id,
            kind=TransactionType.EARNING,
            amount=amount,
            description=f"Daily VIP earning - Investment #{investment.id}",
            reference_id=investment.id,
            status=TransactionStatus.COMPLETED,
        )

        investment.days_elapsed += 1
        investment.total_earned = investment.total_earned + amount
        investment.next_earning_time = (
            investment.next_earning_time + self.interval
        )
        investment.updated_at = now
        await session.flush()

        logger.info(
            "Daily earning paid",
            extra={
                "investment_id": investment.id,
                "user_id": investment.user_id,
                "amount": str(amount),
                "days_elapsed": investment.days_elapsed,
            },
        )
        return EarningOutcome.PAID, amount

    @staticmethod
    def _is_active(investment: VIPInvestment) -> bool:
        return investment.status == InvestmentStatus.ACTIVE.value

    def _mark_completed(self, investment: VIPInvestment) -> None:
        check_transition(
            INVESTMENT_TRANSITIONS,
            investment.status,
            InvestmentStatus.COMPLETED,
        )
        investment.status = InvestmentStatus.COMPLETED.value
        investment.updated_at = self.clock.now()
        logger.info(
            "VIP investment completed",
            extra={
                "investment_id": investment.id,
                "user_id": investment.user_id,
                "days_elapsed": investment.days_elapsed,
                "total_earned": str(investment.total_earned),
            },
        )
