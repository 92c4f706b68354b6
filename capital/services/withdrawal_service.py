"""
Withdrawal service.

Hold-then-settle: the gross amount is debited when the request is
created, approval only finalizes it and rejection refunds it.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import PlatformConfig
from capital.models.bank import Bank
from capital.models.enums import (
    WITHDRAWAL_TRANSITIONS,
    TransactionStatus,
    TransactionType,
    WalletStat,
    WithdrawalStatus,
    check_transition,
)
from capital.models.withdrawal import Withdrawal
from capital.repositories.bank_repository import BankRepository
from capital.repositories.withdrawal_repository import WithdrawalRepository
from capital.services.base_service import BaseService
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import Clock, day_bounds
from capital.utils.db_decorators import transactional
from capital.utils.exceptions import (
    AlreadyProcessedError,
    BelowMinimumError,
    DailyLimitExceededError,
    InsufficientFundsError,
    InvalidBankError,
    MissingNotesError,
    NotFoundError,
    ValidationError,
)
from capital.utils.formatters import to_money


class WithdrawalService(BaseService):
    """Creates, approves and rejects withdrawal requests."""

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize withdrawal service."""
        super().__init__(session, config, clock)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.bank_repo = BankRepository(session)
        self.ledger = WalletLedger(session, self.config, self.clock)

    def calculate_fees(self, amount: Decimal) -> tuple[Decimal, Decimal]:
        """
        Split a gross amount into fee and net payout.

        Args:
            amount: Gross withdrawal amount

        Returns:
            Tuple of (fees, net_amount)
        """
        amount = to_money(amount)
        fees = to_money(amount * self.config.withdrawal_fee_rate)
        return fees, amount - fees

    @transactional
    async def create_withdrawal(
        self,
        user_id: int,
        amount: Decimal,
        bank_id: int,
        account_number: str,
        account_holder_name: str,
    ) -> Withdrawal:
        """
        Create a withdrawal request and hold the gross amount.

        Args:
            user_id: Requesting user ID
            amount: Gross amount to withdraw
            bank_id: Destination bank ID
            account_number: Destination account
            account_holder_name: Destination account holder

        Returns:
            Created withdrawal

        Raises:
            BelowMinimumError: If amount is below the minimum withdrawal
            DailyLimitExceededError: If today's withdrawal count is reached
            InsufficientFundsError: If the balance is below amount
            InvalidBankError: If the bank is unknown or inactive
        """
        amount = to_money(amount)
        if amount < self.config.min_withdrawal:
            self.logger.warning(
                "Withdrawal below minimum",
                extra={"user_id": user_id, "amount": str(amount)},
            )
            raise BelowMinimumError(
                f"Minimum withdrawal is {self.money(self.config.min_withdrawal)}",
                minimum=self.config.min_withdrawal,
            )
        if not account_number or not account_holder_name:
            raise ValidationError("Account number and holder are required")

        # Wallet lock is held before the daily count so requests from
        # one user are counted one at a time
        wallet = await self.ledger.get_wallet(user_id, for_update=True)

        now = self.clock.now()
        day_start, day_end = day_bounds(now, self.config.timezone)
        today_count = await self.withdrawal_repo.count_in_window(
            user_id, day_start, day_end
        )
        if today_count >= self.config.max_daily_withdrawals:
            self.logger.warning(
                "Daily withdrawal limit reached",
                extra={"user_id": user_id, "today_count": today_count},
            )
            raise DailyLimitExceededError(
                f"Maximum {self.config.max_daily_withdrawals} "
                f"withdrawals per day",
                limit=self.config.max_daily_withdrawals,
            )

        if wallet.balance < amount:
            raise InsufficientFundsError(
                available=wallet.balance, requested=amount
            )

        bank = await self.bank_repo.get_active(bank_id)
        if not bank:
            raise InvalidBankError("Invalid bank selected")

        fees, net_amount = self.calculate_fees(amount)

        withdrawal = await self.withdrawal_repo.create(
            user_id=user_id,
            amount=amount,
            fees=fees,
            net_amount=net_amount,
            bank_id=bank.id,
            bank_name=bank.name,
            account_number=account_number,
            account_holder_name=account_holder_name,
            status=WithdrawalStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        await self.ledger.debit(user_id, amount)
        await self.ledger.record_stat(
            user_id, WalletStat.TOTAL_WITHDRAWN, amount
        )
        await self.ledger.append_transaction(
            user_id=user_id,
            kind=TransactionType.WITHDRAWAL,
            amount=amount,
            description=f"Withdrawal request - {bank.name}",
            reference_id=withdrawal.id,
            status=TransactionStatus.PENDING,
        )

        self.logger.info(
            "Withdrawal request created",
            extra={
                "withdrawal_id": withdrawal.id,
                "user_id": user_id,
                "amount": str(amount),
                "fees": str(fees),
                "net_amount": str(net_amount),
            },
        )
        return withdrawal

    @transactional
    async def approve_withdrawal(
        self, withdrawal_id: int, admin_id: int, notes: str | None = None
    ) -> Withdrawal:
        """
        Mark a pending withdrawal as paid out.

        No balance change: the amount was held at creation.

        Args:
            withdrawal_id: Withdrawal ID
            admin_id: Processing admin ID
            notes: Optional admin notes

        Returns:
            Completed withdrawal

        Raises:
            NotFoundError: If the withdrawal does not exist
            AlreadyProcessedError: If the withdrawal is not pending
        """
        withdrawal = await self._get_pending(withdrawal_id)
        check_transition(
            WITHDRAWAL_TRANSITIONS,
            withdrawal.status,
            WithdrawalStatus.COMPLETED,
        )

        withdrawal.status = WithdrawalStatus.COMPLETED.value
        withdrawal.processed_by = admin_id
        withdrawal.processed_at = self.clock.now()
        withdrawal.admin_notes = notes
        withdrawal.updated_at = withdrawal.processed_at
        await self.session.flush()

        await self.ledger.set_transaction_status(
            withdrawal.id,
            TransactionType.WITHDRAWAL,
            TransactionStatus.COMPLETED,
        )

        self.logger.info(
            "Withdrawal approved",
            extra={
                "withdrawal_id": withdrawal.id,
                "user_id": withdrawal.user_id,
                "net_amount": str(withdrawal.net_amount),
                "admin_id": admin_id,
            },
        )
        return withdrawal

    @transactional
    async def reject_withdrawal(
        self, withdrawal_id: int, admin_id: int, notes: str
    ) -> Withdrawal:
        """
        Reject a pending withdrawal and refund the held amount.

        Args:
            withdrawal_id: Withdrawal ID
            admin_id: Processing admin ID
            notes: Rejection reason (required)

        Returns:
            Rejected withdrawal

        Raises:
            MissingNotesError: If notes are empty
            NotFoundError: If the withdrawal does not exist
            AlreadyProcessedError: If the withdrawal is not pending
        """
        if not notes or not notes.strip():
            raise MissingNotesError("Rejection reason is required")

        withdrawal = await self._get_pending(withdrawal_id)
        check_transition(
            WITHDRAWAL_TRANSITIONS,
            withdrawal.status,
            WithdrawalStatus.REJECTED,
        )

        await self.ledger.credit(withdrawal.user_id, withdrawal.amount)
        await self.ledger.record_stat(
            withdrawal.user_id,
            WalletStat.TOTAL_WITHDRAWN,
            -withdrawal.amount,
        )

        withdrawal.status = WithdrawalStatus.REJECTED.value
        withdrawal.processed_by = admin_id
        withdrawal.processed_at = self.clock.now()
        withdrawal.admin_notes = notes
        withdrawal.updated_at = withdrawal.processed_at
        await self.session.flush()

        await self.ledger.set_transaction_status(
            withdrawal.id,
            TransactionType.WITHDRAWAL,
            TransactionStatus.REJECTED,
        )

        self.logger.info(
            "Withdrawal rejected and refunded",
            extra={
                "withdrawal_id": withdrawal.id,
                "user_id": withdrawal.user_id,
                "amount": str(withdrawal.amount),
                "admin_id": admin_id,
            },
        )
        return withdrawal

    async def get_banks(self) -> list[Bank]:
        """Get active banks ordered by name."""
        return await self.bank_repo.list_active()

    async def get_user_withdrawals(
        self, user_id: int, limit: int = 50
    ) -> list[Withdrawal]:
        """Get a user's withdrawals, newest first."""
        return await self.withdrawal_repo.get_user_withdrawals(
            user_id, limit=limit
        )

    async def list_withdrawals(
        self, status: WithdrawalStatus | str | None = None, limit: int = 100
    ) -> list[Withdrawal]:
        """List withdrawals for admin review, newest first."""
        value = WithdrawalStatus(status).value if status else None
        return await self.withdrawal_repo.list_by_status(value, limit=limit)

    async def _get_pending(self, withdrawal_id: int) -> Withdrawal:
        withdrawal = await self.withdrawal_repo.get_by_id(
            withdrawal_id, for_update=True
        )
        if not withdrawal:
            raise NotFoundError(f"Withdrawal {withdrawal_id} not found")
        if withdrawal.status != WithdrawalStatus.PENDING.value:
            raise AlreadyProcessedError(
                f"Withdrawal is already {withdrawal.status}",
                current_status=withdrawal.status,
            )
        return withdrawal
