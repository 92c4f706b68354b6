"""
Deposit service.

Deposit requests are credited to the wallet only on admin approval. The
approval of a user's first deposit is the single trigger point for
referral commissions.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import PlatformConfig
from capital.models.deposit import Deposit
from capital.models.enums import (
    DEPOSIT_TRANSITIONS,
    DepositStatus,
    TransactionStatus,
    TransactionType,
    check_transition,
)
from capital.repositories.deposit_repository import DepositRepository
from capital.repositories.user_repository import UserRepository
from capital.services.base_service import BaseService
from capital.services.referral.commission_processor import (
    ReferralCommissionProcessor,
)
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import Clock
from capital.utils.db_decorators import transactional
from capital.utils.exceptions import (
    AlreadyProcessedError,
    BelowMinimumError,
    MissingNotesError,
    NotFoundError,
    ValidationError,
)
from capital.utils.formatters import to_money


class DepositService(BaseService):
    """Creates, approves and rejects deposit requests."""

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize deposit service."""
        super().__init__(session, config, clock)
        self.deposit_repo = DepositRepository(session)
        self.user_repo = UserRepository(session)
        self.ledger = WalletLedger(session, self.config, self.clock)
        self.referral_processor = ReferralCommissionProcessor(
            session, self.config, self.clock
        )

    @transactional
    async def create_deposit(
        self,
        user_id: int,
        amount: Decimal,
        payment_method: str,
        account_number: str,
        transaction_id: str | None = None,
        transfer_id: str | None = None,
        receipt_url: str | None = None,
    ) -> Deposit:
        """
        Create a pending deposit request.

        The wallet is not credited until approval; a pending audit
        transaction is recorded.

        Args:
            user_id: Depositing user ID
            amount: Requested amount
            payment_method: Mobile money operator or bank
            account_number: Sender account reference
            transaction_id: Optional operator transaction ID
            transfer_id: Optional transfer reference
            receipt_url: Optional receipt upload URL

        Returns:
            Created deposit

        Raises:
            BelowMinimumError: If amount is below the minimum deposit
            ValidationError: If payment details are missing
            NotFoundError: If the user does not exist
        """
        amount = to_money(amount)
        if amount < self.config.min_deposit:
            self.logger.warning(
                "Deposit below minimum",
                extra={"user_id": user_id, "amount": str(amount)},
            )
            raise BelowMinimumError(
                f"Minimum deposit is {self.money(self.config.min_deposit)}",
                minimum=self.config.min_deposit,
            )
        if not payment_method or not account_number:
            raise ValidationError("Payment method and account are required")

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        # Held until commit so only one concurrent request sees no prior deposit
        await self.ledger.get_wallet(user_id, for_update=True)
        is_first = not await self.deposit_repo.has_open_or_approved(user_id)

        now = self.clock.now()
        deposit = await self.deposit_repo.create(
            user_id=user_id,
            amount=amount,
            payment_method=payment_method,
            account_number=account_number,
            transaction_id=transaction_id,
            transfer_id=transfer_id,
            receipt_url=receipt_url,
            status=DepositStatus.PENDING.value,
            is_first_deposit=is_first,
            created_at=now,
            updated_at=now,
        )

        await self.ledger.append_transaction(
            user_id=user_id,
            kind=TransactionType.DEPOSIT,
            amount=amount,
            description=f"Deposit request - {payment_method}",
            reference_id=deposit.id,
            status=TransactionStatus.PENDING,
        )

        self.logger.info(
            "Deposit request created",
            extra={
                "deposit_id": deposit.id,
                "user_id": user_id,
                "amount": str(amount),
                "is_first_deposit": is_first,
            },
        )
        return deposit

    @transactional
    async def approve_deposit(
        self, deposit_id: int, admin_id: int, notes: str | None = None
    ) -> Deposit:
        """
        Approve a pending deposit and credit the wallet.

        First deposits also pay referral commissions in the same
        transaction.

        Args:
            deposit_id: Deposit ID
            admin_id: Processing admin ID
            notes: Optional admin notes

        Returns:
            Approved deposit

        Raises:
            NotFoundError: If the deposit does not exist
            AlreadyProcessedError: If the deposit is not pending
        """
        deposit = await self._get_pending(deposit_id)
        check_transition(
            DEPOSIT_TRANSITIONS, deposit.status, DepositStatus.APPROVED
        )

        deposit.status = DepositStatus.APPROVED.value
        deposit.processed_by = admin_id
        deposit.processed_at = self.clock.now()
        deposit.admin_notes = notes
        deposit.updated_at = deposit.processed_at

        await self.ledger.credit(deposit.user_id, deposit.amount)
        await self.ledger.set_transaction_status(
            deposit.id, TransactionType.DEPOSIT, TransactionStatus.COMPLETED
        )

        if deposit.is_first_deposit:
            await self.referral_processor.process_referral_commissions(
                user_id=deposit.user_id,
                deposit_id=deposit.id,
                deposit_amount=deposit.amount,
            )

        self.logger.info(
            "Deposit approved",
            extra={
                "deposit_id": deposit.id,
                "user_id": deposit.user_id,
                "amount": str(deposit.amount),
                "admin_id": admin_id,
                "is_first_deposit": deposit.is_first_deposit,
            },
        )
        return deposit

    @transactional
    async def reject_deposit(
        self, deposit_id: int, admin_id: int, notes: str
    ) -> Deposit:
        """
        Reject a pending deposit. No balance effect.

        Args:
            deposit_id: Deposit ID
            admin_id: Processing admin ID
            notes: Rejection reason (required)

        Returns:
            Rejected deposit

        Raises:
            MissingNotesError: If notes are empty
            NotFoundError: If the deposit does not exist
            AlreadyProcessedError: If the deposit is not pending
        """
        if not notes or not notes.strip():
            raise MissingNotesError("Rejection reason is required")

        deposit = await self._get_pending(deposit_id)
        check_transition(
            DEPOSIT_TRANSITIONS, deposit.status, DepositStatus.REJECTED
        )

        deposit.status = DepositStatus.REJECTED.value
        deposit.processed_by = admin_id
        deposit.processed_at = self.clock.now()
        deposit.admin_notes = notes
        deposit.updated_at = deposit.processed_at
        await self.session.flush()

        await self.ledger.set_transaction_status(
            deposit.id, TransactionType.DEPOSIT, TransactionStatus.REJECTED
        )

        self.logger.info(
            "Deposit rejected",
            extra={
                "deposit_id": deposit.id,
                "user_id": deposit.user_id,
                "admin_id": admin_id,
            },
        )
        return deposit

    async def get_user_deposits(
        self, user_id: int, limit: int = 50
    ) -> list[Deposit]:
        """Get a user's deposits, newest first."""
        return await self.deposit_repo.get_user_deposits(user_id, limit=limit)

    async def list_deposits(
        self, status: DepositStatus | str | None = None, limit: int = 100
    ) -> list[Deposit]:
        """
        List deposits for admin review, newest first.

        Args:
            status: Optional status filter
            limit: Max number of results

        Returns:
            List of deposits
        """
        value = DepositStatus(status).value if status else None
        return await self.deposit_repo.list_by_status(value, limit=limit)

    async def _get_pending(self, deposit_id: int) -> Deposit:
        deposit = await self.deposit_repo.get_by_id(deposit_id, for_update=True)
        if not deposit:
            raise NotFoundError(f"Deposit {deposit_id} not found")
        if deposit.status != DepositStatus.PENDING.value:
            raise AlreadyProcessedError(
                f"Deposit is already {deposit.status}",
                current_status=deposit.status,
            )
        return deposit
