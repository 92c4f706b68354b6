"""
Wallet ledger.

The single choke-point through which every balance mutation passes.
Ledger primitives only flush; the calling manager operation owns the
database transaction, so a balance change and its audit entry commit or
roll back together.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import PlatformConfig
from capital.models.enums import (
    TRANSACTION_TRANSITIONS,
    TransactionStatus,
    TransactionType,
    WalletStat,
    check_transition,
)
from capital.models.transaction import Transaction
from capital.models.wallet import Wallet
from capital.repositories.transaction_repository import (
    TransactionRepository,
)
from capital.repositories.wallet_repository import WalletRepository
from capital.services.base_service import BaseService
from capital.utils.datetime_utils import Clock
from capital.utils.exceptions import (
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from capital.utils.formatters import to_money


class WalletLedger(BaseService):
    """Owns wallet balances, running totals and the transaction audit log."""

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize wallet ledger.

        Args:
            session: Async database session
            config: Platform configuration
            clock: Time source
        """
        super().__init__(session, config, clock)
        self.wallet_repo = WalletRepository(session)
        self.transaction_repo = TransactionRepository(session)

    async def create_wallet(self, user_id: int) -> Wallet:
        """
        Create an empty wallet for a new user.

        Args:
            user_id: Owner user ID

        Returns:
            Created wallet
        """
        now = self.clock.now()
        return await self.wallet_repo.create(
            user_id=user_id,
            balance=Decimal("0"),
            total_invested=Decimal("0"),
            total_earned=Decimal("0"),
            total_withdrawn=Decimal("0"),
            created_at=now,
            updated_at=now,
        )

    async def get_wallet(
        self, user_id: int, for_update: bool = False
    ) -> Wallet:
        """
        Get a user's wallet.

        Args:
            user_id: Owner user ID
            for_update: Lock the wallet row until the transaction ends

        Returns:
            Wallet

        Raises:
            NotFoundError: If the user has no wallet
        """
        wallet = await self.wallet_repo.get_by_user_id(
            user_id, for_update=for_update
        )
        if not wallet:
            raise NotFoundError(f"Wallet not found for user {user_id}")
        return wallet

    async def credit(self, user_id: int, amount: Decimal) -> Wallet:
        """
        Increase a wallet balance.

        Args:
            user_id: Owner user ID
            amount: Positive amount to add

        Returns:
            Updated wallet
        """
        amount = self._positive(amount)
        wallet = await self.get_wallet(user_id, for_update=True)

        balance_before = wallet.balance
        wallet.balance = to_money(wallet.balance + amount)
        wallet.updated_at = self.clock.now()
        await self.session.flush()

        self.logger.info(
            "Wallet credited",
            extra={
                "user_id": user_id,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(wallet.balance),
            },
        )
        return wallet

    async def debit(self, user_id: int, amount: Decimal) -> Wallet:
        """
        Decrease a wallet balance. Overdraft is never permitted.

        Args:
            user_id: Owner user ID
            amount: Positive amount to remove

        Returns:
            Updated wallet

        Raises:
            InsufficientFundsError: If balance is lower than amount;
                the balance is left untouched
        """
        amount = self._positive(amount)
        wallet = await self.get_wallet(user_id, for_update=True)

        if wallet.balance < amount:
            self.logger.warning(
                "Insufficient balance for debit",
                extra={
                    "user_id": user_id,
                    "available": str(wallet.balance),
                    "requested": str(amount),
                },
            )
            raise InsufficientFundsError(
                available=wallet.balance, requested=amount
            )

        balance_before = wallet.balance
        wallet.balance = to_money(wallet.balance - amount)
        wallet.updated_at = self.clock.now()
        await self.session.flush()

        self.logger.info(
            "Wallet debited",
            extra={
                "user_id": user_id,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(wallet.balance),
            },
        )
        return wallet

    async def record_stat(
        self, user_id: int, field: WalletStat | str, delta: Decimal
    ) -> Wallet:
        """
        Adjust one informational counter.

        Counters never affect the balance. Delta may be negative
        (withdrawal rejection reverses ``total_withdrawn``).

        Args:
            user_id: Owner user ID
            field: Counter to adjust
            delta: Signed change

        Returns:
            Updated wallet
        """
        stat = WalletStat(field)
        wallet = await self.get_wallet(user_id, for_update=True)
        current = getattr(wallet, stat.value)
        setattr(wallet, stat.value, to_money(current + delta))
        wallet.updated_at = self.clock.now()
        await self.session.flush()
        return wallet

    async def append_transaction(
        self,
        user_id: int,
        kind: TransactionType | str,
        amount: Decimal,
        description: str,
        reference_id: int | None = None,
        status: TransactionStatus | str = TransactionStatus.COMPLETED,
    ) -> Transaction:
        """
        Write an audit entry for a wallet movement.

        Only ``status`` may change afterwards.

        Args:
            user_id: Owner user ID
            kind: Transaction type
            amount: Movement amount
            description: Human-readable description
            reference_id: ID of the originating record
            status: Initial status

        Returns:
            Created transaction
        """
        now = self.clock.now()
        return await self.transaction_repo.create(
            user_id=user_id,
            type=TransactionType(kind).value,
            amount=to_money(amount),
            description=description,
            reference_id=reference_id,
            status=TransactionStatus(status).value,
            created_at=now,
            updated_at=now,
        )

    async def set_transaction_status(
        self,
        reference_id: int,
        kind: TransactionType | str,
        status: TransactionStatus | str,
    ) -> Transaction | None:
        """
        Move the audit entry paired with a request to a terminal status.

        Args:
            reference_id: Deposit / withdrawal ID
            kind: Transaction type
            status: Target status

        Returns:
            Updated transaction, or None if no entry is paired
        """
        tx = await self.transaction_repo.get_by_reference(
            reference_id, TransactionType(kind).value
        )
        if not tx:
            self.logger.warning(
                "No transaction paired with reference",
                extra={"reference_id": reference_id, "type": str(kind)},
            )
            return None

        target = check_transition(
            TRANSACTION_TRANSITIONS, tx.status, TransactionStatus(status)
        )
        tx.status = target.value
        tx.updated_at = self.clock.now()
        await self.session.flush()
        return tx

    async def get_transactions(
        self, user_id: int, limit: int = 50
    ) -> list[Transaction]:
        """
        Get a user's transaction history newest first.

        Args:
            user_id: Owner user ID
            limit: Max number of results

        Returns:
            List of transactions
        """
        return await self.transaction_repo.get_user_transactions(
            user_id, limit=limit
        )

    @staticmethod
    def _positive(amount: Decimal) -> Decimal:
        value = to_money(amount)
        if value <= 0:
            raise ValidationError("Amount must be positive")
        return value
