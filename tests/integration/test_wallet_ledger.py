"""
Integration tests for the wallet ledger.

Covers:
- Credit and debit with two-decimal normalization
- Overdraft refusal leaving the balance untouched
- Informational counters
- Audit entries and their status changes
"""

from decimal import Decimal

import pytest

from capital.models.enums import TransactionStatus, TransactionType, WalletStat
from capital.utils.exceptions import (
    InsufficientFundsError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)


class TestBalanceMutations:
    """Test credit and debit."""

    @pytest.mark.asyncio
    async def test_new_wallet_is_empty(self, make_user, ledger):
        user = await make_user()

        wallet = await ledger.get_wallet(user.id)

        assert wallet.balance == Decimal("0")
        assert wallet.total_invested == Decimal("0")
        assert wallet.total_earned == Decimal("0")
        assert wallet.total_withdrawn == Decimal("0")

    @pytest.mark.asyncio
    async def test_credit_then_debit(self, session, make_user, ledger):
        user = await make_user()

        await ledger.credit(user.id, Decimal("1500"))
        wallet = await ledger.debit(user.id, Decimal("499.995"))
        await session.commit()

        assert wallet.balance == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_debit_exact_balance(self, session, make_user, ledger):
        user = await make_user()
        await ledger.credit(user.id, Decimal("300"))

        wallet = await ledger.debit(user.id, Decimal("300"))

        assert wallet.balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_overdraft_refused(self, session, make_user, ledger):
        user = await make_user()
        await ledger.credit(user.id, Decimal("100"))
        await session.commit()

        with pytest.raises(InsufficientFundsError) as exc_info:
            await ledger.debit(user.id, Decimal("100.01"))

        assert exc_info.value.available == Decimal("100")
        assert exc_info.value.requested == Decimal("100.01")
        wallet = await ledger.get_wallet(user.id)
        assert wallet.balance == Decimal("100")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("0.001")])
    async def test_non_positive_amount_rejected(self, make_user, ledger, amount):
        user = await make_user()

        with pytest.raises(ValidationError):
            await ledger.credit(user.id, amount)

    @pytest.mark.asyncio
    async def test_missing_wallet(self, ledger):
        with pytest.raises(NotFoundError):
            await ledger.credit(999, Decimal("10"))


class TestCounters:
    """Test informational counters."""

    @pytest.mark.asyncio
    async def test_counters_do_not_touch_balance(self, make_user, ledger):
        user = await make_user()

        wallet = await ledger.record_stat(
            user.id, WalletStat.TOTAL_INVESTED, Decimal("3000")
        )

        assert wallet.total_invested == Decimal("3000")
        assert wallet.balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_negative_delta_reverses(self, make_user, ledger):
        user = await make_user()
        await ledger.record_stat(user.id, "total_withdrawn", Decimal("1000"))

        wallet = await ledger.record_stat(
            user.id, WalletStat.TOTAL_WITHDRAWN, Decimal("-1000")
        )

        assert wallet.total_withdrawn == Decimal("0")

    @pytest.mark.asyncio
    async def test_unknown_counter_rejected(self, make_user, ledger):
        user = await make_user()

        with pytest.raises(ValueError):
            await ledger.record_stat(user.id, "balance", Decimal("10"))


class TestAuditTransactions:
    """Test the transaction audit log."""

    @pytest.mark.asyncio
    async def test_append_and_settle(self, session, make_user, ledger):
        user = await make_user()

        tx = await ledger.append_transaction(
            user_id=user.id,
            kind=TransactionType.DEPOSIT,
            amount=Decimal("3000"),
            description="Deposit request - Flooz",
            reference_id=41,
            status=TransactionStatus.PENDING,
        )
        updated = await ledger.set_transaction_status(
            41, TransactionType.DEPOSIT, TransactionStatus.COMPLETED
        )

        assert updated.id == tx.id
        assert updated.status == "completed"
        assert updated.amount == Decimal("3000")
        assert updated.description == "Deposit request - Flooz"

    @pytest.mark.asyncio
    async def test_terminal_status_is_final(self, make_user, ledger):
        user = await make_user()
        await ledger.append_transaction(
            user.id, TransactionType.WITHDRAWAL, Decimal("1000"), "Withdrawal", 7
        )

        with pytest.raises(InvalidTransitionError):
            await ledger.set_transaction_status(
                7, TransactionType.WITHDRAWAL, TransactionStatus.REJECTED
            )

    @pytest.mark.asyncio
    async def test_missing_pair_returns_none(self, make_user, ledger):
        result = await ledger.set_transaction_status(
            12345, TransactionType.DEPOSIT, TransactionStatus.COMPLETED
        )

        assert result is None

    @pytest.mark.asyncio
    async def test_history_newest_first(self, session, make_user, ledger):
        user = await make_user()
        for index in range(3):
            await ledger.append_transaction(
                user.id, TransactionType.EARNING, Decimal("300"), f"Earning {index}"
            )
        await session.commit()

        history = await ledger.get_transactions(user.id, limit=2)

        assert [tx.description for tx in history] == ["Earning 2", "Earning 1"]
