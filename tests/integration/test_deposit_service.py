"""
Integration tests for the deposit workflow.

Covers:
- Request validation and the minimum deposit
- Approval-gated crediting
- First deposit flag
- Rejection and already processed requests
- Referral commissions on first deposit approval only
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from capital.models import Deposit, ReferralCommission, Transaction, Wallet
from capital.services.deposit_service import DepositService
from capital.utils.exceptions import (
    AlreadyProcessedError,
    BelowMinimumError,
    MissingNotesError,
    NotFoundError,
    ValidationError,
)

ADMIN_ID = 1


@pytest.fixture
def service(session, config, clock):
    return DepositService(session, config, clock)


async def _create(service, user_id, amount="3000"):
    return await service.create_deposit(
        user_id=user_id,
        amount=Decimal(amount),
        payment_method="Flooz",
        account_number="90123456",
        transaction_id="TX-001",
    )


async def _deposit_tx(session, deposit_id):
    result = await session.execute(
        select(Transaction)
        .where(Transaction.reference_id == deposit_id)
        .where(Transaction.type == "deposit")
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


class TestCreateDeposit:
    """Test deposit requests."""

    @pytest.mark.asyncio
    async def test_below_minimum(self, service, make_user):
        user = await make_user()
        user_id = user.id

        with pytest.raises(BelowMinimumError) as exc_info:
            await _create(service, user_id, "2999.99")

        assert exc_info.value.message == "Minimum deposit is 3000 FCFA"

    @pytest.mark.asyncio
    async def test_payment_details_required(self, service, make_user):
        user = await make_user()
        user_id = user.id

        with pytest.raises(ValidationError):
            await service.create_deposit(
                user_id=user_id,
                amount=Decimal("3000"),
                payment_method="",
                account_number="90123456",
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            await _create(service, 999)

    @pytest.mark.asyncio
    async def test_pending_deposit_does_not_credit(
        self, session, service, make_user, ledger
    ):
        user = await make_user()

        deposit = await _create(service, user.id)

        assert deposit.status == "pending"
        assert deposit.is_first_deposit is True
        wallet = await ledger.get_wallet(user.id)
        assert wallet.balance == Decimal("0")
        tx = await _deposit_tx(session, deposit.id)
        assert tx.status == "pending"
        assert tx.description == "Deposit request - Flooz"

    @pytest.mark.asyncio
    async def test_only_first_request_is_flagged(self, service, make_user):
        user = await make_user()

        first = await _create(service, user.id)
        second = await _create(service, user.id, "5000")

        assert first.is_first_deposit is True
        assert second.is_first_deposit is False

    @pytest.mark.asyncio
    async def test_rejected_first_deposit_frees_the_flag(self, service, make_user):
        user = await make_user()
        first = await _create(service, user.id)
        await service.reject_deposit(first.id, ADMIN_ID, "Receipt unreadable")

        retry = await _create(service, user.id)

        assert retry.is_first_deposit is True

    @pytest.mark.asyncio
    async def test_wallet_locked_before_first_deposit_check(
        self, service, make_user, monkeypatch
    ):
        user = await make_user()
        calls = []
        get_wallet = service.ledger.get_wallet
        has_open_or_approved = service.deposit_repo.has_open_or_approved

        async def tracked_get_wallet(user_id, for_update=False):
            calls.append(("wallet", for_update))
            return await get_wallet(user_id, for_update=for_update)

        async def tracked_check(user_id):
            calls.append(("first_check", None))
            return await has_open_or_approved(user_id)

        monkeypatch.setattr(service.ledger, "get_wallet", tracked_get_wallet)
        monkeypatch.setattr(
            service.deposit_repo, "has_open_or_approved", tracked_check
        )

        await _create(service, user.id)

        assert ("wallet", True) in calls
        assert calls.index(("wallet", True)) < calls.index(("first_check", None))


class TestApproveDeposit:
    """Test approval."""

    @pytest.mark.asyncio
    async def test_credits_exactly_once(self, session, service, make_user, ledger):
        user = await make_user()
        user_id = user.id
        deposit = await _create(service, user_id)

        approved = await service.approve_deposit(deposit.id, ADMIN_ID, "OK")

        assert approved.status == "approved"
        assert approved.processed_by == ADMIN_ID
        assert approved.processed_at is not None
        wallet = await ledger.get_wallet(user.id)
        assert wallet.balance == Decimal("3000")
        tx = await _deposit_tx(session, deposit.id)
        assert tx.status == "completed"

        with pytest.raises(AlreadyProcessedError) as exc_info:
            await service.approve_deposit(deposit.id, ADMIN_ID)

        assert exc_info.value.current_status == "approved"
        assert exc_info.value.message == "Deposit is already approved"
        wallet = await ledger.get_wallet(user_id)
        assert wallet.balance == Decimal("3000")

    @pytest.mark.asyncio
    async def test_unknown_deposit(self, service):
        with pytest.raises(NotFoundError):
            await service.approve_deposit(404, ADMIN_ID)

    @pytest.mark.asyncio
    async def test_first_deposit_pays_referrer(
        self, session, service, make_user, ledger
    ):
        referrer = await make_user()
        user = await make_user(referred_by=referrer.id)
        referrer_id, user_id = referrer.id, user.id

        deposit = await _create(service, user_id, "10000")
        await service.approve_deposit(deposit.id, ADMIN_ID)

        wallet = await ledger.get_wallet(referrer_id)
        assert wallet.balance == Decimal("1500")
        assert wallet.total_earned == Decimal("1500")

        second = await _create(service, user_id, "10000")
        await service.approve_deposit(second.id, ADMIN_ID)

        commissions = (
            await session.execute(select(ReferralCommission))
        ).scalars().all()
        assert len(commissions) == 1
        assert commissions[0].deposit_id == deposit.id
        wallet = await ledger.get_wallet(referrer_id)
        assert wallet.balance == Decimal("1500")

    @pytest.mark.asyncio
    async def test_no_referrer_no_commission(self, session, service, make_user):
        user = await make_user()
        deposit = await _create(service, user.id)

        await service.approve_deposit(deposit.id, ADMIN_ID)

        count = (
            await session.execute(select(ReferralCommission))
        ).scalars().all()
        assert count == []

    @pytest.mark.asyncio
    async def test_failed_commission_rolls_back_approval(
        self, session, service, make_user, ledger
    ):
        referrer = await make_user()
        user = await make_user(referred_by=referrer.id)
        referrer_id, user_id = referrer.id, user.id
        deposit = await _create(service, user_id)
        deposit_id = deposit.id

        # Crediting a referrer without a wallet fails mid-approval
        wallet = (
            await session.execute(select(Wallet).where(Wallet.user_id == referrer_id))
        ).scalar_one()
        await session.delete(wallet)
        await session.commit()

        with pytest.raises(NotFoundError):
            await service.approve_deposit(deposit_id, ADMIN_ID)

        user_wallet = await ledger.get_wallet(user_id)
        assert user_wallet.balance == Decimal("0")
        stored = (
            await session.execute(
                select(Deposit)
                .where(Deposit.id == deposit_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert stored.status == "pending"
        assert stored.processed_at is None
        tx = await _deposit_tx(session, deposit_id)
        assert tx.status == "pending"
        commissions = (
            await session.execute(select(ReferralCommission))
        ).scalars().all()
        assert commissions == []


class TestRejectDeposit:
    """Test rejection."""

    @pytest.mark.asyncio
    async def test_notes_required(self, service, make_user):
        user = await make_user()
        deposit = await _create(service, user.id)
        deposit_id = deposit.id

        with pytest.raises(MissingNotesError) as exc_info:
            await service.reject_deposit(deposit_id, ADMIN_ID, "   ")

        assert exc_info.value.message == "Rejection reason is required"

    @pytest.mark.asyncio
    async def test_reject_has_no_balance_effect(
        self, session, service, make_user, ledger
    ):
        user = await make_user()
        deposit = await _create(service, user.id)

        rejected = await service.reject_deposit(deposit.id, ADMIN_ID, "Fake receipt")

        assert rejected.status == "rejected"
        assert rejected.admin_notes == "Fake receipt"
        wallet = await ledger.get_wallet(user.id)
        assert wallet.balance == Decimal("0")
        tx = await _deposit_tx(session, deposit.id)
        assert tx.status == "rejected"

    @pytest.mark.asyncio
    async def test_cannot_approve_rejected(self, service, make_user):
        user = await make_user()
        deposit = await _create(service, user.id)
        deposit_id = deposit.id
        await service.reject_deposit(deposit_id, ADMIN_ID, "Duplicate")

        with pytest.raises(AlreadyProcessedError) as exc_info:
            await service.approve_deposit(deposit_id, ADMIN_ID)

        assert exc_info.value.current_status == "rejected"


class TestDepositQueries:
    """Test listing."""

    @pytest.mark.asyncio
    async def test_user_deposits_newest_first(self, service, make_user):
        user = await make_user()
        first = await _create(service, user.id, "3000")
        second = await _create(service, user.id, "4000")

        deposits = await service.get_user_deposits(user.id)

        assert [d.id for d in deposits] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_by_status(self, service, make_user):
        user = await make_user()
        pending = await _create(service, user.id)
        approved = await _create(service, user.id)
        await service.approve_deposit(approved.id, ADMIN_ID)

        pending_list = await service.list_deposits(status="pending")
        all_deposits = await service.list_deposits()

        assert [d.id for d in pending_list] == [pending.id]
        assert len(all_deposits) == 2
