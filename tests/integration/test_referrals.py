"""
Integration tests for the referral engine.

Covers:
- Bounded upline walk and loop protection
- Tiered commissions 15% / 3% / 2%
- Inactive referrers forfeit their level only
- Idempotency per deposit
- Statistics and downline tree
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from capital.models import ReferralCommission, Transaction, User
from capital.services.deposit_service import DepositService
from capital.services.referral import (
    ReferralChainManager,
    ReferralCommissionProcessor,
    ReferralStatisticsManager,
)

ADMIN_ID = 1


@pytest.fixture
def processor(session, config, clock):
    return ReferralCommissionProcessor(session, config, clock)


@pytest.fixture
def deposits(session, config, clock):
    return DepositService(session, config, clock)


@pytest.fixture
def make_chain(make_user):
    """Factory building a linear upline; returns users from root to leaf."""

    async def _make_chain(length: int, inactive: tuple[int, ...] = ()) -> list[User]:
        users = []
        referred_by = None
        for index in range(length):
            user = await make_user(
                referred_by=referred_by, is_active=index not in inactive
            )
            users.append(user)
            referred_by = user.id
        return users

    return _make_chain


async def _pending_deposit(deposits, user_id, amount="10000"):
    return await deposits.create_deposit(
        user_id=user_id,
        amount=Decimal(amount),
        payment_method="T-Money",
        account_number="90123456",
    )


async def _commissions(session):
    result = await session.execute(
        select(ReferralCommission)
        .order_by(ReferralCommission.level)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


class TestReferralChain:
    """Test upline walk."""

    @pytest.mark.asyncio
    async def test_chain_is_bounded_to_three_levels(self, session, config, make_chain):
        users = await make_chain(6)
        leaf = users[-1]

        chain = await ReferralChainManager(session, config).get_referral_chain(leaf.id)

        assert [u.id for u in chain] == [users[4].id, users[3].id, users[2].id]

    @pytest.mark.asyncio
    async def test_explicit_depth(self, session, config, make_chain):
        users = await make_chain(6)

        chain = await ReferralChainManager(session, config).get_referral_chain(
            users[-1].id, depth=5
        )

        assert [u.id for u in chain] == [u.id for u in reversed(users[:5])]

    @pytest.mark.asyncio
    async def test_no_referrer(self, session, config, make_user):
        user = await make_user()

        chain = await ReferralChainManager(session, config).get_referral_chain(user.id)

        assert chain == []

    @pytest.mark.asyncio
    async def test_loop_stops_walk(self, session, config, make_user):
        first = await make_user()
        second = await make_user(referred_by=first.id)
        first.referred_by = second.id
        await session.commit()

        chain = await ReferralChainManager(session, config).get_referral_chain(first.id)

        assert [u.id for u in chain] == [second.id]


class TestCommissionProcessing:
    """Test commission computation and payout."""

    @pytest.mark.asyncio
    async def test_long_upline_pays_three_levels(
        self, session, deposits, make_chain, ledger
    ):
        users = await make_chain(6)
        leaf = users[-1]
        deposit = await _pending_deposit(deposits, leaf.id)

        await deposits.approve_deposit(deposit.id, ADMIN_ID)

        commissions = await _commissions(session)
        assert [c.level for c in commissions] == [1, 2, 3]
        assert [c.referrer_id for c in commissions] == [
            users[4].id,
            users[3].id,
            users[2].id,
        ]
        assert [c.amount for c in commissions] == [
            Decimal("1500"),
            Decimal("300"),
            Decimal("200"),
        ]
        assert all(c.status == "paid" and c.paid_at is not None for c in commissions)

        balances = [(await ledger.get_wallet(u.id)).balance for u in users]
        assert balances == [
            Decimal("0"),
            Decimal("0"),
            Decimal("200"),
            Decimal("300"),
            Decimal("1500"),
            Decimal("10000"),
        ]

        txs = (
            await session.execute(
                select(Transaction)
                .where(Transaction.type == "commission")
                .order_by(Transaction.id)
            )
        ).scalars().all()
        assert [tx.description for tx in txs] == [
            "Referral commission level 1",
            "Referral commission level 2",
            "Referral commission level 3",
        ]

    @pytest.mark.asyncio
    async def test_inactive_referrer_forfeits_level(
        self, session, deposits, make_chain, ledger
    ):
        # root(level 3) <- middle(level 2, inactive) <- direct(level 1) <- leaf
        users = await make_chain(4, inactive=(1,))
        deposit = await _pending_deposit(deposits, users[-1].id)

        await deposits.approve_deposit(deposit.id, ADMIN_ID)

        commissions = await _commissions(session)
        assert [c.level for c in commissions] == [1, 3]
        assert [c.referrer_id for c in commissions] == [users[2].id, users[0].id]
        inactive_wallet = await ledger.get_wallet(users[1].id)
        assert inactive_wallet.balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_processing_is_idempotent(
        self, session, processor, deposits, make_chain, ledger
    ):
        users = await make_chain(2)
        deposit = await _pending_deposit(deposits, users[1].id)

        first = await processor.process_referral_commissions(
            users[1].id, deposit.id, Decimal("10000")
        )
        second = await processor.process_referral_commissions(
            users[1].id, deposit.id, Decimal("10000")
        )
        await session.commit()

        assert first.commissions_count == 1
        assert first.total_paid == Decimal("1500")
        assert second.already_processed is True
        assert second.commissions_count == 0
        assert len(await _commissions(session)) == 1
        wallet = await ledger.get_wallet(users[0].id)
        assert wallet.balance == Decimal("1500")

    @pytest.mark.asyncio
    async def test_skipped_levels_reported(self, session, processor, deposits, make_chain):
        users = await make_chain(3, inactive=(0,))
        deposit = await _pending_deposit(deposits, users[-1].id)

        result = await processor.process_referral_commissions(
            users[-1].id, deposit.id, Decimal("3000")
        )

        assert result.skipped_levels == [2]
        assert result.total_paid == Decimal("450")

    @pytest.mark.asyncio
    async def test_pay_commission_is_noop_when_paid(
        self, session, processor, deposits, make_chain, ledger
    ):
        users = await make_chain(2)
        deposit = await _pending_deposit(deposits, users[1].id)
        result = await processor.process_referral_commissions(
            users[1].id, deposit.id, Decimal("10000")
        )

        again = await processor.pay_commission(result.commissions[0].id)

        assert again.status == "paid"
        wallet = await ledger.get_wallet(users[0].id)
        assert wallet.balance == Decimal("1500")

    @pytest.mark.asyncio
    async def test_pay_missing_commission(self, processor):
        assert await processor.pay_commission(404) is None


class TestReferralStatistics:
    """Test reporting."""

    @pytest.mark.asyncio
    async def test_stats_and_commission_history(self, session, deposits, make_user):
        referrer = await make_user()
        first = await make_user(referred_by=referrer.id)
        second = await make_user(referred_by=referrer.id)
        grandchild = await make_user(referred_by=first.id)
        for user in (first, second, grandchild):
            deposit = await _pending_deposit(deposits, user.id)
            await deposits.approve_deposit(deposit.id, ADMIN_ID)

        stats_manager = ReferralStatisticsManager(session)
        stats = await stats_manager.get_referral_stats(referrer.id)
        history = await stats_manager.get_user_commissions(referrer.id)

        assert stats["unique_referred"] == 3
        assert stats["total_paid"] == Decimal("3300")
        assert stats["level_counts"] == {1: 2, 2: 1, 3: 0}
        assert len(history) == 3

    @pytest.mark.asyncio
    async def test_stats_without_commissions(self, session, make_user):
        user = await make_user()

        stats = await ReferralStatisticsManager(session).get_referral_stats(user.id)

        assert stats == {
            "unique_referred": 0,
            "total_paid": Decimal("0"),
            "level_counts": {1: 0, 2: 0, 3: 0},
        }

    @pytest.mark.asyncio
    async def test_referral_tree(self, session, make_user):
        root = await make_user()
        child_a = await make_user(referred_by=root.id)
        child_b = await make_user(referred_by=root.id)
        grandchild = await make_user(referred_by=child_a.id)
        great = await make_user(referred_by=grandchild.id)
        await make_user(referred_by=great.id)

        tree = await ReferralStatisticsManager(session).get_referral_tree(root.id)

        assert sorted(u.id for u in tree[1]) == sorted([child_a.id, child_b.id])
        assert [u.id for u in tree[2]] == [grandchild.id]
        assert [u.id for u in tree[3]] == [great.id]
        assert 4 not in tree

    @pytest.mark.asyncio
    async def test_tree_of_leaf_is_empty(self, session, make_user):
        leaf = await make_user()

        assert await ReferralStatisticsManager(session).get_referral_tree(leaf.id) == {}
