"""Initial ledger schema.

Revision ID: 20250101_000001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20250101_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.DECIMAL(18, 2)
RATE = sa.DECIMAL(10, 4)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Create users, wallets, ledger, deposit, withdrawal, VIP and referral tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('country_code', sa.String(2), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('referral_code', sa.String(20), nullable=False),
        sa.Column('referred_by', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['referred_by'], ['users.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('phone', 'country_code', name='uq_users_phone_country'),
    )
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)
    op.create_index('ix_users_referred_by', 'users', ['referred_by'])

    op.create_table(
        'wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('balance', MONEY, nullable=False, server_default='0'),
        sa.Column('total_invested', MONEY, nullable=False, server_default='0'),
        sa.Column('total_earned', MONEY, nullable=False, server_default='0'),
        sa.Column('total_withdrawn', MONEY, nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('balance >= 0', name='check_wallet_balance_non_negative'),
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'], unique=True)

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_status', 'transactions', ['status'])
    op.create_index('idx_transactions_reference', 'transactions', ['reference_id', 'type'])

    op.create_table(
        'banks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('country_code', sa.String(2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'deposits',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=False),
        sa.Column('account_number', sa.String(50), nullable=False),
        sa.Column('transaction_id', sa.String(100), nullable=True),
        sa.Column('transfer_id', sa.String(100), nullable=True),
        sa.Column('receipt_url', sa.String(500), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('is_first_deposit', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('amount > 0', name='check_deposit_amount_positive'),
    )
    op.create_index('ix_deposits_user_id', 'deposits', ['user_id'])
    op.create_index('ix_deposits_status', 'deposits', ['status'])
    op.create_index('ix_deposits_created_at', 'deposits', ['created_at'])

    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('fees', MONEY, nullable=False),
        sa.Column('net_amount', MONEY, nullable=False),
        sa.Column('bank_id', sa.Integer(), nullable=False),
        sa.Column('bank_name', sa.String(100), nullable=False),
        sa.Column('account_number', sa.String(50), nullable=False),
        sa.Column('account_holder_name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['bank_id'], ['banks.id']),
        sa.CheckConstraint('amount > 0', name='check_withdrawal_amount_positive'),
        sa.CheckConstraint('fees >= 0', name='check_withdrawal_fees_non_negative'),
        sa.CheckConstraint('fees < amount', name='check_withdrawal_fees_less_than_amount'),
    )
    op.create_index('ix_withdrawals_user_id', 'withdrawals', ['user_id'])
    op.create_index('ix_withdrawals_status', 'withdrawals', ['status'])
    op.create_index('ix_withdrawals_created_at', 'withdrawals', ['created_at'])

    op.create_table(
        'vip_products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('min_amount', MONEY, nullable=False),
        sa.Column('daily_return', RATE, nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('min_amount > 0', name='check_vip_product_min_amount_positive'),
        sa.CheckConstraint('duration_days > 0', name='check_vip_product_duration_positive'),
    )
    op.create_index('ix_vip_products_level', 'vip_products', ['level'], unique=True)

    op.create_table(
        'vip_investments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('vip_level', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('daily_return_amount', MONEY, nullable=False),
        sa.Column('purchase_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('next_earning_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('days_elapsed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earned', MONEY, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('amount > 0', name='check_vip_investment_amount_positive'),
        sa.CheckConstraint('days_elapsed >= 0', name='check_vip_investment_days_non_negative'),
    )
    op.create_index('ix_vip_investments_user_id', 'vip_investments', ['user_id'])
    op.create_index('ix_vip_investments_status', 'vip_investments', ['status'])
    op.create_index('idx_vip_investments_due', 'vip_investments', ['status', 'next_earning_time'])

    op.create_table(
        'daily_earnings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('investment_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('earning_date', sa.Date(), nullable=False),
        sa.Column('earned_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['investment_id'], ['vip_investments.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('investment_id', 'earning_date', name='uq_daily_earnings_investment_date'),
    )
    op.create_index('ix_daily_earnings_user_id', 'daily_earnings', ['user_id'])
    op.create_index('ix_daily_earnings_investment_id', 'daily_earnings', ['investment_id'])

    op.create_table(
        'referral_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('referrer_id', sa.Integer(), nullable=False),
        sa.Column('referred_id', sa.Integer(), nullable=False),
        sa.Column('deposit_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('rate', RATE, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['referrer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['referred_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['deposit_id'], ['deposits.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('deposit_id', 'level', name='uq_referral_commissions_deposit_level'),
        sa.CheckConstraint('level >= 1 AND level <= 3', name='check_referral_commission_level_range'),
    )
    op.create_index('ix_referral_commissions_referrer_id', 'referral_commissions', ['referrer_id'])
    op.create_index('ix_referral_commissions_referred_id', 'referral_commissions', ['referred_id'])
    op.create_index('ix_referral_commissions_deposit_id', 'referral_commissions', ['deposit_id'])


def downgrade() -> None:
    """Drop all ledger tables."""
    op.drop_table('referral_commissions')
    op.drop_table('daily_earnings')
    op.drop_table('vip_investments')
    op.drop_table('vip_products')
    op.drop_table('withdrawals')
    op.drop_table('deposits')
    op.drop_table('banks')
    op.drop_table('transactions')
    op.drop_table('wallets')
    op.drop_table('users')
