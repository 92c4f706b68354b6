"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from capital.models.bank import Bank
from capital.models.base import Base
from capital.models.daily_earning import DailyEarning
from capital.models.deposit import Deposit
from capital.models.enums import (
    CommissionStatus,
    DepositStatus,
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
    WalletStat,
    WithdrawalStatus,
)
from capital.models.referral_commission import ReferralCommission
from capital.models.transaction import Transaction
from capital.models.user import User
from capital.models.vip_investment import VIPInvestment
from capital.models.vip_product import VIPProduct
from capital.models.wallet import Wallet
from capital.models.withdrawal import Withdrawal

__all__ = [
    "Bank",
    "Base",
    "CommissionStatus",
    "DailyEarning",
    "Deposit",
    "DepositStatus",
    "InvestmentStatus",
    "ReferralCommission",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "User",
    "VIPInvestment",
    "VIPProduct",
    "Wallet",
    "WalletStat",
    "WithdrawalStatus",
]
