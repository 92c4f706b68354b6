"""
Services.

Business logic layer. Every manager receives its session, an immutable
PlatformConfig and a clock at construction.
"""

from capital.services.base_service import BaseService, log_operation
from capital.services.deposit_service import DepositService
from capital.services.investment import (
    EarningOutcome,
    EarningsRunResult,
    EarningsScheduler,
    InvestmentService,
)
from capital.services.referral import (
    CommissionResult,
    ReferralChainManager,
    ReferralCommissionProcessor,
    ReferralStatisticsManager,
)
from capital.services.user_service import UserService
from capital.services.wallet_ledger import WalletLedger
from capital.services.withdrawal_service import WithdrawalService


__all__ = [
    # Base Infrastructure
    "BaseService",
    "log_operation",
    # Ledger
    "WalletLedger",
    # Managers
    "DepositService",
    "WithdrawalService",
    "InvestmentService",
    "EarningsScheduler",
    "EarningOutcome",
    "EarningsRunResult",
    "UserService",
    # Referral
    "CommissionResult",
    "ReferralChainManager",
    "ReferralCommissionProcessor",
    "ReferralStatisticsManager",
]
