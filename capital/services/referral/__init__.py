"""
Referral services package.

Contains modular services for referral processing:
- chain_manager: bounded upline walk
- commission_processor: first-deposit commission payouts
- statistics: commission reporting and downline tree
"""

from capital.services.referral.chain_manager import ReferralChainManager
from capital.services.referral.commission_processor import (
    CommissionResult,
    ReferralCommissionProcessor,
)
from capital.services.referral.statistics import ReferralStatisticsManager


__all__ = [
    "CommissionResult",
    "ReferralChainManager",
    "ReferralCommissionProcessor",
    "ReferralStatisticsManager",
]
