"""
Investment services package.

- investment_service: VIP catalog and purchases
- earnings_scheduler: periodic daily earnings
"""

from capital.services.investment.earnings_scheduler import (
    EarningOutcome,
    EarningsRunResult,
    EarningsScheduler,
)
from capital.services.investment.investment_service import InvestmentService


__all__ = [
    "EarningOutcome",
    "EarningsRunResult",
    "EarningsScheduler",
    "InvestmentService",
]
