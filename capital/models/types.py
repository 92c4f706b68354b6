"""
Standard type definitions for database models.

Provides consistent types for monetary, rate and timestamp fields across
all models.
"""

from datetime import UTC, datetime

from sqlalchemy import DECIMAL, DateTime
from sqlalchemy.types import TypeDecorator

# Standard money type for amounts, balances, earnings
# Precision: 18 digits total, 2 after decimal point
# Suitable for: FCFA amounts, balances, commissions
MoneyType = DECIMAL(18, 2)

# Rate type for daily returns, fee and commission rates
# Precision: 10 digits total, 4 after decimal point
# Suitable for: fractions such as 0.1000, 0.0600, 0.1500
RateType = DECIMAL(10, 4)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp.

    Backends that drop tzinfo (SQLite) return naive values; those are
    re-attached to UTC on load so comparisons with aware datetimes work.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
