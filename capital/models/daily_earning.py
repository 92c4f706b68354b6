"""
Daily earning model.

Immutable record of one accrual for one investment on one calendar date.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from capital.models.base import Base
from capital.models.types import MoneyType, UTCDateTime


class DailyEarning(Base):
    """Daily earning accrual record."""

    __tablename__ = "daily_earnings"
    __table_args__ = (
        # At most one accrual per investment per calendar date
        UniqueConstraint(
            "investment_id",
            "earning_date",
            name="uq_daily_earnings_investment_date",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    investment_id: Mapped[int] = mapped_column(
        ForeignKey("vip_investments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    earning_date: Mapped[date] = mapped_column(Date, nullable=False)
    earned_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<DailyEarning(investment_id={self.investment_id}, "
            f"date={self.earning_date}, amount={self.amount})>"
        )
