"""
VIP investment model.

A purchased position in a VIP product. Advanced by the earnings
scheduler until maturity.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from capital.models.base import Base
from capital.models.enums import InvestmentStatus
from capital.models.types import MoneyType, UTCDateTime


class VIPInvestment(Base):
    """
    VIP investment position.

    ``daily_return_amount`` is frozen at purchase time and never follows
    later changes to the product rate.
    """

    __tablename__ = "vip_investments"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_vip_investment_amount_positive"
        ),
        CheckConstraint(
            "days_elapsed >= 0", name="check_vip_investment_days_non_negative"
        ),
        Index(
            "idx_vip_investments_due", "status", "next_earning_time"
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
    vip_level: Mapped[int] = mapped_column(Integer, nullable=False)

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    daily_return_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )

    # Schedule
    purchase_time: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False
    )
    next_earning_time: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False
    )
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # Progress
    days_elapsed: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=InvestmentStatus.ACTIVE.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<VIPInvestment(id={self.id}, user_id={self.user_id}, "
            f"level={self.vip_level}, amount={self.amount}, "
            f"days={self.days_elapsed}, status={self.status})>"
        )

    def is_matured(self, now: datetime) -> bool:
        """Check whether the investment end date has passed."""
        return self.end_date < now
