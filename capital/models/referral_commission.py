"""
Referral commission model.

One commission paid to an upline member for a referred user's first
deposit.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from capital.models.base import Base
from capital.models.enums import CommissionStatus
from capital.models.types import MoneyType, RateType, UTCDateTime


class ReferralCommission(Base):
    """
    Referral commission record.

    Unique per (deposit, level) so a deposit can never pay the same
    level twice.
    """

    __tablename__ = "referral_commissions"
    __table_args__ = (
        UniqueConstraint(
            "deposit_id", "level", name="uq_referral_commissions_deposit_level"
        ),
        CheckConstraint(
            "level >= 1 AND level <= 3",
            name="check_referral_commission_level_range",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    referrer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referred_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    deposit_id: Mapped[int] = mapped_column(
        ForeignKey("deposits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)
    rate: Mapped[Decimal] = mapped_column(RateType, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommissionStatus.PENDING.value,
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralCommission(id={self.id}, "
            f"referrer_id={self.referrer_id}, level={self.level}, "
            f"amount={self.amount}, status={self.status})>"
        )
