"""
Wallet model.

One wallet per user. ``balance`` is the only spendable figure; the
``total_*`` counters are informational and never used to derive it.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from capital.models.base import Base
from capital.models.types import MoneyType, UTCDateTime

if TYPE_CHECKING:
    from capital.models.user import User


class Wallet(Base):
    """Wallet model - user balance and running totals."""

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint(
            "balance >= 0", name="check_wallet_balance_non_negative"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_invested: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_earned: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_withdrawn: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
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

    user: Mapped["User"] = relationship("User", back_populates="wallet")

    def __repr__(self) -> str:
        """String representation."""
        return f"<Wallet(user_id={self.user_id}, balance={self.balance})>"
