"""
Withdrawal model.

Represents a user request to remove funds. The gross amount is held
(debited) at creation time and only returned on rejection.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from capital.models.base import Base
from capital.models.enums import WithdrawalStatus
from capital.models.types import MoneyType, UTCDateTime


class Withdrawal(Base):
    """Withdrawal model - user withdrawal requests."""

    __tablename__ = "withdrawals"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_withdrawal_amount_positive"
        ),
        CheckConstraint(
            "fees >= 0", name="check_withdrawal_fees_non_negative"
        ),
        CheckConstraint(
            "fees < amount", name="check_withdrawal_fees_less_than_amount"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Amounts
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    fees: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Destination
    bank_id: Mapped[int] = mapped_column(
        ForeignKey("banks.id"), nullable=False
    )
    bank_name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    account_holder_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WithdrawalStatus.PENDING.value,
        index=True,
    )  # pending, completed, rejected

    # Admin processing
    processed_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False,
        index=True,
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
            f"<Withdrawal(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, net={self.net_amount}, "
            f"status={self.status})>"
        )
