"""
Deposit model.

Represents a user request to add funds. Credited to the wallet only on
admin approval.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from capital.models.base import Base
from capital.models.enums import DepositStatus
from capital.models.types import MoneyType, UTCDateTime


class Deposit(Base):
    """Deposit model - user deposit requests."""

    __tablename__ = "deposits"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_deposit_amount_positive"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # User reference
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Deposit details
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    transfer_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    receipt_url: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DepositStatus.PENDING.value,
        index=True,
    )  # pending, approved, rejected
    is_first_deposit: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Admin processing
    processed_by: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
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
            f"<Deposit(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )

    @property
    def is_pending(self) -> bool:
        return self.status == DepositStatus.PENDING.value
