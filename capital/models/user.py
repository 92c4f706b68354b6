"""
User model.

Represents a registered platform user.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

import bcrypt
from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from capital.models.base import Base
from capital.models.types import UTCDateTime

if TYPE_CHECKING:
    from capital.models.wallet import Wallet


class User(Base):
    """User model - registered platform users."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint(
            "phone", "country_code", name="uq_users_phone_country"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Referral
    referral_code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    # Weak reference to the upline, no ownership
    referred_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    wallet: Mapped[Optional["Wallet"]] = relationship(
        "Wallet",
        back_populates="user",
        uselist=False,
    )

    def set_password(self, password: str) -> None:
        """
        Set password with bcrypt hashing.

        Args:
            password: Plain text password to hash and store
        """
        self.password_hash = bcrypt.hashpw(
            password.encode(), bcrypt.gensalt()
        ).decode()

    def verify_password(self, password: str) -> bool:
        """
        Verify password against stored hash.

        Args:
            password: Plain text password to verify

        Returns:
            True if password matches, False otherwise
        """
        if not self.password_hash:
            return False
        return bcrypt.checkpw(
            password.encode(), self.password_hash.encode()
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, phone={self.country_code}:{self.phone}, "
            f"referral_code={self.referral_code})>"
        )
