"""
VIP product model.

Catalog entry for a fixed-return investment product. Read-only to the
engine; managed by admins.
"""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from capital.models.base import Base
from capital.models.types import MoneyType, RateType


class VIPProduct(Base):
    """VIP product catalog entry."""

    __tablename__ = "vip_products"
    __table_args__ = (
        CheckConstraint(
            "min_amount > 0", name="check_vip_product_min_amount_positive"
        ),
        CheckConstraint(
            "duration_days > 0", name="check_vip_product_duration_positive"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    level: Mapped[int] = mapped_column(
        Integer, nullable=False, unique=True, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    min_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    # Fraction of principal paid per day (0.10 = 10%)
    daily_return: Mapped[Decimal] = mapped_column(RateType, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<VIPProduct(level={self.level}, name={self.name}, "
            f"min_amount={self.min_amount}, daily_return={self.daily_return})>"
        )
