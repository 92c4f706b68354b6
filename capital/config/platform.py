"""
Platform business configuration.

Single source of truth for platform limits, referral rates and the default
VIP product catalog. Managers receive a frozen PlatformConfig at construction
time and never read global settings directly.
"""

from collections.abc import Mapping
from decimal import Decimal
from types import MappingProxyType
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Referral program depth (level 1 = direct referrer)
REFERRAL_DEPTH = 3

# NOTE: older product material quotes 30% / 3% / 3%; the configured rates are these.
REFERRAL_RATES: dict[int, Decimal] = {
    1: Decimal("0.15"),  # 15% for direct referrer
    2: Decimal("0.03"),  # 3% for level 2
    3: Decimal("0.02"),  # 2% for level 3
}

MIN_DEPOSIT = Decimal("3000")
MIN_WITHDRAWAL = Decimal("1000")
MAX_DAILY_WITHDRAWALS = 1
WITHDRAWAL_FEE_RATE = Decimal("0.06")
CURRENCY = "FCFA"

# Hours between two earnings of the same investment
EARNING_INTERVAL_HOURS = 24


class VIPProductSeed(NamedTuple):
    """Seed definition of a VIP product."""

    level: int
    name: str
    min_amount: Decimal
    daily_return: Decimal  # Fraction of principal paid per day
    duration_days: int
    color: str


DEFAULT_VIP_PRODUCTS: tuple[VIPProductSeed, ...] = (
    VIPProductSeed(1, "VIP Bronze", Decimal("3000"), Decimal("0.10"), 90, "#CD7F32"),
    VIPProductSeed(2, "VIP Silver", Decimal("10000"), Decimal("0.10"), 90, "#C0C0C0"),
    VIPProductSeed(3, "VIP Gold", Decimal("25000"), Decimal("0.10"), 90, "#FFD700"),
    VIPProductSeed(4, "VIP Platinum", Decimal("50000"), Decimal("0.10"), 90, "#E5E4E2"),
    VIPProductSeed(5, "VIP Diamond", Decimal("100000"), Decimal("0.10"), 90, "#B9F2FF"),
    VIPProductSeed(6, "VIP Elite", Decimal("250000"), Decimal("0.10"), 90, "#800080"),
    VIPProductSeed(7, "VIP Master", Decimal("500000"), Decimal("0.10"), 90, "#FF1493"),
    VIPProductSeed(8, "VIP Legend", Decimal("1000000"), Decimal("0.10"), 90, "#FF4500"),
    VIPProductSeed(9, "VIP Supreme", Decimal("2000000"), Decimal("0.10"), 90, "#8B0000"),
    VIPProductSeed(10, "VIP Ultimate", Decimal("5000000"), Decimal("0.10"), 90, "#000000"),
)


class PlatformConfig(BaseModel):
    """Immutable platform configuration injected into every manager."""

    model_config = ConfigDict(frozen=True)

    min_deposit: Decimal = Field(default=MIN_DEPOSIT, gt=0)
    min_withdrawal: Decimal = Field(default=MIN_WITHDRAWAL, gt=0)
    max_daily_withdrawals: int = Field(default=MAX_DAILY_WITHDRAWALS, ge=1)
    withdrawal_fee_rate: Decimal = Field(default=WITHDRAWAL_FEE_RATE, ge=0, lt=1)
    referral_rates: Mapping[int, Decimal] = Field(
        default_factory=lambda: MappingProxyType(dict(REFERRAL_RATES))
    )
    referral_depth: int = Field(default=REFERRAL_DEPTH, ge=1, le=REFERRAL_DEPTH)
    earning_interval_hours: int = Field(default=EARNING_INTERVAL_HOURS, gt=0)
    currency: str = CURRENCY
    timezone: str = "UTC"

    @field_validator("referral_rates")
    @classmethod
    def validate_referral_rates(
        cls, v: Mapping[int, Decimal]
    ) -> Mapping[int, Decimal]:
        """Validate referral rates: levels 1..3, rates in [0, 1)."""
        for level, rate in v.items():
            if level < 1 or level > REFERRAL_DEPTH:
                raise ValueError(f"Invalid referral level: {level}")
            if rate < 0 or rate >= 1:
                raise ValueError(
                    f"Referral rate for level {level} must be in [0, 1)"
                )
        return MappingProxyType(dict(v))

    def referral_rate(self, level: int) -> Decimal:
        """
        Get commission rate for a referral level.

        Args:
            level: Referral level (1-3)

        Returns:
            Rate as a fraction, 0 if level not configured
        """
        return self.referral_rates.get(level, Decimal("0"))


class CountryInfo(NamedTuple):
    """Supported country: dial code and national number length."""

    code: str
    name: str
    dial_code: str
    phone_length: int


COUNTRIES: dict[str, CountryInfo] = {
    "TG": CountryInfo("TG", "Togo", "+228", 8),
    "BJ": CountryInfo("BJ", "Bénin", "+229", 8),
    "CI": CountryInfo("CI", "Côte d'Ivoire", "+225", 10),
    "BF": CountryInfo("BF", "Burkina Faso", "+226", 8),
    "CG": CountryInfo("CG", "Congo", "+242", 9),
}
