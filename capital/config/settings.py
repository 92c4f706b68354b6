"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from capital.config.platform import (
    CURRENCY,
    MAX_DAILY_WITHDRAWALS,
    MIN_DEPOSIT,
    MIN_WITHDRAWAL,
    REFERRAL_RATES,
    WITHDRAWAL_FEE_RATE,
    PlatformConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq and the earnings lock)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/capital.log"
    health_check_port: int = Field(
        default=8080, ge=1, le=65535, description="Health check HTTP server port"
    )

    # Earnings scheduler
    earnings_interval_minutes: int = Field(
        default=5, ge=1, le=1440,
        description="Minutes between two earnings scheduler ticks"
    )
    business_timezone: str = Field(
        default="UTC",
        description="Timezone defining calendar days for earnings and limits"
    )

    # Platform limits
    min_deposit: Decimal = Field(default=MIN_DEPOSIT, gt=0)
    min_withdrawal: Decimal = Field(default=MIN_WITHDRAWAL, gt=0)
    max_daily_withdrawals: int = Field(default=MAX_DAILY_WITHDRAWALS, ge=1)
    withdrawal_fee_rate: Decimal = Field(default=WITHDRAWAL_FEE_RATE, ge=0, lt=1)
    currency: str = CURRENCY

    # Referral commission rates (fractions)
    referral_rate_level_1: Decimal = Field(default=REFERRAL_RATES[1], ge=0, lt=1)
    referral_rate_level_2: Decimal = Field(default=REFERRAL_RATES[2], ge=0, lt=1)
    referral_rate_level_3: Decimal = Field(default=REFERRAL_RATES[3], ge=0, lt=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "DATABASE_URL must start with postgresql+asyncpg:// "
                "or sqlite+aiosqlite://"
            )
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("business_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone name."""
        try:
            ZoneInfo(v)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )
            if self.database_url.startswith("sqlite"):
                logger.warning(
                    "DATABASE_URL points to SQLite in production. "
                    "Row locking is not available on this backend."
                )
        return self

    def platform_config(self) -> PlatformConfig:
        """
        Build the immutable platform configuration.

        Returns:
            PlatformConfig for injection into managers
        """
        return PlatformConfig(
            min_deposit=self.min_deposit,
            min_withdrawal=self.min_withdrawal,
            max_daily_withdrawals=self.max_daily_withdrawals,
            withdrawal_fee_rate=self.withdrawal_fee_rate,
            referral_rates={
                1: self.referral_rate_level_1,
                2: self.referral_rate_level_2,
                3: self.referral_rate_level_3,
            },
            currency=self.currency,
            timezone=self.business_timezone,
        )


# Global settings instance
settings = Settings()
