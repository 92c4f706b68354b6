"""
User service.

Registration with referral code resolution, plus admin activation
toggling. Every new user gets an empty wallet in the same transaction.
"""

import re
import secrets
import string

from sqlalchemy.ext.asyncio import AsyncSession

from capital.config.platform import COUNTRIES, PlatformConfig
from capital.models.user import User
from capital.repositories.user_repository import UserRepository
from capital.services.base_service import BaseService
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import Clock
from capital.utils.db_decorators import transactional
from capital.utils.exceptions import (
    DuplicateUserError,
    NotFoundError,
    ValidationError,
)

REFERRAL_CODE_LENGTH = 8
REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 10


def normalize_phone(phone: str, country_code: str) -> str:
    """
    Normalize a phone number to its national digits.

    Strips spaces, dashes and an optional dial-code prefix, then checks
    the national length of the country.

    Args:
        phone: Raw phone number ("+228 90 12 34 56", "90123456", ...)
        country_code: ISO country code

    Returns:
        National number digits

    Raises:
        ValidationError: If the country is unsupported or the number
            has the wrong format
    """
    country = COUNTRIES.get((country_code or "").upper())
    if not country:
        raise ValidationError(f"Unsupported country: {country_code}")

    digits = re.sub(r"[\s\-().]", "", phone or "")
    if digits.startswith(country.dial_code):
        digits = digits[len(country.dial_code):]
    elif digits.startswith("00" + country.dial_code[1:]):
        digits = digits[len(country.dial_code) + 1:]

    if not digits.isdigit() or len(digits) != country.phone_length:
        raise ValidationError(
            "Invalid phone number format for this country"
        )
    return digits


def generate_referral_code() -> str:
    """Generate a random uppercase referral code."""
    return "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET)
        for _ in range(REFERRAL_CODE_LENGTH)
    )


class UserService(BaseService):
    """User registration and administration."""

    def __init__(
        self,
        session: AsyncSession,
        config: PlatformConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize user service."""
        super().__init__(session, config, clock)
        self.user_repo = UserRepository(session)
        self.ledger = WalletLedger(session, self.config, self.clock)

    @transactional
    async def create_user(
        self,
        phone: str,
        country_code: str,
        full_name: str,
        password: str,
        referral_code: str | None = None,
    ) -> User:
        """
        Register a new user with an empty wallet.

        Args:
            phone: Phone number, with or without dial code
            country_code: ISO country code
            full_name: Display name
            password: Plain text password (hashed with bcrypt)
            referral_code: Optional upline referral code; unknown codes
                are ignored

        Returns:
            Created user

        Raises:
            ValidationError: If phone, name or password are invalid
            DuplicateUserError: If the phone is already registered
        """
        country_code = (country_code or "").upper()
        national = normalize_phone(phone, country_code)
        if not full_name or not full_name.strip():
            raise ValidationError("Full name is required")
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")

        if await self.user_repo.get_by_phone(national, country_code):
            raise DuplicateUserError("Phone number already registered")

        code = await self._unique_referral_code()

        referred_by = None
        if referral_code:
            referrer = await self.user_repo.get_by_referral_code(
                referral_code.strip()
            )
            if referrer:
                referred_by = referrer.id
            else:
                self.logger.warning(
                    "Unknown referral code ignored",
                    extra={"referral_code": referral_code},
                )

        now = self.clock.now()
        user = User(
            phone=national,
            country_code=country_code,
            full_name=full_name.strip(),
            referral_code=code,
            referred_by=referred_by,
            is_active=True,
            is_admin=False,
            created_at=now,
            updated_at=now,
        )
        user.set_password(password)
        self.session.add(user)
        await self.session.flush()

        await self.ledger.create_wallet(user.id)

        self.logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "country_code": country_code,
                "referred_by": referred_by,
            },
        )
        return user

    @transactional
    async def set_active(self, user_id: int, is_active: bool) -> User:
        """
        Activate or deactivate a user.

        Inactive users forfeit referral commissions.

        Args:
            user_id: User ID
            is_active: New flag value

        Returns:
            Updated user

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        user.is_active = is_active
        user.updated_at = self.clock.now()
        await self.session.flush()

        self.logger.info(
            "User activation changed",
            extra={"user_id": user_id, "is_active": is_active},
        )
        return user

    async def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        return await self.user_repo.get_by_id(user_id)

    async def get_by_phone(
        self, phone: str, country_code: str
    ) -> User | None:
        """
        Get user by phone number.

        Args:
            phone: Phone number, with or without dial code
            country_code: ISO country code

        Returns:
            User or None
        """
        country_code = (country_code or "").upper()
        national = normalize_phone(phone, country_code)
        return await self.user_repo.get_by_phone(national, country_code)

    async def _unique_referral_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_referral_code()
            if not await self.user_repo.exists(referral_code=code):
                return code
        raise DuplicateUserError("Could not generate a unique referral code")
