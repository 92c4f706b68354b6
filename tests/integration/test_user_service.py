"""
Integration tests for user registration.

Covers:
- Phone normalization and duplicate detection
- Password hashing
- Referral code generation and upline resolution
- Wallet creation with the user
- Activation toggling
"""

from decimal import Decimal

import pytest

from capital.services.user_service import UserService
from capital.utils.exceptions import DuplicateUserError, NotFoundError, ValidationError


@pytest.fixture
def service(session, config, clock):
    return UserService(session, config, clock)


class TestCreateUser:
    """Test registration."""

    @pytest.mark.asyncio
    async def test_register(self, service, ledger):
        user = await service.create_user(
            phone="+228 90 11 22 33",
            country_code="tg",
            full_name="  Ama Koffi ",
            password="secret123",
        )

        assert user.phone == "90112233"
        assert user.country_code == "TG"
        assert user.full_name == "Ama Koffi"
        assert len(user.referral_code) == 8
        assert user.referred_by is None
        assert user.is_active is True
        assert user.password_hash != "secret123"
        assert user.verify_password("secret123") is True
        assert user.verify_password("wrong") is False

        wallet = await ledger.get_wallet(user.id)
        assert wallet.balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_referral_code_resolves_case_insensitively(self, service, make_user):
        referrer = await make_user()
        referrer_id, code = referrer.id, referrer.referral_code

        user = await service.create_user(
            phone="90112234",
            country_code="TG",
            full_name="Kodjo",
            password="secret123",
            referral_code=f" {code.lower()} ",
        )

        assert user.referred_by == referrer_id

    @pytest.mark.asyncio
    async def test_unknown_referral_code_ignored(self, service):
        user = await service.create_user(
            phone="90112235",
            country_code="TG",
            full_name="Afi",
            password="secret123",
            referral_code="NOPE0000",
        )

        assert user.referred_by is None

    @pytest.mark.asyncio
    async def test_duplicate_phone(self, service):
        await service.create_user("90112236", "TG", "First", "secret123")

        with pytest.raises(DuplicateUserError) as exc_info:
            await service.create_user("+228 90 11 22 36", "TG", "Second", "secret123")

        assert exc_info.value.message == "Phone number already registered"

    @pytest.mark.asyncio
    async def test_same_number_other_country(self, service):
        await service.create_user("90112237", "TG", "Togo", "secret123")

        user = await service.create_user("90112237", "BJ", "Benin", "secret123")

        assert user.country_code == "BJ"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "full_name,password",
        [("", "secret123"), ("   ", "secret123"), ("Name", "12345")],
    )
    async def test_invalid_input(self, service, full_name, password):
        with pytest.raises(ValidationError):
            await service.create_user("90112238", "TG", full_name, password)

    @pytest.mark.asyncio
    async def test_invalid_phone(self, service):
        with pytest.raises(ValidationError):
            await service.create_user("1234", "TG", "Name", "secret123")

    @pytest.mark.asyncio
    async def test_referral_codes_unique(self, service):
        first = await service.create_user("90112239", "TG", "One", "secret123")
        second = await service.create_user("90112240", "TG", "Two", "secret123")

        assert first.referral_code != second.referral_code


class TestUserAdministration:
    """Test lookups and activation."""

    @pytest.mark.asyncio
    async def test_deactivate(self, service, make_user):
        user = await make_user()

        updated = await service.set_active(user.id, False)

        assert updated.is_active is False

    @pytest.mark.asyncio
    async def test_deactivate_unknown(self, service):
        with pytest.raises(NotFoundError):
            await service.set_active(999, False)

    @pytest.mark.asyncio
    async def test_lookup_by_phone(self, service):
        created = await service.create_user("90112241", "TG", "Yawa", "secret123")
        created_id = created.id

        found = await service.get_by_phone("+228 90-11-22-41", "TG")
        missing = await service.get_by_phone("90112242", "TG")

        assert found.id == created_id
        assert missing is None
        assert (await service.get_user(created_id)).full_name == "Yawa"
