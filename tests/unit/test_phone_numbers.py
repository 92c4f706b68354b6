"""
Tests for phone normalization and referral code generation.

Covers:
- Dial-code and separator stripping
- Per-country national number length
- Unsupported countries
"""

import pytest

from capital.services.user_service import (
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    generate_referral_code,
    normalize_phone,
)
from capital.utils.exceptions import ValidationError


class TestNormalizePhone:
    """Test national number normalization."""

    @pytest.mark.parametrize(
        "raw",
        ["90123456", "90 12 34 56", "+228 90 12 34 56", "0022890123456", "90-12-34-56"],
    )
    def test_togo_formats(self, raw):
        assert normalize_phone(raw, "TG") == "90123456"

    def test_ivory_coast_has_ten_digits(self):
        assert normalize_phone("+225 07 01 02 03 04", "CI") == "0701020304"

    def test_congo_has_nine_digits(self):
        assert normalize_phone("061234567", "CG") == "061234567"

    def test_country_code_is_case_insensitive(self):
        assert normalize_phone("97000000", "bj") == "97000000"

    @pytest.mark.parametrize("raw", ["9012345", "901234567", "90AB3456", ""])
    def test_wrong_format(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            normalize_phone(raw, "TG")

        assert exc_info.value.message == "Invalid phone number format for this country"

    def test_other_country_dial_code_rejected(self):
        """A Bénin number is not a valid Togo number."""
        with pytest.raises(ValidationError):
            normalize_phone("+229 97 00 00 00 00", "TG")

    def test_unsupported_country(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_phone("90123456", "FR")

        assert "Unsupported country" in exc_info.value.message


class TestReferralCode:
    """Test referral code generation."""

    def test_shape(self):
        code = generate_referral_code()

        assert len(code) == REFERRAL_CODE_LENGTH
        assert set(code) <= set(REFERRAL_CODE_ALPHABET)
        assert code == code.upper()

    def test_codes_vary(self):
        codes = {generate_referral_code() for _ in range(50)}

        assert len(codes) > 1
