"""
Unit tests for referral code generation and ReferralResolver.
"""

import re
import uuid
from unittest.mock import Mock

import pytest

from invito.domain.codes import generate_referral_code
from invito.domain.exceptions import ReferralCodeNotFound, StoreError, ValidationError
from invito.domain.referral import ReferralResolver


class TestGenerateReferralCode:
    """Tests for generate_referral_code()."""

    def test_code_is_prefix_plus_four_characters(self) -> None:
        code = generate_referral_code("ann")
        assert re.match(r"^ann[0-9a-f]{4}$", code)

    def test_prefix_uses_first_three_characters(self) -> None:
        assert generate_referral_code("bobby").startswith("bob")
        assert len(generate_referral_code("bobby")) == 7

    def test_name_of_exactly_three_characters_accepted(self) -> None:
        assert len(generate_referral_code("abc")) == 7

    @pytest.mark.parametrize("user_name", ["", "a", "ab"])
    def test_short_name_rejected(self, user_name: str) -> None:
        """Names shorter than the 3-character prefix raise ValidationError."""
        with pytest.raises(ValidationError):
            generate_referral_code(user_name)

    def test_suffix_comes_from_fresh_uuid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fixed = uuid.UUID("1f2a3b4c-0000-4000-8000-000000000000")
        monkeypatch.setattr("invito.domain.codes.uuid.uuid4", lambda: fixed)

        assert generate_referral_code("ann") == "ann1f2a"

    def test_codes_vary(self) -> None:
        """Suffixes are random (probability of 10 equal codes is negligible)."""
        codes = {generate_referral_code("ann") for _ in range(10)}
        assert len(codes) >= 2


class TestReferralResolver:
    """Tests for resolve() and credit()."""

    def test_resolve_returns_matching_user(self, make_user) -> None:
        referrer = make_user("ann")
        repo = Mock()
        repo.find_by_ref_code.return_value = referrer

        assert ReferralResolver(repo).resolve("ann1f2a") is referrer
        repo.find_by_ref_code.assert_called_once_with("ann1f2a")

    def test_resolve_missing_code_raises_not_found(self) -> None:
        repo = Mock()
        repo.find_by_ref_code.return_value = None

        with pytest.raises(ReferralCodeNotFound) as exc_info:
            ReferralResolver(repo).resolve("doesnotexist")

        assert exc_info.value.code == "doesnotexist"
        assert str(exc_info.value) == "User with referral code: doesnotexist not found"

    def test_credit_is_single_atomic_increment(self) -> None:
        """credit() delegates to the store increment and never reads the row."""
        repo = Mock()
        repo.increment_referral_count.return_value = True
        user_id = uuid.uuid4()

        ReferralResolver(repo).credit(user_id)

        repo.increment_referral_count.assert_called_once_with(user_id)
        repo.get_user.assert_not_called()
        repo.update_user.assert_not_called()

    def test_credit_missing_referrer_raises_store_error(self) -> None:
        repo = Mock()
        repo.increment_referral_count.return_value = False

        with pytest.raises(StoreError):
            ReferralResolver(repo).credit(uuid.uuid4())

    def test_credit_propagates_store_error(self) -> None:
        repo = Mock()
        repo.increment_referral_count.side_effect = StoreError("timeout")

        with pytest.raises(StoreError, match="timeout"):
            ReferralResolver(repo).credit(uuid.uuid4())
