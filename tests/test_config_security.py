"""
Tests for settings validation and bearer token verification
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from pydantic import ValidationError

from backoffice.core.config import Settings, get_settings
from backoffice.core.security import Actor, InvalidTokenError, decode_access_token
from backoffice.schemas.common import normalize_page


class TestSettings:

    def test_log_level_is_normalized(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="chatty")

    @pytest.mark.parametrize("field", ["LOCK_TIMEOUT_MS", "LEDGER_MAX_PAGE_SIZE", "RECENT_LOGS_LIMIT"])
    def test_limits_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_get_settings_applies_overrides(self):
        settings = get_settings(LOCK_TIMEOUT_MS=1500)
        assert settings.LOCK_TIMEOUT_MS == 1500
        assert get_settings() is not settings

    def test_environment_is_read(self, monkeypatch):
        monkeypatch.setenv("LEDGER_DEFAULT_PAGE_SIZE", "7")
        assert Settings().LEDGER_DEFAULT_PAGE_SIZE == 7


class TestPaging:

    @pytest.mark.parametrize("page, size, expected", [
        (1, 20, (1, 20)),
        (0, 20, (1, 20)),
        (-3, 5, (1, 5)),
        (2, 0, (2, 20)),
        (2, 101, (2, 20)),
        (4, 100, (4, 100)),
    ])
    def test_normalize_page(self, page, size, expected):
        assert normalize_page(page, size, 20, 100) == expected


class TestDecodeAccessToken:

    def test_valid_token(self, settings, token_factory):
        actor = decode_access_token(token_factory(7, role="ADMIN"), settings)
        assert actor == Actor(id=7, role="ADMIN", username="staff")

    def test_sub_claim_fallback(self, settings):
        token = jwt.encode(
            {"sub": "12", "role": "STAFF", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        assert decode_access_token(token, settings).id == 12

    def test_wrong_signature_rejected(self, settings):
        token = jwt.encode({"user_id": 1}, "another-secret", algorithm=settings.ALGORITHM)
        with pytest.raises(InvalidTokenError):
            decode_access_token(token, settings)

    def test_expired_token_rejected(self, settings, token_factory):
        token = token_factory(1, exp=datetime.now(timezone.utc) - timedelta(minutes=1))
        with pytest.raises(InvalidTokenError):
            decode_access_token(token, settings)

    def test_token_without_identity_rejected(self, settings):
        token = jwt.encode({"role": "STAFF"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        with pytest.raises(InvalidTokenError, match="does not identify"):
            decode_access_token(token, settings)
