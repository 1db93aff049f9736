"""Tests for token verification."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import JWT_ALGORITHM, create_access_token, decode_access_token


class TestTokens:
    """Tests for create/decode of access tokens."""

    def test_round_trip(self):
        data = decode_access_token(create_access_token("alice"))

        assert data.sub == "alice"
        assert data.iss == "cryptobrief"
        assert data.aud == "cryptobrief-api"
        assert data.exp > data.iat

    def test_admin_membership(self):
        assert decode_access_token(create_access_token("admin")).is_admin
        assert not decode_access_token(create_access_token("alice")).is_admin

    def test_expired_token(self):
        token = create_access_token("alice", expires_delta=timedelta(seconds=-5))

        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)

        assert exc_info.value.error_code == "TOKEN_EXPIRED"

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": "alice", "iss": "cryptobrief", "aud": "cryptobrief-api"},
            "some-other-secret-that-is-long-enough",
            algorithm=JWT_ALGORITHM,
        )

        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)

        assert exc_info.value.error_code == "INVALID_TOKEN"

    def test_missing_claims(self):
        token = jwt.encode({"sub": "alice"}, settings.auth_secret, algorithm=JWT_ALGORITHM)

        with pytest.raises(AuthenticationError):
            decode_access_token(token)
