"""Bearer token verification.

Tokens are issued by the account service; this API only checks the
signature and reads the username from ``sub``.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel

from .config import settings
from .exceptions import AuthenticationError


JWT_ALGORITHM = "HS256"
JWT_ISSUER = "cryptobrief"
JWT_AUDIENCE = "cryptobrief-api"


class TokenData(BaseModel):
    """Decoded JWT token data."""

    sub: str  # username
    exp: datetime
    iat: datetime
    iss: str
    aud: str
    jti: str

    @property
    def is_admin(self) -> bool:
        return self.sub in settings.admin_users


def create_access_token(
    username: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token (used by tooling and tests)."""
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    payload = {
        "sub": username,
        "exp": expires,
        "iat": now,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "jti": secrets.token_urlsafe(16),
    }

    return jwt.encode(payload, settings.auth_secret, algorithm=JWT_ALGORITHM)


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(value, tz=timezone.utc)


def decode_access_token(token: str) -> TokenData:
    """Decode and validate JWT access token."""
    try:
        payload = jwt.decode(
            token,
            settings.auth_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=JWT_ISSUER,
            audience=JWT_AUDIENCE,
            options={
                "require": ["exp", "iat", "sub", "iss", "aud", "jti"],
            },
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired", error_code="TOKEN_EXPIRED")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid token", error_code="INVALID_TOKEN")

    return TokenData(
        sub=payload["sub"],
        exp=_as_datetime(payload["exp"]),
        iat=_as_datetime(payload["iat"]),
        iss=payload["iss"],
        aud=payload["aud"],
        jti=payload["jti"],
    )
