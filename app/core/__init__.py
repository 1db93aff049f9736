"""Core infrastructure: settings, security, logging, exceptions, clock."""

from .clock import Clock, SystemClock, get_clock
from .config import settings
from .exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    InvalidVoteError,
    NotFoundError,
    ProviderUnavailableError,
    SerializationError,
    ValidationError,
)
from .security import (
    TokenData,
    create_access_token,
    decode_access_token,
)


__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "Clock",
    "InvalidVoteError",
    "NotFoundError",
    "ProviderUnavailableError",
    "SerializationError",
    "SystemClock",
    "TokenData",
    "ValidationError",
    "create_access_token",
    "decode_access_token",
    "get_clock",
    "settings",
]
