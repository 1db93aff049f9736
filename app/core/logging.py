"""Structured logging configuration with request ID tracking.

Modules log through ``get_logger(name)`` and attach context with
``log_fields``::

    logger.warning("coingecko unavailable", extra=log_fields(provider="coingecko", reason="HTTP 429"))

Both formatters render those fields; provider credentials are redacted from
messages and fields before anything is written.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import settings


# Context variable for request ID tracking
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "extra_fields", None)
    return dict(fields) if isinstance(fields, dict) else {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        # Context fields never overwrite the envelope keys above
        for key, value in _record_fields(record).items():
            log_data.setdefault(key, value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            log_data["location"] = f"{record.filename}:{record.lineno} ({record.funcName})"

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get()
        rid = f"[{request_id[:8]}] " if request_id else ""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{timestamp} {record.levelname:8} {rid}{record.name}: {record.getMessage()}"

        fields = _record_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class SensitiveDataFilter(logging.Filter):
    """Redact provider credentials from messages and structured fields.

    Provider keys travel in query strings (``auth_token=``,
    ``x_cg_demo_api_key=``) and headers (``Authorization: Bearer ...``).
    """

    SENSITIVE_KEYS = (
        "x_cg_demo_api_key",
        "auth_token",
        "auth_secret",
        "access_token",
        "api_key",
        "authorization",
        "secret",
        "token",
    )

    _PATTERNS = [
        re.compile(rf"((?:'|\")?{key}(?:'|\")?\s*[=:]\s*(?:'|\")?)(?:bearer\s+)?[^\s,&'\"}}\[\]]+", re.IGNORECASE)
        for key in SENSITIVE_KEYS
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None

        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, dict):
            record.extra_fields = {
                key: self._redact_field(key, value) for key, value in fields.items()
            }
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        for pattern in cls._PATTERNS:
            text = pattern.sub(rf"\1{REDACTED}", text)
        return text

    @classmethod
    def _redact_field(cls, key: str, value: Any) -> Any:
        if key.lower() in cls.SENSITIVE_KEYS:
            return REDACTED
        if isinstance(value, str):
            return cls.redact(value)
        return value


def setup_logging() -> None:
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, settings.log_level))
    handler.setFormatter(StructuredFormatter() if settings.log_format == "json" else TextFormatter())
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)

    # httpx logs full request URLs, which carry provider keys
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the cryptobrief prefix."""
    return logging.getLogger(f"cryptobrief.{name}")


def log_fields(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping understood by both formatters."""
    return {"extra_fields": fields}
