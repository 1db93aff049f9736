"""Application errors and the handlers that render them as JSON.

Services raise these; the API layer never builds error bodies by hand.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Error with an HTTP status and a stable machine-readable code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.status_code = status_code or self.status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Body returned to API clients."""
        return {
            "error": self.error_code,
            "message": self.message,
            "status": self.status_code,
            **({"details": self.details} if self.details else {}),
        }


class NotFoundError(AppException):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    message = "Resource not found"


class AuthenticationError(AppException):
    """Missing, expired or invalid credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "AUTHENTICATION_FAILED"
    message = "Authentication required"


class AuthorizationError(AppException):
    """Authenticated, but not allowed."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    message = "You don't have permission to access this resource"


class ValidationError(AppException):
    """Validation failed."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    error_code = "VALIDATION_ERROR"
    message = "Validation failed"


class InvalidVoteError(ValidationError):
    """Vote value outside of -1, 0, 1."""

    error_code = "INVALID_VOTE"
    message = "Vote must be -1, 0, or 1"


class ProviderUnavailableError(AppException):
    """A third-party data provider failed or returned malformed data.

    Raised inside provider clients only; callers at the integration
    boundary turn it into an empty or fallback payload.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "PROVIDER_UNAVAILABLE"
    message = "External data provider temporarily unavailable"

    def __init__(self, provider: str, reason: str, **kwargs: Any):
        self.provider = provider
        self.reason = reason
        details = {"provider": provider, "reason": reason}
        super().__init__(message=f"{provider}: {reason}", details=details, **kwargs)


class SerializationError(AppException):
    """Stored payload could not be parsed back."""

    error_code = "SERIALIZATION_FAILURE"
    message = "Failed to parse stored content"


class JobError(AppException):
    """A scheduled or manually triggered job failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "JOB_ERROR"
    message = "Job execution failed"


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _error_response(request: Request, status_code: int, body: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers={"X-Request-ID": _request_id(request)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render AppException subclasses as ``{error, message, status, details?}``.

    Anything else is logged with its traceback and reported as a bare
    INTERNAL_ERROR; the exception text is only echoed back in debug mode.
    """
    from .config import settings
    from .logging import get_logger, log_fields

    logger = get_logger("error")

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            extra=log_fields(
                request_id=_request_id(request),
                path=request.url.path,
                method=request.method,
            ),
        )
        fallback = AppException(message=str(exc) if settings.debug else None)
        return _error_response(request, fallback.status_code, fallback.to_dict())
