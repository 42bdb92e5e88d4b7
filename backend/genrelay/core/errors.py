"""
Structured error handling with stable error codes.

No stack traces or raw vendor payloads are exposed to clients. Provider
failures are classified into a small taxonomy so the orchestrator can record
them as attempt outcomes, and entry points map the survivors to stable,
documented error codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from genrelay.services.orchestrator import AttemptOutcome

# Upper bound for any vendor-supplied text that reaches logs or clients.
MAX_DIAGNOSTIC_CHARS = 300


def truncate(text: str | None, limit: int = MAX_DIAGNOSTIC_CHARS) -> str:
    """Bound a diagnostic string to ``limit`` characters."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...(truncated)"


class ErrorCode(str, Enum):
    """Stable error codes for API responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"

    # Client input errors
    MISSING_MESSAGES = "MISSING_MESSAGES"
    MISSING_PROMPT = "MISSING_PROMPT"
    MISSING_TEXT = "MISSING_TEXT"

    # Provider errors
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"
    CAPABILITY_DECLINED = "CAPABILITY_DECLINED"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    PROVIDER_UNREACHABLE = "PROVIDER_UNREACHABLE"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_BAD_RESPONSE = "PROVIDER_BAD_RESPONSE"
    PROVIDER_AUTH_FAILED = "PROVIDER_AUTH_FAILED"
    PROVIDER_RATE_LIMITED = "PROVIDER_RATE_LIMITED"
    ALL_PROVIDERS_FAILED = "ALL_PROVIDERS_FAILED"


class ErrorType(str, Enum):
    """Failure classification recorded on each attempt outcome."""

    CONFIGURATION = "configuration"
    DECLINED = "declined"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    UPSTREAM = "upstream"
    NETWORK = "network"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error response for API.

    Format: {error, code, request_id?, ...details}
    """

    code: ErrorCode
    message: str
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        body: dict[str, Any] = {
            "error": self.message,
            "code": self.code.value,
        }
        if self.request_id:
            body["request_id"] = self.request_id
        if self.details:
            body.update(self.details)
        return body


class AppError(Exception):
    """Base application error with structured error detail."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_response(self, request_id: str | None = None) -> ErrorResponse:
        """Create error response with request ID."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            request_id=request_id,
            details=self.details,
        )


# Client input errors
class MissingFieldError(AppError):
    """Required request field missing or empty (400)."""

    def __init__(self, field: str, code: ErrorCode):
        super().__init__(code, f"Missing {field}", 400, {"field": field})


class RequestCancelledError(AppError):
    """The caller went away before a provider answered (499)."""

    def __init__(self, message: str = "Request cancelled by client"):
        super().__init__(ErrorCode.REQUEST_CANCELLED, message, 499)


# Provider errors
class ProviderError(AppError):
    """Base class for failures raised by a vendor adapter (502)."""

    error_type: ErrorType = ErrorType.UPSTREAM

    def __init__(
        self,
        message: str = "Provider error",
        details: dict[str, Any] | None = None,
        *,
        code: ErrorCode = ErrorCode.PROVIDER_ERROR,
        status_code: int = 502,
    ):
        super().__init__(code, message, status_code, details)

    @property
    def upstream_status(self) -> int | None:
        """HTTP status reported by the vendor, when there was one."""
        if not self.details:
            return None
        status = self.details.get("status")
        return status if isinstance(status, int) else None


class ProviderConfigurationError(ProviderError):
    """Vendor has no credential or URL at all. Benign in partial deployments."""

    error_type = ErrorType.CONFIGURATION

    def __init__(self, message: str = "Provider not configured", details: dict[str, Any] | None = None):
        super().__init__(message, details, code=ErrorCode.PROVIDER_NOT_CONFIGURED, status_code=503)


class CapabilityDeclinedError(ProviderError):
    """Vendor does not support the requested capability or input."""

    error_type = ErrorType.DECLINED

    def __init__(self, message: str = "Capability not supported", details: dict[str, Any] | None = None):
        super().__init__(message, details, code=ErrorCode.CAPABILITY_DECLINED, status_code=501)


class ProviderTimeoutError(ProviderError):
    """Attempt exceeded its time budget (504)."""

    error_type = ErrorType.TIMEOUT

    def __init__(self, message: str = "Provider request timed out", details: dict[str, Any] | None = None):
        super().__init__(message, details, code=ErrorCode.PROVIDER_TIMEOUT, status_code=504)


class NetworkError(ProviderError):
    """Connection-level failure: refused, DNS, reset (503)."""

    error_type = ErrorType.NETWORK

    def __init__(self, message: str = "Provider unreachable", details: dict[str, Any] | None = None):
        super().__init__(message, details, code=ErrorCode.PROVIDER_UNREACHABLE, status_code=503)


class UpstreamError(ProviderError):
    """Vendor answered with a non-success status (502)."""

    error_type = ErrorType.UPSTREAM


class ProviderBadResponseError(UpstreamError):
    """Provider returned malformed response (502)."""

    def __init__(
        self, message: str = "Provider returned invalid response", details: dict[str, Any] | None = None
    ):
        super().__init__(message, details, code=ErrorCode.PROVIDER_BAD_RESPONSE)


class ProviderAuthError(UpstreamError):
    """Provider authentication failed (401/403)."""

    def __init__(
        self,
        message: str = "Provider authentication failed",
        status_code: int = 401,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details, code=ErrorCode.PROVIDER_AUTH_FAILED, status_code=status_code)


class ProviderRateLimitError(UpstreamError):
    """Provider rate limit exceeded (429)."""

    def __init__(self, message: str = "Provider rate limit exceeded", details: dict[str, Any] | None = None):
        super().__init__(message, details, code=ErrorCode.PROVIDER_RATE_LIMITED, status_code=429)


_FAILURE_ACTIONS = {
    "text": "generate text",
    "image": "generate image",
    "tts": "generate audio",
}


class AllProvidersFailedError(AppError):
    """Every provider in the fallback order declined or failed (502).

    Carries the aggregated attempt outcomes in attempt order.
    """

    def __init__(
        self,
        capability: str,
        outcomes: list[AttemptOutcome],
        message: str | None = None,
    ):
        self.capability = capability
        self.outcomes = list(outcomes)
        action = _FAILURE_ACTIONS.get(capability, f"complete {capability} request")
        super().__init__(
            ErrorCode.ALL_PROVIDERS_FAILED,
            message or f"Unable to {action}: all providers failed",
            502,
            {
                "attemptedProviders": [outcome.provider_id for outcome in self.outcomes],
                "details": [outcome.to_dict() for outcome in self.outcomes],
            },
        )

    @property
    def attempted_providers(self) -> list[str]:
        return [outcome.provider_id for outcome in self.outcomes]
