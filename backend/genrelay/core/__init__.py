"""Core module with logging, errors, metrics, and middleware."""

from genrelay.core.errors import (
    AllProvidersFailedError,
    AppError,
    CapabilityDeclinedError,
    ErrorCode,
    ErrorResponse,
    ErrorType,
    MissingFieldError,
    NetworkError,
    ProviderAuthError,
    ProviderBadResponseError,
    ProviderConfigurationError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    RequestCancelledError,
    UpstreamError,
    truncate,
)
from genrelay.core.logging import capability_ctx, get_logger, request_id_ctx, setup_logging
from genrelay.core.metrics import metrics

__all__ = [
    "AllProvidersFailedError",
    "AppError",
    "CapabilityDeclinedError",
    "ErrorCode",
    "ErrorResponse",
    "ErrorType",
    "MissingFieldError",
    "NetworkError",
    "ProviderAuthError",
    "ProviderBadResponseError",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderRateLimitError",
    "ProviderTimeoutError",
    "RequestCancelledError",
    "UpstreamError",
    "truncate",
    "capability_ctx",
    "get_logger",
    "request_id_ctx",
    "setup_logging",
    "metrics",
]
