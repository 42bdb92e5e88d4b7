"""
Shared HTTP client helpers for vendor adapters.

Provides consistent timeouts and error mapping so adapters raise stable
ProviderError subclasses without leaking stack traces or full vendor bodies.
A request is attempted exactly once: retrying a provider inside one fallback
run is not allowed, the next provider in the order is the retry.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any

import httpx

from genrelay.core import (
    NetworkError,
    ProviderAuthError,
    ProviderBadResponseError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    UpstreamError,
    get_logger,
    request_id_ctx,
    truncate,
)
from genrelay.providers.types import ImageResult, ResultEnvelope, TextResult

logger = get_logger(__name__)

# Ceiling for a single HTTP exchange; the orchestrator applies the real budget.
DEFAULT_CLIENT_TIMEOUT_SECONDS = 120.0

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+/-]*)(?:;[\w.+=-]+)*;base64,", re.IGNORECASE)


def create_http_client(
    base_url: str = "",
    timeout_seconds: float = DEFAULT_CLIENT_TIMEOUT_SECONDS,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient with consistent timeout settings.

    Args:
        base_url: Base URL for the provider (absolute request URLs still work).
        timeout_seconds: Per-phase timeout for requests.
        headers: Default headers to include.
        transport: Optional transport (used by tests with MockTransport).
    """
    timeout = httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 10.0))
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        headers=headers or {},
        transport=transport,
    )


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider_id: str,
    **kwargs: Any,
) -> httpx.Response:
    """
    Execute one HTTP request and map transport failures to provider errors.

    Status codes are not inspected here; call ``raise_for_status`` next.
    """
    headers = kwargs.pop("headers", {}) or {}
    request_id = request_id_ctx.get()
    if request_id and "X-Request-ID" not in headers:
        headers["X-Request-ID"] = request_id
    kwargs["headers"] = headers

    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise ProviderTimeoutError(
            "Provider request timed out",
            details={"provider": provider_id, "reason": truncate(str(exc) or type(exc).__name__)},
        ) from exc
    except httpx.TransportError as exc:
        raise NetworkError(
            "Provider unreachable",
            details={"provider": provider_id, "reason": truncate(str(exc) or type(exc).__name__)},
        ) from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(
            "Provider request failed",
            details={"provider": provider_id, "reason": truncate(str(exc))},
        ) from exc


def raise_for_status(response: httpx.Response, provider_id: str) -> None:
    """
    Map HTTP status codes to stable ProviderError types.
    """
    status = response.status_code
    if status < 400:
        return

    details = _safe_error_details(response, provider_id)
    logger.warning("Provider HTTP error", data=details)

    if status in (401, 403):
        raise ProviderAuthError(details=details, status_code=status)
    if status == 429:
        raise ProviderRateLimitError(details=details)
    raise UpstreamError(f"Provider returned HTTP {status}", details=details)


def parse_json(response: httpx.Response, provider_id: str) -> Any:
    """
    Parse JSON with consistent error handling.
    """
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProviderBadResponseError(
            "Provider returned invalid response",
            details={"provider": provider_id, "body": truncate(response.text)},
        ) from exc


def clean_json(text: str | None) -> str:
    """Strip markdown code fences and surrounding chatter from a JSON reply."""
    if not text:
        return "{}"
    clean = _FENCE_RE.sub("", text).strip()
    start = clean.find("{")
    end = clean.rfind("}")
    if start != -1 and end != -1 and end > start:
        return clean[start : end + 1]
    return clean


def normalize_base64(value: Any, provider_id: str) -> tuple[str, str | None]:
    """
    Validate an inline base64 payload.

    Accepts bare base64 or a ``data:<mime>;base64,`` URL and returns the bare
    payload plus the MIME type the data URL declared, if any.

    Raises:
        ProviderBadResponseError: payload is not a string or not valid base64
    """
    if not isinstance(value, str):
        raise ProviderBadResponseError(
            "Provider returned a non-string base64 payload",
            details={"provider": provider_id},
        )
    payload = value.strip()
    mime_type = None
    match = _DATA_URL_RE.match(payload)
    if match:
        mime_type = match.group("mime") or None
        payload = payload[match.end() :]
    payload = "".join(payload.split())
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ProviderBadResponseError(
            "Provider returned invalid base64 payload",
            details={"provider": provider_id, "body": truncate(payload, 60)},
        ) from exc
    return payload, mime_type


def normalize_envelope(result: ResultEnvelope, provider_id: str) -> None:
    """Check URL and inline fields of a media envelope before it is accepted."""
    if isinstance(result, TextResult):
        return
    url = result.image_url if isinstance(result, ImageResult) else result.audio_url
    if url is not None and not isinstance(url, str):
        raise ProviderBadResponseError(
            "Provider returned a non-string media URL",
            details={"provider": provider_id},
        )
    if result.base64:
        result.base64, mime_type = normalize_base64(result.base64, provider_id)
        if mime_type:
            result.mime_type = mime_type


def _safe_error_details(response: httpx.Response, provider_id: str) -> dict[str, Any]:
    """Return a small, non-sensitive error payload for debugging."""
    try:
        body_snippet = truncate(response.text)
    except UnicodeDecodeError:
        body_snippet = ""

    return {
        "provider": provider_id,
        "status": response.status_code,
        "body": body_snippet,
    }
