"""
Per-provider configuration objects, built once when the registry is created.

Lookup order for each provider id ``foo``:

    PROVIDER_FOO_API_KEY / PROVIDER_FOO_API_URL / PROVIDER_FOO_API_ENDPOINT
    FOO_API_KEY / FOO_API_URL
    vendor-native settings (OPENAI_API_KEY, GEMINI_API_KEY, XAI_API_KEY, MURF_API_KEY)
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

from genrelay.config.settings import Settings
from genrelay.providers.types import ProviderConfig

PROVIDER_ENV_PATTERNS = {
    "url": "PROVIDER_{ID}_API_URL",
    "key": "PROVIDER_{ID}_API_KEY",
    "endpoint": "PROVIDER_{ID}_API_ENDPOINT",
}

_GENERIC_URL_RE = re.compile(r"^PROVIDER_(?P<id>[A-Z0-9_]+?)_API_URL$")


def env_name(pattern: str, provider_id: str) -> str:
    """Render one of PROVIDER_ENV_PATTERNS for ``provider_id``."""
    return pattern.replace("{ID}", provider_id.upper())


def _lookup(environ: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


def _vendor_native_key(settings: Settings, provider_id: str) -> str | None:
    keys = {
        "openai": settings.openai_api_key,
        "gemini": settings.gemini_api_key,
        "grok": settings.xai_api_key,
        "murf": settings.murf_api_key,
    }
    return keys.get(provider_id) or None


def build_provider_config(
    provider_id: str,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> ProviderConfig:
    """Build the immutable configuration for a single provider id."""
    environ = os.environ if environ is None else environ
    pid = provider_id.strip().lower()
    upper = pid.upper()

    api_key = _lookup(
        environ,
        env_name(PROVIDER_ENV_PATTERNS["key"], pid),
        f"{upper}_API_KEY",
    ) or _vendor_native_key(settings, pid)
    base_url = _lookup(
        environ,
        env_name(PROVIDER_ENV_PATTERNS["url"], pid),
        f"{upper}_API_URL",
    )
    endpoint = _lookup(environ, env_name(PROVIDER_ENV_PATTERNS["endpoint"], pid))

    extra: dict[str, str] = {}
    if pid == "openai" and settings.openai_tts_voice:
        extra["tts_voice"] = settings.openai_tts_voice

    return ProviderConfig(
        provider_id=pid,
        api_key=api_key,
        base_url=base_url,
        endpoint=endpoint,
        extra=extra,
    )


def discover_generic_provider_ids(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return provider ids that have a ``PROVIDER_{ID}_API_URL`` setting."""
    environ = os.environ if environ is None else environ
    found: list[str] = []
    for name in sorted(environ):
        match = _GENERIC_URL_RE.match(name)
        if match and environ[name].strip():
            provider_id = match.group("id").lower()
            if provider_id not in found:
                found.append(provider_id)
    return found
