"""
Per-request resolution of provider fallback orders and attempt timeouts.

Orders come from the capability-specific provider list, fall back to a
hard-coded default, and honor the legacy single-primary override. Unknown
provider ids are kept on purpose so misconfiguration surfaces as a
"not found" attempt instead of silently shrinking the chain.
"""

from __future__ import annotations

from collections.abc import Iterable

from genrelay.config.settings import Settings
from genrelay.providers.types import Capability

DEFAULT_PROVIDER_ORDERS: dict[Capability, tuple[str, ...]] = {
    Capability.TEXT: ("gemini", "openai", "grok"),
    Capability.IMAGE: ("openai", "pollinations"),
    Capability.TTS: ("openai", "murf"),
}

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_IMAGE_TIMEOUT_MS = 60_000


def dedupe_order(provider_ids: Iterable[str]) -> tuple[str, ...]:
    """Normalize ids and collapse duplicates, keeping first occurrence."""
    seen: dict[str, None] = {}
    for provider_id in provider_ids:
        normalized = provider_id.strip().lower()
        if normalized and normalized not in seen:
            seen[normalized] = None
    return tuple(seen)


def apply_primary_override(order: Iterable[str], primary: str | None) -> tuple[str, ...]:
    """Move ``primary`` to the front, preserving the rest's relative order."""
    resolved = dedupe_order(order)
    primary_id = (primary or "").strip().lower()
    if not primary_id:
        return resolved
    return (primary_id,) + tuple(pid for pid in resolved if pid != primary_id)


def _configured_order(settings: Settings, capability: Capability) -> list[str]:
    if capability is Capability.TEXT:
        return settings.text_providers_list
    if capability is Capability.IMAGE:
        return settings.image_providers_list
    return settings.tts_providers_list


def _primary_override(settings: Settings, capability: Capability) -> str:
    if capability is Capability.TEXT:
        return settings.primary_text_provider
    if capability is Capability.IMAGE:
        return settings.primary_image_provider
    return settings.primary_tts_provider


def resolve_provider_order(settings: Settings, capability: Capability) -> tuple[str, ...]:
    """Resolve the ordered, never-empty provider list for ``capability``."""
    configured = dedupe_order(_configured_order(settings, capability))
    order = configured or DEFAULT_PROVIDER_ORDERS[capability]
    order = apply_primary_override(order, _primary_override(settings, capability))

    if capability is Capability.TTS and settings.audio_fallback_provider:
        fallback = settings.audio_fallback_provider
        if fallback not in order:
            order = order + (fallback,)

    return order


def parse_timeout_ms(raw: str | int | None, default: int) -> int:
    """Parse a millisecond setting; absent, non-numeric or non-positive gives ``default``."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def resolve_timeout_ms(settings: Settings, capability: Capability) -> int:
    """Resolve the per-attempt timeout for ``capability`` in milliseconds."""
    if capability is Capability.IMAGE:
        if settings.image_timeout_ms is not None:
            return parse_timeout_ms(settings.image_timeout_ms, DEFAULT_IMAGE_TIMEOUT_MS)
        return parse_timeout_ms(settings.timeout_ms, DEFAULT_IMAGE_TIMEOUT_MS)
    return parse_timeout_ms(settings.timeout_ms, DEFAULT_TIMEOUT_MS)
