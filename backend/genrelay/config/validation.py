"""
Startup validation of routing configuration.

Nothing here is fatal: missing settings fall back to defaults. The report
only makes partial configuration visible in the logs.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from genrelay.config.providers import PROVIDER_ENV_PATTERNS, build_provider_config, env_name
from genrelay.config.settings import Settings
from genrelay.core.logging import get_logger

logger = get_logger(__name__)

# Category -> settings attribute names checked for presence.
ENV_CONFIG: dict[str, tuple[str, ...]] = {
    "TTS": ("tts_providers", "primary_tts_provider", "default_tts_voice", "audio_fallback_provider"),
    "TEXT": ("text_providers", "primary_text_provider"),
    "IMAGE": ("image_providers", "primary_image_provider"),
    "GENERAL": ("timeout_ms",),
}

_PROVIDER_LIST_FIELDS = {"TTS": "tts_providers", "TEXT": "text_providers", "IMAGE": "image_providers"}


@dataclass
class CategoryReport:
    """Presence report for one configuration category."""

    configured: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    """Aggregated configuration report across all categories."""

    categories: dict[str, CategoryReport]
    has_any_provider_config: bool

    @property
    def all_warnings(self) -> list[str]:
        warnings: list[str] = []
        for report in self.categories.values():
            warnings.extend(report.warnings)
        return warnings


def validate_category(settings: Settings, category: str, names: tuple[str, ...]) -> CategoryReport:
    report = CategoryReport()
    for name in names:
        value = getattr(settings, name, None)
        env = name.upper()
        if value is None or not str(value).strip():
            report.missing.append(env)
            report.warnings.append(f"[{category}] Environment variable '{env}' is not set")
        else:
            report.configured.append(env)
    return report


def validate_provider_env(
    provider_id: str,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> CategoryReport:
    """Report which ``PROVIDER_{ID}_*`` variables are set for one provider."""
    environ = os.environ if environ is None else environ
    report = CategoryReport()
    for pattern in PROVIDER_ENV_PATTERNS.values():
        name = env_name(pattern, provider_id)
        if environ.get(name, "").strip():
            report.configured.append(name)
        else:
            report.missing.append(name)

    config = build_provider_config(provider_id, settings, environ)
    if not config.base_url and not config.api_key:
        report.warnings.append(
            f"Provider '{provider_id}': no API URL or key configured "
            f"(checked {env_name(PROVIDER_ENV_PATTERNS['url'], provider_id)})"
        )
    return report


def validate_environment(settings: Settings) -> ValidationReport:
    """Run validation for all categories."""
    categories = {
        category: validate_category(settings, category, names)
        for category, names in ENV_CONFIG.items()
    }
    has_any = any(
        bool(getattr(settings, attr).strip()) for attr in _PROVIDER_LIST_FIELDS.values()
    )
    return ValidationReport(categories=categories, has_any_provider_config=has_any)


def log_validation_warnings(settings: Settings, verbose: bool = False) -> ValidationReport:
    """Log configuration warnings; returns the report for callers that want it."""
    report = validate_environment(settings)
    if verbose and report.all_warnings:
        logger.warning(
            "Environment configuration warnings",
            data={"warnings": report.all_warnings},
        )
    if not report.has_any_provider_config:
        logger.warning("No provider orders configured; using default fallback orders")
    return report
