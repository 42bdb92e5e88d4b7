"""Configuration module for genrelay."""

from genrelay.config.providers import (
    build_provider_config,
    discover_generic_provider_ids,
)
from genrelay.config.resolution import (
    DEFAULT_PROVIDER_ORDERS,
    apply_primary_override,
    resolve_provider_order,
    resolve_timeout_ms,
)
from genrelay.config.settings import Settings, get_request_settings, get_settings

__all__ = [
    "DEFAULT_PROVIDER_ORDERS",
    "Settings",
    "apply_primary_override",
    "build_provider_config",
    "discover_generic_provider_ids",
    "get_request_settings",
    "get_settings",
    "resolve_provider_order",
    "resolve_timeout_ms",
]
