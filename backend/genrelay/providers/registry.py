"""Provider registry: provider id -> adapter instance, built once at startup."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from genrelay.config.providers import build_provider_config, discover_generic_provider_ids
from genrelay.config.settings import Settings
from genrelay.core import get_logger
from genrelay.providers.base import BaseProvider
from genrelay.providers.gemini import GeminiProvider
from genrelay.providers.generic import GenericProvider
from genrelay.providers.grok import GrokProvider
from genrelay.providers.murf import MurfProvider
from genrelay.providers.openai import OpenAIProvider
from genrelay.providers.pollinations import PollinationsProvider
from genrelay.providers.types import Capability

logger = get_logger(__name__)

# Known vendor integrations. Any other id with a PROVIDER_{ID}_API_URL setting
# is served by GenericProvider; ids with neither are left unregistered.
PROVIDER_FACTORIES: dict[str, type[BaseProvider]] = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
    "grok": GrokProvider,
    "murf": MurfProvider,
    "pollinations": PollinationsProvider,
}


class ProviderRegistry:
    """Instantiate and hold provider adapters. Read-only once built."""

    def __init__(
        self,
        settings: Settings | None = None,
        environ: Mapping[str, str] | None = None,
        transport_overrides: dict[str, httpx.AsyncBaseTransport] | None = None,
        providers: Iterable[BaseProvider] | None = None,
    ):
        self.settings = settings
        self.providers: dict[str, BaseProvider] = {}
        self._environ = environ
        self._transport_overrides = transport_overrides or {}

        if providers is not None:
            for provider in providers:
                self.providers[provider.provider_id] = provider
        else:
            self._initialize(settings or Settings())

    def _transport(self, provider_id: str) -> httpx.AsyncBaseTransport | None:
        return self._transport_overrides.get(provider_id)

    def _initialize(self, settings: Settings) -> None:
        for provider_id, factory in PROVIDER_FACTORIES.items():
            config = build_provider_config(provider_id, settings, self._environ)
            self.providers[provider_id] = factory(config, transport=self._transport(provider_id))

        for provider_id in discover_generic_provider_ids(self._environ):
            if provider_id in self.providers:
                continue
            config = build_provider_config(provider_id, settings, self._environ)
            self.providers[provider_id] = GenericProvider(
                config, transport=self._transport(provider_id)
            )

        logger.info(
            "Provider registry initialized",
            data={
                "providers": list(self.providers.keys()),
                "configured": [pid for pid, p in self.providers.items() if p.is_configured()],
            },
        )

    def get(self, provider_id: str) -> BaseProvider | None:
        """Return the adapter for ``provider_id``, or None when unregistered."""
        return self.providers.get(provider_id.strip().lower())

    def describe(self) -> list[dict[str, Any]]:
        """Summarize registered providers without touching the network."""
        return [
            {
                "id": provider_id,
                "name": provider.display_name,
                "configured": provider.is_configured(),
                "capabilities": sorted(
                    capability.value for capability in Capability if provider.supports(capability)
                ),
            }
            for provider_id, provider in self.providers.items()
        ]

    async def aclose(self) -> None:
        """Close all provider clients."""
        for provider in self.providers.values():
            try:
                await provider.aclose()
            except Exception:  # pragma: no cover
                logger.warning(
                    "Error closing provider client", data={"provider": provider.provider_id}
                )
