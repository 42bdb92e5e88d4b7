from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

import pytest

from genrelay.config import Settings
from genrelay.core import metrics
from genrelay.providers.base import BaseProvider
from genrelay.providers.types import (
    AudioResult,
    Capability,
    ImageRequest,
    ImageResult,
    ProviderConfig,
    SpeechRequest,
    TextRequest,
    TextResult,
)

# Routing variables that would otherwise leak in from the developer's shell.
ROUTING_ENV_VARS = (
    "TEXT_PROVIDERS",
    "IMAGE_PROVIDERS",
    "TTS_PROVIDERS",
    "PRIMARY_TEXT_PROVIDER",
    "PRIMARY_IMAGE_PROVIDER",
    "PRIMARY_TTS_PROVIDER",
    "AUDIO_FALLBACK_PROVIDER",
    "TIMEOUT_MS",
    "IMAGE_TIMEOUT_MS",
    "DEFAULT_TTS_VOICE",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "XAI_API_KEY",
    "MURF_API_KEY",
)


class FakeProvider(BaseProvider):
    """Scriptable provider: returns ``result``, raises ``error``, or stalls for ``delay``."""

    def __init__(
        self,
        provider_id: str,
        *,
        result: Any = None,
        error: BaseException | None = None,
        delay: float = 0.0,
        configured: bool = True,
        capabilities: Iterable[Capability] | None = None,
    ):
        super().__init__(ProviderConfig(provider_id=provider_id))
        self.display_name = f"Fake {provider_id}"
        self.result = result
        self.error = error
        self.delay = delay
        self.configured = configured
        self.capabilities = frozenset(capabilities if capabilities is not None else Capability)
        self.calls: list[tuple[Capability, Any]] = []
        self.closed = False

    def is_configured(self) -> bool:
        return self.configured

    async def _respond(self, capability: Capability, request: Any) -> Any:
        if not self.supports(capability):
            raise self._decline(capability)
        self.calls.append((capability, request))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def generate_text(self, request: TextRequest) -> TextResult | None:
        return await self._respond(Capability.TEXT, request)

    async def generate_image(self, request: ImageRequest) -> ImageResult | None:
        return await self._respond(Capability.IMAGE, request)

    async def generate_speech(self, request: SpeechRequest) -> AudioResult | None:
        return await self._respond(Capability.TTS, request)

    async def aclose(self) -> None:
        self.closed = True


class DictLookup:
    """Minimal registry stand-in for orchestrator tests."""

    def __init__(self, *providers: BaseProvider):
        self.providers = {provider.provider_id: provider for provider in providers}

    def get(self, provider_id: str) -> BaseProvider | None:
        return self.providers.get(provider_id)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ROUTING_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    metrics.reset()


@pytest.fixture
def make_settings():
    def factory(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **overrides)

    return factory


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def lookup():
    return DictLookup
