"""
Base provider interface.

Defines the contract that all vendor adapters must implement. Every
generation operation declines by default without performing any I/O;
adapters override only the capabilities their vendor supports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from genrelay.core import CapabilityDeclinedError
from genrelay.providers.types import (
    AudioResult,
    Capability,
    ImageRequest,
    ImageResult,
    ProviderConfig,
    ProviderDescriptor,
    SpeechRequest,
    TextRequest,
    TextResult,
)


class BaseProvider(ABC):
    """
    Abstract base class for vendor adapters.

    Adapters receive their configuration at construction and treat it as
    immutable. They must not swallow ``asyncio.CancelledError``: task
    cancellation is how the orchestrator enforces timeouts and client
    disconnects.
    """

    provider_id: str
    display_name: str
    capabilities: ClassVar[frozenset[Capability]] = frozenset()

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.provider_id = config.provider_id

    @property
    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(id=self.provider_id, display_name=self.display_name)

    @abstractmethod
    def is_configured(self) -> bool:
        """
        Whether the adapter has the minimum configuration to attempt a call.

        Must be pure and synchronous: no I/O.
        """
        ...

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def _decline(self, capability: Capability) -> CapabilityDeclinedError:
        return CapabilityDeclinedError(
            f"{self.display_name} does not support {capability.value} generation",
            details={"provider": self.provider_id, "capability": capability.value},
        )

    async def generate_text(self, request: TextRequest) -> TextResult | None:
        """
        Generate text for a chat-style request.

        Returns:
            TextResult, or None when the vendor had nothing usable to say

        Raises:
            CapabilityDeclinedError: vendor does not do text
            ProviderError: vendor call failed
        """
        raise self._decline(Capability.TEXT)

    async def generate_image(self, request: ImageRequest) -> ImageResult | None:
        """Generate an image; see ``generate_text`` for the result contract."""
        raise self._decline(Capability.IMAGE)

    async def generate_speech(self, request: SpeechRequest) -> AudioResult | None:
        """Synthesize speech; see ``generate_text`` for the result contract."""
        raise self._decline(Capability.TTS)

    async def aclose(self) -> None:
        """Close any underlying resources (optional)."""
        return None
