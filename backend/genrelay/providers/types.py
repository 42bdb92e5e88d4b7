"""Provider-facing data types: capabilities, requests, and result envelopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Capability(str, Enum):
    """Generation capabilities a provider may implement."""

    TEXT = "text"
    IMAGE = "image"
    TTS = "tts"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Identity of a registered provider."""

    id: str
    display_name: str


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable per-provider configuration injected into an adapter."""

    provider_id: str
    api_key: str | None = None
    base_url: str | None = None
    endpoint: str | None = None
    extra: dict[str, str] = field(default_factory=dict)


@dataclass
class ChatMessage:
    """A single chat message."""

    role: str  # "system", "user", "assistant"
    content: str


@dataclass
class TextRequest:
    """Request for text generation."""

    messages: list[ChatMessage]
    system: str | None = None
    json_output: bool = False
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def prompt(self) -> str:
        """Flattened conversation, for vendors that only take a single prompt."""
        return "\n".join(message.content for message in self.messages)


@dataclass
class ImageRequest:
    """Request for image generation."""

    prompt: str
    size: str = "1024x1024"
    style: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def dimensions(self) -> tuple[int, int]:
        """Parse ``size`` ("WxH") into integers, defaulting to 1024 square."""
        width, _, height = self.size.lower().partition("x")
        try:
            return int(width), int(height)
        except ValueError:
            return 1024, 1024


@dataclass
class SpeechRequest:
    """Request for speech synthesis."""

    text: str
    voice: str | None = None
    language: str | None = None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class TextResult:
    """Normalized text generation result."""

    text: str
    provider: str = ""

    def is_empty(self) -> bool:
        return not self.text or not self.text.strip()


@dataclass
class ImageResult:
    """Normalized image result: a URL, inline base64, or both."""

    image_url: str | None = None
    base64: str | None = None
    mime_type: str = "image/png"
    provider: str = ""

    def is_empty(self) -> bool:
        return not self.image_url and not self.base64


@dataclass
class AudioResult:
    """Normalized speech result: a URL, inline base64, or raw bytes."""

    audio_url: str | None = None
    base64: str | None = None
    audio: bytes | None = None
    mime_type: str = "audio/mpeg"
    provider: str = ""

    def is_empty(self) -> bool:
        return not self.audio_url and not self.base64 and not self.audio


GenerationRequest = Union[TextRequest, ImageRequest, SpeechRequest]
ResultEnvelope = Union[TextResult, ImageResult, AudioResult]
