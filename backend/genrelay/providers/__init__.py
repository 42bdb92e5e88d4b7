"""Provider interfaces and shared data types.

Concrete adapters and the registry live in their own modules so that
configuration code can import these types without pulling in httpx clients.
"""

from genrelay.providers.base import BaseProvider
from genrelay.providers.types import (
    AudioResult,
    Capability,
    ChatMessage,
    GenerationRequest,
    ImageRequest,
    ImageResult,
    ProviderConfig,
    ProviderDescriptor,
    ResultEnvelope,
    SpeechRequest,
    TextRequest,
    TextResult,
)

__all__ = [
    "AudioResult",
    "BaseProvider",
    "Capability",
    "ChatMessage",
    "GenerationRequest",
    "ImageRequest",
    "ImageResult",
    "ProviderConfig",
    "ProviderDescriptor",
    "ResultEnvelope",
    "SpeechRequest",
    "TextRequest",
    "TextResult",
]
