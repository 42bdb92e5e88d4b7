"""OpenAI adapter: chat completions, DALL-E images, and speech synthesis."""

from __future__ import annotations

from genrelay.core import ProviderBadResponseError
from genrelay.providers.http_client import parse_json, raise_for_status, send_request
from genrelay.providers.openai_compat import OpenAICompatProvider
from genrelay.providers.types import (
    AudioResult,
    Capability,
    ImageRequest,
    ImageResult,
    SpeechRequest,
)

# OpenAI voices work across languages, so the language hint is not used.
OPENAI_VOICES = frozenset({"alloy", "echo", "fable", "onyx", "nova", "shimmer"})


class OpenAIProvider(OpenAICompatProvider):
    """OpenAI supports all three capabilities."""

    display_name = "OpenAI"
    capabilities = frozenset({Capability.TEXT, Capability.IMAGE, Capability.TTS})
    default_base_url = "https://api.openai.com/v1"
    default_model = "gpt-4o-mini"
    image_model = "dall-e-3"
    speech_model = "tts-1"

    def _voice(self, request: SpeechRequest) -> str:
        if request.voice and request.voice.lower() in OPENAI_VOICES:
            return request.voice.lower()
        return self.config.extra.get("tts_voice", "nova")

    async def generate_image(self, request: ImageRequest) -> ImageResult | None:
        prompt = f"{request.prompt}, {request.style}" if request.style else request.prompt
        response = await send_request(
            self._client,
            "POST",
            "/images/generations",
            provider_id=self.provider_id,
            headers=self._headers(),
            json={
                "model": self.image_model,
                "prompt": prompt,
                "n": 1,
                "size": request.size,
            },
        )
        raise_for_status(response, self.provider_id)
        data = parse_json(response, self.provider_id)

        try:
            item = data["data"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderBadResponseError(
                "Image response missing data",
                details={"provider": self.provider_id},
            ) from exc

        result = ImageResult(
            image_url=item.get("url"),
            base64=item.get("b64_json"),
            provider=self.provider_id,
        )
        return None if result.is_empty() else result

    async def generate_speech(self, request: SpeechRequest) -> AudioResult | None:
        response = await send_request(
            self._client,
            "POST",
            "/audio/speech",
            provider_id=self.provider_id,
            headers=self._headers(),
            json={
                "model": self.speech_model,
                "input": request.text,
                "voice": self._voice(request),
            },
        )
        raise_for_status(response, self.provider_id)
        if not response.content:
            return None
        return AudioResult(
            audio=response.content,
            mime_type=response.headers.get("content-type", "audio/mpeg"),
            provider=self.provider_id,
        )
