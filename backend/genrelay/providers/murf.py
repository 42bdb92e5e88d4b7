"""Murf AI adapter (speech only)."""

from __future__ import annotations

import httpx

from genrelay.core import ProviderBadResponseError
from genrelay.providers.base import BaseProvider
from genrelay.providers.http_client import (
    create_http_client,
    parse_json,
    raise_for_status,
    send_request,
)
from genrelay.providers.types import AudioResult, Capability, ProviderConfig, SpeechRequest

MURF_BASE_URL = "https://api.murf.ai/v1"
MURF_DEFAULT_VOICE = "en-US-natalie"


class MurfProvider(BaseProvider):
    """
    Murf synthesizes to a hosted file, so a call is two requests: generate,
    then download the audio it points at.
    """

    display_name = "Murf AI"
    capabilities = frozenset({Capability.TTS})

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self.base_url = (config.base_url or MURF_BASE_URL).rstrip("/")
        self._client = create_http_client(base_url=self.base_url, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @staticmethod
    def _voice(request: SpeechRequest) -> str:
        # Murf voice ids look like "en-US-natalie"; bare names belong to other vendors.
        if request.voice and "-" in request.voice:
            return request.voice
        return MURF_DEFAULT_VOICE

    async def generate_speech(self, request: SpeechRequest) -> AudioResult | None:
        options = request.options
        response = await send_request(
            self._client,
            "POST",
            self.config.endpoint or "/speech/generate",
            provider_id=self.provider_id,
            headers={"Content-Type": "application/json", "api-key": self.config.api_key or ""},
            json={
                "voiceId": self._voice(request),
                "text": request.text,
                "style": options.get("style") or "Conversational",
                "rate": options.get("rate") or 0,
                "pitch": options.get("pitch") or 0,
                "format": "MP3",
            },
        )
        raise_for_status(response, self.provider_id)
        data = parse_json(response, self.provider_id)

        audio_file = data.get("audioFile") if isinstance(data, dict) else None
        if not audio_file:
            raise ProviderBadResponseError(
                "Murf response missing audioFile",
                details={"provider": self.provider_id},
            )

        audio_response = await send_request(
            self._client, "GET", audio_file, provider_id=self.provider_id
        )
        raise_for_status(audio_response, self.provider_id)
        if not audio_response.content:
            return None
        return AudioResult(
            audio_url=audio_file,
            audio=audio_response.content,
            mime_type="audio/mpeg",
            provider=self.provider_id,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
