"""
Generic adapter for provider ids without a dedicated integration.

Posts ``{prompt, options}`` (or ``{text, voice, options}`` for speech) to the
configured URL and pulls ``text``/``url``/``base64`` out of whichever common
response shape comes back. A well-formed reply with none of those fields is
treated as "nothing to say" rather than as a failure.
"""

from __future__ import annotations

from typing import Any

import httpx

from genrelay.core import get_logger
from genrelay.providers.base import BaseProvider
from genrelay.providers.http_client import (
    create_http_client,
    parse_json,
    raise_for_status,
    send_request,
)
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

logger = get_logger(__name__)


def _first(data: Any, *paths: tuple[Any, ...]) -> str | None:
    """Return the first non-empty string found along any of ``paths``."""
    for path in paths:
        value = data
        for step in path:
            if isinstance(step, int) and isinstance(value, list) and len(value) > step:
                value = value[step]
            elif isinstance(step, str) and isinstance(value, dict):
                value = value.get(step)
            else:
                value = None
                break
        if isinstance(value, str) and value:
            return value
    return None


def extract_text(data: Any) -> str | None:
    return _first(
        data,
        ("text",),
        ("output",),
        ("result",),
        ("choices", 0, "text"),
        ("choices", 0, "message", "content"),
    )


def extract_media(data: Any, *url_keys: str) -> tuple[str | None, str | None]:
    url = _first(data, *[(key,) for key in url_keys], ("data", 0, "url"))
    b64 = _first(data, ("base64",), ("b64_json",), ("data", 0, "b64_json"))
    return url, b64


class GenericProvider(BaseProvider):
    """JSON-over-HTTP adapter configured entirely from PROVIDER_{ID}_* settings."""

    capabilities = frozenset({Capability.TEXT, Capability.IMAGE, Capability.TTS})

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self.display_name = f"Generic ({config.provider_id})"
        self._client = create_http_client(
            base_url=config.base_url or "", transport=transport
        )

    def is_configured(self) -> bool:
        return bool(self.config.base_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def _post_json(self, body: dict[str, Any]) -> Any:
        path = self.config.endpoint or ""
        logger.debug(
            "Generic provider request",
            data={"provider": self.provider_id, "path": path or "/"},
        )
        response = await send_request(
            self._client,
            "POST",
            path,
            provider_id=self.provider_id,
            headers=self._headers(),
            json=body,
        )
        raise_for_status(response, self.provider_id)
        return parse_json(response, self.provider_id)

    async def generate_text(self, request: TextRequest) -> TextResult | None:
        data = await self._post_json(
            {"prompt": request.prompt, "system": request.system, "options": request.options}
        )
        text = extract_text(data)
        if not text:
            logger.warning(
                "Generic provider returned no text", data={"provider": self.provider_id}
            )
            return None
        return TextResult(text=text, provider=self.provider_id)

    async def generate_image(self, request: ImageRequest) -> ImageResult | None:
        options = {"size": request.size, **request.options}
        data = await self._post_json({"prompt": request.prompt, "options": options})
        image_url, b64 = extract_media(data, "url", "image_url", "imageUrl")
        if not image_url and not b64:
            logger.warning(
                "Generic provider returned no image data", data={"provider": self.provider_id}
            )
            return None
        return ImageResult(image_url=image_url, base64=b64, provider=self.provider_id)

    async def generate_speech(self, request: SpeechRequest) -> AudioResult | None:
        data = await self._post_json(
            {"text": request.text, "voice": request.voice, "options": request.options}
        )
        audio_url, b64 = extract_media(data, "url", "audio_url", "audioUrl")
        if not audio_url and not b64:
            logger.warning(
                "Generic provider returned no audio data", data={"provider": self.provider_id}
            )
            return None
        return AudioResult(audio_url=audio_url, base64=b64, provider=self.provider_id)

    async def aclose(self) -> None:
        await self._client.aclose()
