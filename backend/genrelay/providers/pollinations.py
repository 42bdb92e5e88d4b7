"""Pollinations adapter: free image generation, no API key required."""

from __future__ import annotations

from urllib.parse import quote, urlencode

import httpx

from genrelay.providers.base import BaseProvider
from genrelay.providers.http_client import create_http_client, raise_for_status, send_request
from genrelay.providers.types import Capability, ImageRequest, ImageResult, ProviderConfig

POLLINATIONS_BASE_URL = "https://image.pollinations.ai"


class PollinationsProvider(BaseProvider):
    """Images are rendered on fetch; we only verify the URL answers a HEAD."""

    display_name = "Pollinations"
    capabilities = frozenset({Capability.IMAGE})

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self.base_url = (config.base_url or POLLINATIONS_BASE_URL).rstrip("/")
        self._client = create_http_client(base_url=self.base_url, transport=transport)

    def is_configured(self) -> bool:
        return True

    def build_image_url(self, request: ImageRequest) -> str:
        prompt = f"{request.prompt}, {request.style}" if request.style else request.prompt
        width, height = request.dimensions
        query = urlencode({"width": width, "height": height, "nologo": "true"})
        return f"{self.base_url}/prompt/{quote(prompt, safe='')}?{query}"

    async def generate_image(self, request: ImageRequest) -> ImageResult | None:
        image_url = self.build_image_url(request)
        response = await send_request(
            self._client, "HEAD", image_url, provider_id=self.provider_id
        )
        raise_for_status(response, self.provider_id)
        return ImageResult(image_url=image_url, provider=self.provider_id)

    async def aclose(self) -> None:
        await self._client.aclose()
