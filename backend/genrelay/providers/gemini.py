"""Google Gemini adapter (text only)."""

from __future__ import annotations

from typing import Any

import httpx

from genrelay.core import ProviderBadResponseError
from genrelay.providers.base import BaseProvider
from genrelay.providers.http_client import (
    clean_json,
    create_http_client,
    parse_json,
    raise_for_status,
    send_request,
)
from genrelay.providers.types import Capability, ProviderConfig, TextRequest, TextResult

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_MODEL = "gemini-1.5-flash"


class GeminiProvider(BaseProvider):
    """Gemini ``generateContent`` with role remapping (assistant -> model)."""

    display_name = "Google Gemini"
    capabilities = frozenset({Capability.TEXT})

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self.base_url = (config.base_url or GEMINI_BASE_URL).rstrip("/")
        self.model = config.extra.get("model") or GEMINI_MODEL
        self._client = create_http_client(base_url=self.base_url, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    def _payload(self, request: TextRequest) -> dict[str, Any]:
        contents = [
            {
                "role": "user" if message.role == "user" else "model",
                "parts": [{"text": message.content}],
            }
            for message in request.messages
            if message.role != "system"
        ]
        payload: dict[str, Any] = {"contents": contents}
        if request.system:
            payload["systemInstruction"] = {"parts": [{"text": request.system}]}
        if request.json_output:
            payload["generationConfig"] = {"responseMimeType": "application/json"}
        return payload

    async def generate_text(self, request: TextRequest) -> TextResult | None:
        path = self.config.endpoint or f"/models/{self.model}:generateContent"
        response = await send_request(
            self._client,
            "POST",
            path,
            provider_id=self.provider_id,
            params={"key": self.config.api_key},
            headers={"Content-Type": "application/json"},
            json=self._payload(request),
        )
        raise_for_status(response, self.provider_id)
        data = parse_json(response, self.provider_id)

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            # Blocked prompts come back as 200 with no candidates.
            return None
        try:
            parts = candidates[0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderBadResponseError(
                "Gemini response missing content parts",
                details={"provider": self.provider_id},
            ) from exc

        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            return None
        if request.json_output:
            text = clean_json(text)
        return TextResult(text=text, provider=self.provider_id)

    async def aclose(self) -> None:
        await self._client.aclose()
