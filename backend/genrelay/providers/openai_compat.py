"""OpenAI-compatible chat completions adapter."""

from __future__ import annotations

from typing import Any, ClassVar

import httpx

from genrelay.core import ProviderBadResponseError, get_logger
from genrelay.providers.base import BaseProvider
from genrelay.providers.http_client import (
    clean_json,
    create_http_client,
    parse_json,
    raise_for_status,
    send_request,
)
from genrelay.providers.types import Capability, ProviderConfig, TextRequest, TextResult

logger = get_logger(__name__)


class OpenAICompatProvider(BaseProvider):
    """Text generation against any ``/chat/completions`` endpoint."""

    display_name = "OpenAI-compatible"
    capabilities = frozenset({Capability.TEXT})

    default_base_url: ClassVar[str] = ""
    default_model: ClassVar[str] = ""
    chat_path: ClassVar[str] = "/chat/completions"
    # Some vendors reject response_format; those get fence-stripping instead.
    supports_response_format: ClassVar[bool] = True

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self.base_url = (config.base_url or self.default_base_url).rstrip("/")
        self.model = config.extra.get("model") or self.default_model
        self._client = create_http_client(base_url=self.base_url, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.config.api_key) and bool(self.base_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _chat_payload(self, request: TextRequest) -> dict[str, Any]:
        messages: list[dict[str, str]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.extend({"role": m.role, "content": m.content} for m in request.messages)

        payload: dict[str, Any] = {"model": self.model, "messages": messages}
        if request.json_output and self.supports_response_format:
            payload["response_format"] = {"type": "json_object"}
        for key in ("temperature", "max_tokens", "top_p"):
            if key in request.options:
                payload[key] = request.options[key]
        return payload

    async def generate_text(self, request: TextRequest) -> TextResult | None:
        path = self.config.endpoint or self.chat_path
        response = await send_request(
            self._client,
            "POST",
            path,
            provider_id=self.provider_id,
            headers=self._headers(),
            json=self._chat_payload(request),
        )
        raise_for_status(response, self.provider_id)
        data = parse_json(response, self.provider_id)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderBadResponseError(
                "Provider response missing message content",
                details={"provider": self.provider_id},
            ) from exc

        if not content:
            return None
        if request.json_output:
            content = clean_json(content)
        return TextResult(text=content, provider=self.provider_id)

    async def aclose(self) -> None:
        await self._client.aclose()
