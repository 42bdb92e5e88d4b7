"""Request validation, request building, and routing resolution for each capability."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from genrelay.config.resolution import resolve_provider_order, resolve_timeout_ms
from genrelay.config.settings import Settings
from genrelay.core import ErrorCode, MissingFieldError, get_logger
from genrelay.providers.types import (
    Capability,
    ChatMessage,
    GenerationRequest,
    ImageRequest,
    SpeechRequest,
    TextRequest,
)
from genrelay.services.orchestrator import FallbackOrchestrator, OrchestrationResult, ProviderLookup

logger = get_logger(__name__)

VALID_ROLES = {"system", "user", "assistant"}


def build_text_request(
    settings: Settings,
    *,
    messages: Sequence[Mapping[str, Any]] | None = None,
    prompt: str | None = None,
    system: str | None = None,
    json_output: bool = False,
    options: dict[str, Any] | None = None,
) -> TextRequest:
    chat: list[ChatMessage] = []
    for message in messages or []:
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            continue
        role = str(message.get("role") or "user").lower()
        chat.append(ChatMessage(role=role if role in VALID_ROLES else "user", content=content))

    if not chat and prompt and prompt.strip():
        chat.append(ChatMessage(role="user", content=prompt))

    if not chat:
        raise MissingFieldError("messages or prompt", ErrorCode.MISSING_MESSAGES)

    # Inline system messages are folded into the system instruction.
    inline_system = [m.content for m in chat if m.role == "system"]
    chat = [m for m in chat if m.role != "system"]
    if not chat:
        raise MissingFieldError("messages or prompt", ErrorCode.MISSING_MESSAGES)

    system_parts = [system] if system else inline_system
    return TextRequest(
        messages=chat,
        system="\n".join(system_parts) if system_parts else settings.default_system_prompt,
        json_output=json_output,
        options=options or {},
    )


def build_image_request(
    settings: Settings,
    *,
    prompt: str | None,
    options: dict[str, Any] | None = None,
) -> ImageRequest:
    if not prompt or not prompt.strip():
        raise MissingFieldError("prompt", ErrorCode.MISSING_PROMPT)
    opts = dict(options or {})
    size = str(opts.pop("size", "") or settings.default_image_size)
    style = opts.pop("style", None)
    return ImageRequest(prompt=prompt.strip(), size=size, style=style, options=opts)


def build_speech_request(
    settings: Settings,
    *,
    text: str | None,
    voice: str | None = None,
    language: str | None = None,
    options: dict[str, Any] | None = None,
) -> SpeechRequest:
    if not text or not text.strip():
        raise MissingFieldError("text", ErrorCode.MISSING_TEXT)
    return SpeechRequest(
        text=text,
        voice=voice or settings.default_tts_voice or None,
        language=language,
        options=dict(options or {}),
    )


class GenerationService:
    """Entry-point facing service: one method per capability."""

    def __init__(
        self,
        registry: ProviderLookup,
        orchestrator: FallbackOrchestrator | None = None,
    ):
        self.registry = registry
        self.orchestrator = orchestrator or FallbackOrchestrator(registry)

    async def _run(
        self,
        capability: Capability,
        request: GenerationRequest,
        settings: Settings,
        cancel_event: asyncio.Event | None,
    ) -> OrchestrationResult:
        order = resolve_provider_order(settings, capability)
        timeout_ms = resolve_timeout_ms(settings, capability)
        logger.debug(
            "Resolved provider order",
            data={"capability": capability.value, "order": list(order), "timeout_ms": timeout_ms},
        )
        return await self.orchestrator.run(
            capability, request, order, timeout_ms, cancel_event=cancel_event
        )

    async def generate_text(
        self,
        settings: Settings,
        *,
        messages: Sequence[Mapping[str, Any]] | None = None,
        prompt: str | None = None,
        system: str | None = None,
        json_output: bool = False,
        options: dict[str, Any] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OrchestrationResult:
        request = build_text_request(
            settings,
            messages=messages,
            prompt=prompt,
            system=system,
            json_output=json_output,
            options=options,
        )
        return await self._run(Capability.TEXT, request, settings, cancel_event)

    async def generate_image(
        self,
        settings: Settings,
        *,
        prompt: str | None,
        options: dict[str, Any] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OrchestrationResult:
        request = build_image_request(settings, prompt=prompt, options=options)
        return await self._run(Capability.IMAGE, request, settings, cancel_event)

    async def generate_speech(
        self,
        settings: Settings,
        *,
        text: str | None,
        voice: str | None = None,
        language: str | None = None,
        options: dict[str, Any] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OrchestrationResult:
        request = build_speech_request(
            settings, text=text, voice=voice, language=language, options=options
        )
        return await self._run(Capability.TTS, request, settings, cancel_event)
