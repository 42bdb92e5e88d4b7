"""Text-to-speech endpoint."""

from __future__ import annotations

import base64
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from genrelay.api.deps import cancel_on_disconnect, get_generation_service
from genrelay.config import Settings, get_request_settings
from genrelay.providers.types import AudioResult
from genrelay.services import GenerationService

router = APIRouter(prefix="/api", tags=["speech"])


class SpeechGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    voice: str | None = None
    language: str | None = Field(default=None, alias="lang")
    options: dict[str, Any] | None = None


@router.post("/tts")
async def generate_speech_route(
    request: Request,
    body: SpeechGenerationRequest | None = Body(default=None),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_request_settings),
) -> Response:
    body = body or SpeechGenerationRequest()
    async with cancel_on_disconnect(request, settings.disconnect_poll_seconds) as cancel_event:
        outcome = await service.generate_speech(
            settings,
            text=body.text,
            voice=body.voice,
            language=body.language,
            options=body.options,
            cancel_event=cancel_event,
        )

    envelope: AudioResult = outcome.envelope
    headers = {"X-Provider": outcome.provider_id}
    if envelope.audio:
        return Response(content=envelope.audio, media_type=envelope.mime_type, headers=headers)
    if envelope.base64:
        return Response(
            content=base64.b64decode(envelope.base64),
            media_type=envelope.mime_type,
            headers=headers,
        )
    return RedirectResponse(envelope.audio_url or "", status_code=302, headers=headers)
