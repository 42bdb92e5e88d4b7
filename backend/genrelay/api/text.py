"""Text generation endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from genrelay.api.deps import cancel_on_disconnect, get_generation_service
from genrelay.config import Settings, get_request_settings
from genrelay.services import GenerationService

router = APIRouter(prefix="/api", tags=["text"])


class ChatMessageBody(BaseModel):
    role: str = "user"
    content: str | None = None


class TextGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessageBody] | None = None
    prompt: str | None = None
    system: str | None = None
    json_output: bool = Field(default=False, alias="json")
    options: dict[str, Any] | None = None


class TextGenerationResponse(BaseModel):
    result: str
    provider: str


@router.post("/chat")
async def generate_text_route(
    request: Request,
    body: TextGenerationRequest | None = Body(default=None),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_request_settings),
) -> TextGenerationResponse:
    body = body or TextGenerationRequest()
    async with cancel_on_disconnect(request, settings.disconnect_poll_seconds) as cancel_event:
        outcome = await service.generate_text(
            settings,
            messages=[m.model_dump() for m in body.messages or []],
            prompt=body.prompt,
            system=body.system,
            json_output=body.json_output,
            options=body.options,
            cancel_event=cancel_event,
        )
    return TextGenerationResponse(result=outcome.envelope.text, provider=outcome.provider_id)
