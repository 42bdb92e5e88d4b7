"""Image generation endpoints."""

from __future__ import annotations

import base64
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel

from genrelay.api.deps import cancel_on_disconnect, get_generation_service
from genrelay.config import Settings, get_request_settings
from genrelay.providers.types import ImageResult
from genrelay.services import GenerationService, OrchestrationResult

router = APIRouter(prefix="/api", tags=["image"])


class ImageGenerationRequest(BaseModel):
    prompt: str | None = None
    options: dict[str, Any] | None = None


async def _generate(
    request: Request,
    service: GenerationService,
    settings: Settings,
    prompt: str | None,
    options: dict[str, Any] | None,
) -> OrchestrationResult:
    async with cancel_on_disconnect(request, settings.disconnect_poll_seconds) as cancel_event:
        return await service.generate_image(
            settings, prompt=prompt, options=options, cancel_event=cancel_event
        )


@router.post("/image")
async def generate_image_route(
    request: Request,
    body: ImageGenerationRequest | None = Body(default=None),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_request_settings),
) -> dict[str, Any]:
    body = body or ImageGenerationRequest()
    outcome = await _generate(request, service, settings, body.prompt, body.options)
    envelope: ImageResult = outcome.envelope
    return {
        "imageUrl": envelope.image_url,
        "base64": envelope.base64,
        "provider": outcome.provider_id,
    }


@router.get("/image")
async def render_image_route(
    request: Request,
    prompt: str | None = Query(default=None),
    size: str | None = Query(default=None),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_request_settings),
) -> Response:
    """Browser-friendly variant: inline bytes are served, URLs are redirected to."""
    options = {"size": size} if size else None
    outcome = await _generate(request, service, settings, prompt, options)
    envelope: ImageResult = outcome.envelope
    headers = {"X-Provider": outcome.provider_id}

    if envelope.base64:
        return Response(
            content=base64.b64decode(envelope.base64),
            media_type=envelope.mime_type,
            headers=headers,
        )
    return RedirectResponse(envelope.image_url or "", status_code=302, headers=headers)
