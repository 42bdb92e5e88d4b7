"""Shared FastAPI dependencies for the capability routes."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request

from genrelay.config import get_settings
from genrelay.providers.registry import ProviderRegistry
from genrelay.services import GenerationService


def get_generation_service(request: Request) -> GenerationService:
    service = getattr(request.app.state, "generation_service", None)
    if service:
        return service
    registry = getattr(request.app.state, "provider_registry", None)
    if registry is None:
        registry = ProviderRegistry(get_settings())
        request.app.state.provider_registry = registry
    service = GenerationService(registry)
    request.app.state.generation_service = service
    return service


@asynccontextmanager
async def cancel_on_disconnect(
    request: Request, poll_seconds: float = 0.5
) -> AsyncIterator[asyncio.Event]:
    """Yield an event that is set if the client disconnects mid-request."""
    event = asyncio.Event()

    async def watch() -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(poll_seconds)
        event.set()

    watcher = asyncio.create_task(watch())
    try:
        yield event
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)
