"""
Health check endpoints.

Provides liveness, provider configuration, and metrics snapshots. None of
these touch vendor APIs.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request

from genrelay import __version__
from genrelay.config import Settings, get_request_settings, resolve_provider_order, resolve_timeout_ms
from genrelay.core import metrics
from genrelay.providers.types import Capability

router = APIRouter(tags=["health"])


@router.get("/health")
async def healthcheck() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns basic service health status. Used by load balancers and
    monitoring systems.
    """
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/providers")
async def providers_health(
    request: Request,
    settings: Settings = Depends(get_request_settings),
) -> dict[str, Any]:
    """Registered providers plus the fallback order each capability resolves to."""
    registry = getattr(request.app.state, "provider_registry", None)
    providers = registry.describe() if registry is not None else []
    routing = {
        capability.value: {
            "order": list(resolve_provider_order(settings, capability)),
            "timeout_ms": resolve_timeout_ms(settings, capability),
        }
        for capability in Capability
    }
    return {"providers": providers, "routing": routing}


@router.get("/health/metrics")
async def metrics_snapshot() -> dict[str, Any]:
    return metrics.snapshot()
