"""
Sequential provider fallback.

Providers are tried strictly in the resolved order, one at a time, each
under its own timeout scope. The first non-empty result wins and iteration
stops; declines and failures are collected in order and surfaced together
as AllProvidersFailedError when nothing succeeds. A failed provider is not
retried within the same run.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from genrelay.core import (
    AllProvidersFailedError,
    CapabilityDeclinedError,
    ErrorType,
    ProviderConfigurationError,
    ProviderError,
    RequestCancelledError,
    capability_ctx,
    get_logger,
    metrics,
    truncate,
)
from genrelay.providers.base import BaseProvider
from genrelay.providers.http_client import normalize_envelope
from genrelay.providers.types import Capability, GenerationRequest, ResultEnvelope

logger = get_logger(__name__)

OPERATIONS: dict[Capability, str] = {
    Capability.TEXT: "generate_text",
    Capability.IMAGE: "generate_image",
    Capability.TTS: "generate_speech",
}


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass(frozen=True)
class AttemptOutcome:
    """What happened when one provider was tried."""

    provider_id: str
    kind: OutcomeKind
    reason: str = ""
    error_type: ErrorType | None = None
    status: int | None = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "provider": self.provider_id,
            "kind": self.kind.value,
            "reason": truncate(self.reason),
        }
        if self.error_type is not None:
            payload["errorType"] = self.error_type.value
        if self.status is not None:
            payload["status"] = self.status
        return payload


@dataclass
class OrchestrationResult:
    """A successful run: the envelope, who produced it, and who fell through first."""

    envelope: ResultEnvelope
    provider_id: str
    failures: list[AttemptOutcome] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return bool(self.failures)


class ProviderLookup(Protocol):
    def get(self, provider_id: str) -> BaseProvider | None: ...


def _failure_reason(exc: ProviderError) -> str:
    body = exc.details.get("body") if exc.details else None
    return f"{exc.message}: {body}" if body else exc.message


class FallbackOrchestrator:
    """Runs one capability request across an ordered list of providers."""

    def __init__(self, registry: ProviderLookup):
        self.registry = registry

    async def run(
        self,
        capability: Capability,
        request: GenerationRequest,
        order: Sequence[str],
        timeout_ms: int,
        cancel_event: asyncio.Event | None = None,
    ) -> OrchestrationResult:
        """
        Try providers in ``order`` until one returns a usable result.

        Args:
            capability: Which operation to invoke on each adapter
            request: Capability-specific request
            order: Provider ids, already resolved and deduplicated
            timeout_ms: Budget for each individual attempt
            cancel_event: Set by the caller to abandon the run (client disconnect)

        Returns:
            OrchestrationResult tagged with the winning provider id

        Raises:
            AllProvidersFailedError: every provider declined or failed
            RequestCancelledError: ``cancel_event`` fired before a success
        """
        if not order:
            raise ValueError("provider order must not be empty")

        failures: list[AttemptOutcome] = []
        token = capability_ctx.set(capability.value)
        metrics.increment("runs_total")
        metrics.adjust_gauge("inflight_runs", 1)
        try:
            for provider_id in order:
                if cancel_event is not None and cancel_event.is_set():
                    raise RequestCancelledError()

                outcome, envelope = await self._attempt(
                    capability, request, provider_id, timeout_ms, cancel_event
                )
                metrics.increment(f"attempts.{capability.value}.{provider_id}.{outcome.kind.value}")

                if envelope is not None:
                    if failures:
                        metrics.increment("fallbacks_total")
                    logger.info(
                        "Provider succeeded",
                        data={
                            "provider": provider_id,
                            "elapsed_ms": outcome.elapsed_ms,
                            "skipped": [f.provider_id for f in failures],
                        },
                    )
                    return OrchestrationResult(
                        envelope=envelope, provider_id=provider_id, failures=failures
                    )

                failures.append(outcome)

            metrics.increment("all_failed_total")
            raise AllProvidersFailedError(capability.value, failures)
        finally:
            metrics.adjust_gauge("inflight_runs", -1)
            capability_ctx.reset(token)

    async def _attempt(
        self,
        capability: Capability,
        request: GenerationRequest,
        provider_id: str,
        timeout_ms: int,
        cancel_event: asyncio.Event | None,
    ) -> tuple[AttemptOutcome, ResultEnvelope | None]:
        adapter = self.registry.get(provider_id)
        if adapter is None:
            logger.warning("Provider adapter not found", data={"provider": provider_id})
            return (
                AttemptOutcome(
                    provider_id, OutcomeKind.FAILED, "adapter not found", ErrorType.NOT_FOUND
                ),
                None,
            )

        if not adapter.is_configured():
            logger.debug("Provider not configured", data={"provider": provider_id})
            return (
                AttemptOutcome(
                    provider_id, OutcomeKind.DECLINED, "not configured", ErrorType.CONFIGURATION
                ),
                None,
            )

        operation = getattr(adapter, OPERATIONS[capability])
        started = time.perf_counter()

        def elapsed() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        try:
            result = await self._call_with_budget(
                operation, request, timeout_ms / 1000, cancel_event
            )
            if result is not None and not result.is_empty():
                normalize_envelope(result, provider_id)
        except RequestCancelledError:
            logger.info("Run cancelled mid-attempt", data={"provider": provider_id})
            raise
        except (CapabilityDeclinedError, ProviderConfigurationError) as exc:
            return (
                AttemptOutcome(
                    provider_id,
                    OutcomeKind.DECLINED,
                    exc.message,
                    exc.error_type,
                    elapsed_ms=elapsed(),
                ),
                None,
            )
        except TimeoutError:
            logger.warning(
                "Provider attempt timed out",
                data={"provider": provider_id, "timeout_ms": timeout_ms},
            )
            return (
                AttemptOutcome(
                    provider_id,
                    OutcomeKind.FAILED,
                    f"timed out after {timeout_ms} ms",
                    ErrorType.TIMEOUT,
                    elapsed_ms=elapsed(),
                ),
                None,
            )
        except ProviderError as exc:
            logger.warning(
                "Provider attempt failed",
                data={
                    "provider": provider_id,
                    "error_type": exc.error_type.value,
                    "status": exc.upstream_status,
                    "message": exc.message,
                },
            )
            return (
                AttemptOutcome(
                    provider_id,
                    OutcomeKind.FAILED,
                    _failure_reason(exc),
                    exc.error_type,
                    exc.upstream_status,
                    elapsed_ms=elapsed(),
                ),
                None,
            )
        except Exception as exc:
            logger.error(
                "Provider attempt raised unexpectedly",
                exc_info=exc,
                data={"provider": provider_id},
            )
            return (
                AttemptOutcome(
                    provider_id,
                    OutcomeKind.FAILED,
                    f"{type(exc).__name__}: {exc}",
                    ErrorType.INTERNAL,
                    elapsed_ms=elapsed(),
                ),
                None,
            )

        if result is None or result.is_empty():
            return (
                AttemptOutcome(
                    provider_id,
                    OutcomeKind.DECLINED,
                    "empty result",
                    ErrorType.DECLINED,
                    elapsed_ms=elapsed(),
                ),
                None,
            )

        result.provider = provider_id
        return AttemptOutcome(provider_id, OutcomeKind.SUCCESS, elapsed_ms=elapsed()), result

    @staticmethod
    async def _call_with_budget(
        operation: Callable[[Any], Awaitable[Any]],
        request: GenerationRequest,
        timeout_seconds: float,
        cancel_event: asyncio.Event | None,
    ) -> Any:
        """Await ``operation`` under a fresh timeout scope, racing the cancel event."""
        async with asyncio.timeout(timeout_seconds):
            if cancel_event is None:
                return await operation(request)

            call = asyncio.ensure_future(operation(request))
            cancelled = asyncio.ensure_future(cancel_event.wait())
            try:
                done, _ = await asyncio.wait(
                    {call, cancelled}, return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                for task in (call, cancelled):
                    if not task.done():
                        task.cancel()
                await asyncio.gather(call, cancelled, return_exceptions=True)

            if call in done:
                return call.result()
            raise RequestCancelledError()
