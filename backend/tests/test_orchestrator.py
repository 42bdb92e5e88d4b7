"""Tests for sequential provider fallback."""

from __future__ import annotations

import asyncio

import pytest

from genrelay.core import (
    AllProvidersFailedError,
    ErrorCode,
    ErrorType,
    ProviderAuthError,
    RequestCancelledError,
    UpstreamError,
    metrics,
)
from genrelay.providers.types import (
    AudioResult,
    Capability,
    ChatMessage,
    ImageRequest,
    ImageResult,
    SpeechRequest,
    TextRequest,
    TextResult,
)
from genrelay.services import FallbackOrchestrator, OutcomeKind


def _text_request() -> TextRequest:
    return TextRequest(messages=[ChatMessage(role="user", content="hi")], system="be brief")


@pytest.mark.asyncio
async def test_first_success_stops_iteration(fake_provider, lookup) -> None:
    """Providers after the winner are never invoked."""
    first = fake_provider("gemini", error=UpstreamError(details={"status": 500}))
    second = fake_provider("openai", result=TextResult(text="hello"))
    third = fake_provider("grok", result=TextResult(text="unused"))
    orchestrator = FallbackOrchestrator(lookup(first, second, third))

    result = await orchestrator.run(
        Capability.TEXT, _text_request(), ("gemini", "openai", "grok"), 1000
    )

    assert result.provider_id == "openai"
    assert result.envelope.text == "hello"
    assert result.envelope.provider == "openai"
    assert result.used_fallback is True
    assert [f.provider_id for f in result.failures] == ["gemini"]
    assert len(first.calls) == 1
    assert len(second.calls) == 1
    assert third.calls == []


@pytest.mark.asyncio
async def test_primary_success_does_not_touch_fallbacks(fake_provider, lookup) -> None:
    primary = fake_provider("openai", result=TextResult(text="fine"))
    backup = fake_provider("grok", result=TextResult(text="unused"))
    orchestrator = FallbackOrchestrator(lookup(primary, backup))

    result = await orchestrator.run(Capability.TEXT, _text_request(), ("openai", "grok"), 1000)

    assert result.provider_id == "openai"
    assert result.used_fallback is False
    assert backup.calls == []


@pytest.mark.asyncio
async def test_gemini_and_openai_fail_then_grok_answers(fake_provider, lookup) -> None:
    """Auth failure and a 500 both fall through to the third provider."""
    gemini = fake_provider("gemini", error=ProviderAuthError(details={"status": 401}))
    openai = fake_provider(
        "openai", error=UpstreamError("Provider returned HTTP 500", details={"status": 500})
    )
    grok = fake_provider("grok", result=TextResult(text="from grok"))
    orchestrator = FallbackOrchestrator(lookup(gemini, openai, grok))

    result = await orchestrator.run(
        Capability.TEXT, _text_request(), ("gemini", "openai", "grok"), 1000
    )

    assert result.provider_id == "grok"
    assert [(f.provider_id, f.status) for f in result.failures] == [
        ("gemini", 401),
        ("openai", 500),
    ]
    assert metrics.snapshot()["counters"]["fallbacks_total"] == 1


@pytest.mark.asyncio
async def test_unconfigured_provider_is_declined_without_a_call(fake_provider, lookup) -> None:
    openai = fake_provider("openai", configured=False, result=ImageResult(image_url="x"))
    pollinations = fake_provider(
        "pollinations", result=ImageResult(image_url="https://image.test/cat")
    )
    orchestrator = FallbackOrchestrator(lookup(openai, pollinations))

    result = await orchestrator.run(
        Capability.IMAGE, ImageRequest(prompt="cat"), ("openai", "pollinations"), 1000
    )

    assert result.provider_id == "pollinations"
    assert result.envelope.image_url == "https://image.test/cat"
    assert openai.calls == []
    assert result.failures[0].kind == OutcomeKind.DECLINED
    assert result.failures[0].error_type == ErrorType.CONFIGURATION


@pytest.mark.asyncio
async def test_all_declined_raises_with_outcomes_in_order(fake_provider, lookup) -> None:
    text_only = fake_provider("gemini", capabilities=[Capability.TEXT])
    empty = fake_provider("murf", result=AudioResult())
    nothing = fake_provider("generic", result=None)
    orchestrator = FallbackOrchestrator(lookup(text_only, empty, nothing))

    with pytest.raises(AllProvidersFailedError) as exc:
        await orchestrator.run(
            Capability.TTS, SpeechRequest(text="hi"), ("gemini", "murf", "generic"), 1000
        )

    error = exc.value
    assert error.code == ErrorCode.ALL_PROVIDERS_FAILED
    assert error.status_code == 502
    assert error.message == "Unable to generate audio: all providers failed"
    assert error.attempted_providers == ["gemini", "murf", "generic"]
    assert [o.kind for o in error.outcomes] == [OutcomeKind.DECLINED] * 3
    assert error.outcomes[1].reason == "empty result"
    assert error.details["attemptedProviders"] == ["gemini", "murf", "generic"]
    assert metrics.snapshot()["counters"]["all_failed_total"] == 1


@pytest.mark.asyncio
async def test_unknown_provider_id_is_recorded_as_not_found(fake_provider, lookup) -> None:
    backup = fake_provider("openai", result=TextResult(text="ok"))
    orchestrator = FallbackOrchestrator(lookup(backup))

    result = await orchestrator.run(Capability.TEXT, _text_request(), ("typo", "openai"), 1000)

    assert result.provider_id == "openai"
    failure = result.failures[0]
    assert failure.provider_id == "typo"
    assert failure.kind == OutcomeKind.FAILED
    assert failure.error_type == ErrorType.NOT_FOUND
    assert failure.reason == "adapter not found"


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained(fake_provider, lookup) -> None:
    broken = fake_provider("gemini", error=KeyError("choices"))
    backup = fake_provider("grok", result=TextResult(text="ok"))
    orchestrator = FallbackOrchestrator(lookup(broken, backup))

    result = await orchestrator.run(Capability.TEXT, _text_request(), ("gemini", "grok"), 1000)

    assert result.provider_id == "grok"
    assert result.failures[0].error_type == ErrorType.INTERNAL
    assert result.failures[0].reason.startswith("KeyError")


@pytest.mark.asyncio
async def test_timeout_applies_per_attempt(fake_provider, lookup) -> None:
    """A slow provider times out; the next one gets a fresh budget."""
    slow = fake_provider("gemini", delay=1.0, result=TextResult(text="late"))
    # Takes more than half the budget, so a shared budget would expire.
    steady = fake_provider("openai", delay=0.12, result=TextResult(text="on time"))
    orchestrator = FallbackOrchestrator(lookup(slow, steady))

    result = await orchestrator.run(Capability.TEXT, _text_request(), ("gemini", "openai"), 200)

    assert result.provider_id == "openai"
    failure = result.failures[0]
    assert failure.error_type == ErrorType.TIMEOUT
    assert failure.reason == "timed out after 200 ms"
    assert failure.elapsed_ms < 1000


@pytest.mark.asyncio
async def test_reruns_are_independent(fake_provider, lookup) -> None:
    """Running the same request twice yields the same outcome sequence."""
    failing = fake_provider("gemini", error=UpstreamError(details={"status": 503}))
    declining = fake_provider("openai", configured=False)
    orchestrator = FallbackOrchestrator(lookup(failing, declining))

    outcomes = []
    for _ in range(2):
        with pytest.raises(AllProvidersFailedError) as exc:
            await orchestrator.run(Capability.TEXT, _text_request(), ("gemini", "openai"), 1000)
        outcomes.append([(o.provider_id, o.kind, o.status) for o in exc.value.outcomes])

    assert outcomes[0] == outcomes[1]
    assert len(failing.calls) == 2


@pytest.mark.asyncio
async def test_empty_order_is_rejected(lookup) -> None:
    orchestrator = FallbackOrchestrator(lookup())

    with pytest.raises(ValueError):
        await orchestrator.run(Capability.TEXT, _text_request(), (), 1000)


@pytest.mark.asyncio
async def test_cancel_before_start_skips_all_providers(fake_provider, lookup) -> None:
    provider = fake_provider("openai", result=TextResult(text="ok"))
    orchestrator = FallbackOrchestrator(lookup(provider))
    cancel_event = asyncio.Event()
    cancel_event.set()

    with pytest.raises(RequestCancelledError):
        await orchestrator.run(
            Capability.TEXT, _text_request(), ("openai",), 1000, cancel_event=cancel_event
        )

    assert provider.calls == []


@pytest.mark.asyncio
async def test_cancel_mid_attempt_abandons_run(fake_provider, lookup) -> None:
    slow = fake_provider("gemini", delay=5.0, result=TextResult(text="late"))
    backup = fake_provider("openai", result=TextResult(text="unused"))
    orchestrator = FallbackOrchestrator(lookup(slow, backup))
    cancel_event = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, cancel_event.set)

    with pytest.raises(RequestCancelledError):
        await orchestrator.run(
            Capability.TEXT,
            _text_request(),
            ("gemini", "openai"),
            10_000,
            cancel_event=cancel_event,
        )

    assert backup.calls == []
    assert metrics.snapshot()["gauges"]["inflight_runs"] == 0


@pytest.mark.asyncio
async def test_attempt_metrics_are_recorded(fake_provider, lookup) -> None:
    declining = fake_provider("openai", configured=False)
    winner = fake_provider("pollinations", result=ImageResult(image_url="u"))
    orchestrator = FallbackOrchestrator(lookup(declining, winner))

    await orchestrator.run(
        Capability.IMAGE, ImageRequest(prompt="x"), ("openai", "pollinations"), 1000
    )

    counters = metrics.snapshot()["counters"]
    assert counters["runs_total"] == 1
    assert counters["attempts.image.openai.declined"] == 1
    assert counters["attempts.image.pollinations.success"] == 1
