"""Tests for provider order and timeout resolution."""

from __future__ import annotations

import pytest

from genrelay.config import DEFAULT_PROVIDER_ORDERS, resolve_provider_order, resolve_timeout_ms
from genrelay.config.resolution import apply_primary_override, dedupe_order, parse_timeout_ms
from genrelay.providers.types import Capability


def test_default_orders_when_nothing_configured(make_settings) -> None:
    settings = make_settings()

    assert resolve_provider_order(settings, Capability.TEXT) == ("gemini", "openai", "grok")
    assert resolve_provider_order(settings, Capability.IMAGE) == ("openai", "pollinations")
    assert resolve_provider_order(settings, Capability.TTS) == ("openai", "murf")


def test_configured_order_replaces_default(make_settings) -> None:
    settings = make_settings(text_providers="grok, OpenAI")

    assert resolve_provider_order(settings, Capability.TEXT) == ("grok", "openai")


def test_primary_override_moves_provider_to_front(make_settings) -> None:
    settings = make_settings(text_providers="a,b,c", primary_text_provider="B")

    assert resolve_provider_order(settings, Capability.TEXT) == ("b", "a", "c")


def test_primary_override_prepends_unlisted_provider(make_settings) -> None:
    settings = make_settings(primary_image_provider="custom")

    assert resolve_provider_order(settings, Capability.IMAGE) == (
        "custom",
        "openai",
        "pollinations",
    )


def test_duplicates_are_collapsed(make_settings) -> None:
    settings = make_settings(tts_providers="murf,openai,murf, ,openai")

    assert resolve_provider_order(settings, Capability.TTS) == ("murf", "openai")


def test_audio_fallback_is_appended_once(make_settings) -> None:
    settings = make_settings(audio_fallback_provider="elevenlabs")
    assert resolve_provider_order(settings, Capability.TTS) == ("openai", "murf", "elevenlabs")

    already_listed = make_settings(tts_providers="murf,openai", audio_fallback_provider="murf")
    assert resolve_provider_order(already_listed, Capability.TTS) == ("murf", "openai")


def test_audio_fallback_only_affects_speech(make_settings) -> None:
    settings = make_settings(audio_fallback_provider="elevenlabs")

    assert "elevenlabs" not in resolve_provider_order(settings, Capability.TEXT)


def test_order_is_never_empty(make_settings) -> None:
    settings = make_settings(text_providers=" , ,")

    assert resolve_provider_order(settings, Capability.TEXT) == DEFAULT_PROVIDER_ORDERS[
        Capability.TEXT
    ]


def test_dedupe_and_override_helpers() -> None:
    assert dedupe_order(["A", "a", " b "]) == ("a", "b")
    assert apply_primary_override(["a", "b"], None) == ("a", "b")
    assert apply_primary_override(["a", "b"], "b") == ("b", "a")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, 30000), ("5000", 5000), (" 250 ", 250), ("soon", 30000), ("0", 30000), ("-10", 30000)],
)
def test_parse_timeout_ms(raw, expected) -> None:
    assert parse_timeout_ms(raw, 30000) == expected


def test_timeout_defaults(make_settings) -> None:
    settings = make_settings()

    assert resolve_timeout_ms(settings, Capability.TEXT) == 30000
    assert resolve_timeout_ms(settings, Capability.TTS) == 30000
    assert resolve_timeout_ms(settings, Capability.IMAGE) == 60000


def test_image_timeout_prefers_its_own_setting(make_settings) -> None:
    assert resolve_timeout_ms(make_settings(timeout_ms="10000"), Capability.IMAGE) == 10000
    assert (
        resolve_timeout_ms(
            make_settings(timeout_ms="10000", image_timeout_ms="90000"), Capability.IMAGE
        )
        == 90000
    )
    assert resolve_timeout_ms(make_settings(timeout_ms="10000"), Capability.TEXT) == 10000


def test_settings_are_read_from_environment(make_settings, monkeypatch) -> None:
    monkeypatch.setenv("TEXT_PROVIDERS", "openai,gemini")
    monkeypatch.setenv("PRIMARY_TEXT_PROVIDER", "gemini")

    settings = make_settings()

    assert resolve_provider_order(settings, Capability.TEXT) == ("gemini", "openai")
