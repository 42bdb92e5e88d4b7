"""Tests for startup configuration reporting."""

from __future__ import annotations

import logging

from genrelay.config.validation import (
    log_validation_warnings,
    validate_category,
    validate_environment,
    validate_provider_env,
)


def test_category_reports_missing_and_configured(make_settings) -> None:
    settings = make_settings(text_providers="openai")

    report = validate_category(settings, "TEXT", ("text_providers", "primary_text_provider"))

    assert report.configured == ["TEXT_PROVIDERS"]
    assert report.missing == ["PRIMARY_TEXT_PROVIDER"]
    assert report.warnings == ["[TEXT] Environment variable 'PRIMARY_TEXT_PROVIDER' is not set"]


def test_environment_without_orders_is_flagged(make_settings) -> None:
    report = validate_environment(make_settings())

    assert report.has_any_provider_config is False
    assert set(report.categories) == {"TTS", "TEXT", "IMAGE", "GENERAL"}
    assert "[GENERAL] Environment variable 'TIMEOUT_MS' is not set" in report.all_warnings


def test_environment_with_an_order_is_accepted(make_settings) -> None:
    report = validate_environment(make_settings(image_providers="pollinations"))

    assert report.has_any_provider_config is True


def test_provider_env_report(make_settings) -> None:
    environ = {"PROVIDER_ACME_API_URL": "https://acme.test"}

    report = validate_provider_env("acme", make_settings(), environ)

    assert report.configured == ["PROVIDER_ACME_API_URL"]
    assert "PROVIDER_ACME_API_KEY" in report.missing
    assert report.warnings == []

    empty = validate_provider_env("ghost", make_settings(), {})
    assert empty.warnings == [
        "Provider 'ghost': no API URL or key configured (checked PROVIDER_GHOST_API_URL)"
    ]


def test_log_validation_warnings_never_raises(make_settings, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="genrelay.config.validation"):
        report = log_validation_warnings(make_settings(), verbose=True)

    assert report.has_any_provider_config is False
    assert "No provider orders configured" in caplog.text
