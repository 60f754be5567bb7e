"""Tests for environment-driven settings."""

from __future__ import annotations

import os
from unittest.mock import patch

from name_fortune.config import DEFAULT_GEMINI_MODEL, DEFAULT_SHEET_RANGE, settings_from_env


def test_defaults_without_environment() -> None:
    with patch.dict(os.environ, {}, clear=True):
        settings = settings_from_env()
    assert settings.gemini_api_key is None
    assert settings.gemini_model == DEFAULT_GEMINI_MODEL
    assert settings.gemini_timeout_sec == 30.0
    assert settings.sheet_range == DEFAULT_SHEET_RANGE
    assert settings.allowed_origins == ["*"]
    assert settings.log_level == "INFO"
    assert settings.scoring_profile == "standard"
    assert settings.refinement_enabled is True
    assert settings.refinement_configured is False
    assert settings.sheets_configured is False


def test_google_api_key_fallback_and_toggle() -> None:
    env = {"GOOGLE_API_KEY": " abc ", "REFINEMENT_ENABLED": "false"}
    with patch.dict(os.environ, env, clear=True):
        settings = settings_from_env()
    assert settings.gemini_api_key == "abc"
    assert settings.refinement_enabled is False
    assert settings.refinement_configured is False


def test_gemini_key_takes_precedence() -> None:
    env = {"GEMINI_API_KEY": "primary", "GOOGLE_API_KEY": "secondary"}
    with patch.dict(os.environ, env, clear=True):
        settings = settings_from_env()
    assert settings.gemini_api_key == "primary"
    assert settings.refinement_configured is True


def test_sheet_settings_and_private_key_newlines() -> None:
    env = {
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "svc@example.com",
        "GOOGLE_PRIVATE_KEY": "-----BEGIN-----\\nabc\\n-----END-----",
        "GOOGLE_SHEET_ID": "sheet-1",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = settings_from_env()
    assert settings.service_account_private_key == "-----BEGIN-----\nabc\n-----END-----"
    assert settings.sheets_configured is True


def test_origins_timeout_and_profile_parsing() -> None:
    env = {
        "ALLOWED_ORIGINS": "https://a.example, https://b.example ,",
        "GEMINI_TIMEOUT_SEC": "0.2",
        "SCORING_PROFILE": " Classic ",
        "LOG_LEVEL": "debug",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = settings_from_env()
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
    assert settings.gemini_timeout_sec == 1.0
    assert settings.scoring_profile == "classic"
    assert settings.log_level == "DEBUG"


def test_invalid_timeout_falls_back() -> None:
    with patch.dict(os.environ, {"GEMINI_TIMEOUT_SEC": "soon"}, clear=True):
        settings = settings_from_env()
    assert settings.gemini_timeout_sec == 30.0


def test_unknown_log_level_falls_back_to_info() -> None:
    with patch.dict(os.environ, {"LOG_LEVEL": "verbose"}, clear=True):
        assert settings_from_env().log_level == "INFO"
    with patch.dict(os.environ, {"LOG_LEVEL": " warn "}, clear=True):
        assert settings_from_env().log_level == "WARNING"
