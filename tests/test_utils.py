import os
from unittest import mock

import pytest

from journal_relay.config import DEFAULT_RATE_LIMIT_MESSAGE, Settings
from journal_relay.utils import client_identifier, strip_code_fences


def test_strip_code_fences_unwraps_fenced_reply():
    raw = "  ```markdown\nYou are doing well.\n\nTry a short walk.\n```\n"
    assert strip_code_fences(raw) == "You are doing well.\n\nTry a short walk."


def test_strip_code_fences_unwraps_single_line_fences():
    assert strip_code_fences("```Be kind to yourself.```") == "Be kind to yourself."
    assert strip_code_fences("  ````  Rest today.  ````\n") == "Rest today."


def test_strip_code_fences_trims_plain_text():
    assert strip_code_fences("\n  Breathe slowly.  \n") == "Breathe slowly."
    assert strip_code_fences(None) == ""


def test_strip_code_fences_keeps_inner_fences():
    raw = "Try this:\n```\nbreathe in\n```\nThen rest."
    assert strip_code_fences(raw) == raw


def test_client_identifier_ignores_forwarded_header_by_default():
    assert client_identifier("10.0.0.1", "203.0.113.7") == "10.0.0.1"


def test_client_identifier_trusts_proxy_when_configured():
    assert client_identifier("10.0.0.1", " 203.0.113.7, 10.0.0.2", trust_proxy=True) == "203.0.113.7"
    assert client_identifier("10.0.0.1", " , ", trust_proxy=True) == "10.0.0.1"
    assert client_identifier(None, None, trust_proxy=True) == "unknown"


def test_settings_from_env_defaults():
    with mock.patch.dict(os.environ, {"GEMINI_API_KEY": "secret"}, clear=True):
        settings = Settings.from_env()

    assert settings.gemini_api_key == "secret"
    assert settings.port == 3000
    assert settings.quota_limit == 20
    assert settings.quota_window_seconds == 21600
    assert settings.primary_model == "gemini-1.5-flash-latest"
    assert settings.fallback_model == "gemini-1.5-flash"
    assert settings.trust_proxy is False
    assert settings.rate_limit_message == DEFAULT_RATE_LIMIT_MESSAGE


def test_settings_from_env_overrides():
    env = {
        "GEMINI_API_KEY": "secret",
        "PORT": "8080",
        "QUOTA_LIMIT": "6",
        "GEMINI_BASE_URL": "https://example.test/v1/",
        "TRUST_PROXY": "true",
    }
    with mock.patch.dict(os.environ, env, clear=True):
        settings = Settings.from_env()

    assert settings.port == 8080
    assert settings.quota_limit == 6
    assert settings.gemini_base_url == "https://example.test/v1"
    assert settings.trust_proxy is True


def test_settings_require_api_key():
    with mock.patch.dict(os.environ, {}, clear=True):
        with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
            Settings.from_env()


def test_settings_reject_non_integer_values():
    with mock.patch.dict(os.environ, {"GEMINI_API_KEY": "k", "QUOTA_LIMIT": "lots"}, clear=True):
        with pytest.raises(RuntimeError, match="QUOTA_LIMIT"):
            Settings.from_env()
