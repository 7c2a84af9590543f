from __future__ import annotations

import pytest

from aligno_chat.core.settings import Settings


def test_settings_read_gateway_key_and_retry_cap_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOVABLE_API_KEY", "gw-key")
    monkeypatch.setenv("CHAT_STREAM_MAX_PENDING_RETRIES", "3")
    monkeypatch.setenv("AI_CHAT_URL", "https://project.example.test/functions/v1/ai-chat")

    settings = Settings()

    assert settings.ai_gateway_api_key == "gw-key"
    assert settings.chat_stream_max_pending_retries == 3
    assert settings.ai_chat_url == "https://project.example.test/functions/v1/ai-chat"


def test_effective_log_level_defaults_by_environment() -> None:
    assert Settings(app_env="local").effective_log_level == "DEBUG"
    assert Settings(app_env="production").effective_log_level == "INFO"
    assert Settings(app_env="production", log_level="warning").effective_log_level == "WARNING"


def test_swagger_only_enabled_locally() -> None:
    assert Settings(app_env="local").enable_swagger is True
    assert Settings(app_env="staging").enable_swagger is False


def test_pending_retry_cap_defaults_to_unbounded(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CHAT_STREAM_MAX_PENDING_RETRIES", raising=False)

    assert Settings().chat_stream_max_pending_retries is None


def test_cors_origins_default_to_any_and_parse_json_list(monkeypatch: pytest.MonkeyPatch) -> None:
    assert Settings().cors_allowed_origins == ["*"]

    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", '["https://app.example.test"]')

    assert Settings().cors_allowed_origins == ["https://app.example.test"]
