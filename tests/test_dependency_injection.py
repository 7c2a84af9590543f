from __future__ import annotations

import pytest

from aligno_chat.core.settings import Settings
from aligno_chat.dependency_injection import build_chat_client_container, build_container
from aligno_chat.providers.base import ProviderClient
from aligno_chat.providers.openai_client import OpenAIProviderClient
from aligno_chat.services.auth_service import JwtTokenValidator
from aligno_chat.services.chat_service import ChatService
from aligno_chat.services.chat_stream_client import ChatStreamClient
from aligno_chat.services.contracts import (
    AuthServiceProtocol,
    ChatServiceProtocol,
    ChatStreamClientProtocol,
    SessionProviderProtocol,
    TranscriptStoreProtocol,
)
from aligno_chat.services.session_provider import StaticSessionProvider
from aligno_chat.services.transcript_store import InMemoryTranscriptStore, RestTranscriptStore


def test_chat_client_container_resolves_singleton_collaborators(test_settings: Settings) -> None:
    container = build_chat_client_container(test_settings)

    assert container.resolve(SessionProviderProtocol) is container.resolve(SessionProviderProtocol)
    assert container.resolve(TranscriptStoreProtocol) is container.resolve(TranscriptStoreProtocol)
    assert container.resolve(ChatStreamClientProtocol) is container.resolve(ChatStreamClientProtocol)
    assert isinstance(container.resolve(SessionProviderProtocol), StaticSessionProvider)
    assert isinstance(container.resolve(ChatStreamClientProtocol), ChatStreamClient)


def test_chat_client_container_builds_a_fresh_chat_service_per_resolve(test_settings: Settings) -> None:
    container = build_chat_client_container(test_settings)

    first = container.resolve(ChatServiceProtocol)
    second = container.resolve(ChatServiceProtocol)

    assert isinstance(first, ChatService)
    assert first is not second


def test_chat_client_container_uses_in_memory_store_without_backend(test_settings: Settings) -> None:
    container = build_chat_client_container(test_settings)

    assert isinstance(container.resolve(TranscriptStoreProtocol), InMemoryTranscriptStore)


def test_chat_client_container_uses_rest_store_when_backend_configured() -> None:
    settings = Settings(supabase_url="https://project.example.test", supabase_anon_key="anon")

    container = build_chat_client_container(settings)

    assert isinstance(container.resolve(TranscriptStoreProtocol), RestTranscriptStore)


def test_relay_container_wires_auth_and_gateway_provider_client(test_settings: Settings) -> None:
    container = build_container(test_settings)

    assert container.resolve(AuthServiceProtocol) is container.resolve(AuthServiceProtocol)
    assert isinstance(container.resolve(AuthServiceProtocol), JwtTokenValidator)
    assert isinstance(container.resolve(ProviderClient), OpenAIProviderClient)


def test_relay_container_holds_no_chat_client_services(test_settings: Settings) -> None:
    container = build_container(test_settings)

    for key in (SessionProviderProtocol, TranscriptStoreProtocol, ChatStreamClientProtocol, ChatServiceProtocol):
        with pytest.raises(Exception):  # noqa: B017
            container.resolve(key)


def test_container_refuses_provider_client_without_gateway_key() -> None:
    container = build_container(Settings(ai_gateway_api_key=None))

    with pytest.raises(ValueError):
        container.resolve(ProviderClient)
