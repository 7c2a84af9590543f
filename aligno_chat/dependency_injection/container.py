from __future__ import annotations

import punq
from fastapi import Request

from aligno_chat.core.settings import Settings
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


def _build_transcript_store(settings: Settings) -> TranscriptStoreProtocol:
    if settings.supabase_url and settings.supabase_anon_key:
        return RestTranscriptStore(
            base_url=settings.supabase_url,
            api_key=settings.supabase_anon_key,
            table=settings.chat_messages_table,
        )
    return InMemoryTranscriptStore()


def _build_provider_client(settings: Settings) -> ProviderClient:
    if not settings.ai_gateway_api_key:
        raise ValueError("LOVABLE_API_KEY required for the ai-chat relay")
    return OpenAIProviderClient(
        api_key=settings.ai_gateway_api_key,
        base_url=settings.ai_gateway_base_url,
        timeout_seconds=settings.provider_timeout_seconds,
    )


def build_chat_client_container(settings: Settings) -> punq.Container:
    """Wire the chat client side: session, transcript store, stream client and chat service.

    Callers own the resolved stream client and REST transcript store and close them with ``aclose()``.
    """

    container = punq.Container()
    container.register(Settings, instance=settings)

    container.register(
        SessionProviderProtocol,
        factory=lambda: StaticSessionProvider(
            access_token=settings.chat_access_token,
            user_id=settings.chat_user_id,
        ),
        scope=punq.Scope.singleton,
    )
    container.register(
        TranscriptStoreProtocol,
        factory=lambda: _build_transcript_store(settings),
        scope=punq.Scope.singleton,
    )
    container.register(
        ChatStreamClientProtocol,
        factory=lambda: ChatStreamClient(
            chat_url=settings.ai_chat_url,
            timeout_seconds=settings.chat_stream_timeout_seconds,
            max_pending_retries=settings.chat_stream_max_pending_retries,
        ),
        scope=punq.Scope.singleton,
    )
    # Each resolve starts a fresh conversation.
    container.register(ChatServiceProtocol, factory=ChatService)

    return container


def build_container(settings: Settings) -> punq.Container:
    """Wire the ai-chat relay app."""

    container = punq.Container()
    container.register(Settings, instance=settings)
    container.register(AuthServiceProtocol, factory=JwtTokenValidator, scope=punq.Scope.singleton)
    container.register(
        ProviderClient,
        factory=lambda: _build_provider_client(settings),
        scope=punq.Scope.singleton,
    )

    return container


def get_container(request: Request) -> punq.Container:
    return request.app.state.container
