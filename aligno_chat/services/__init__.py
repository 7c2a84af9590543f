"""Service layer orchestrating application use-cases."""

from aligno_chat.services.chat_service import ChatService, ChatTurn, Notification
from aligno_chat.services.chat_stream_client import ChatStreamClient
from aligno_chat.services.session_provider import ChatSession, StaticSessionProvider
from aligno_chat.services.transcript_store import InMemoryTranscriptStore, RestTranscriptStore

__all__ = [
    "ChatService",
    "ChatSession",
    "ChatStreamClient",
    "ChatTurn",
    "InMemoryTranscriptStore",
    "Notification",
    "RestTranscriptStore",
    "StaticSessionProvider",
]
