from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from aligno_chat.api.schemas.auth import UnifiedPrincipal
from aligno_chat.api.schemas.chat import ChatMessage
from aligno_chat.services.session_provider import ChatSession
from aligno_chat.streaming.decoder import UpdateCallback
from aligno_chat.streaming.models import StreamResult

if TYPE_CHECKING:
    from aligno_chat.services.chat_service import ChatTurn


class SessionProviderProtocol(Protocol):
    """Source of the signed-in user's bearer credential."""

    async def get_session(self) -> ChatSession | None:
        """Return the active session, or ``None`` when nobody is signed in."""


class TranscriptStoreProtocol(Protocol):
    """Durable storage for finished chat exchanges."""

    async def save_exchange(self, session: ChatSession, user_content: str, assistant_content: str) -> None:
        """Persist one user message and the assistant reply that answered it, in that order."""


class ChatStreamClientProtocol(Protocol):
    """Transport half of a chat request: opens the stream and decodes it."""

    async def stream_chat(
        self,
        *,
        access_token: str | None,
        messages: Sequence[ChatMessage],
        on_update: UpdateCallback | None = None,
    ) -> StreamResult:
        """Send the conversation and return the decoded reply once the stream ends."""

    async def aclose(self) -> None:
        """Release pooled HTTP connections."""


class ChatServiceProtocol(Protocol):
    """One running assistant conversation."""

    @property
    def messages(self) -> list[ChatMessage]:
        """Snapshot of the conversation so far."""

    async def send(self, user_message: str, on_update: UpdateCallback | None = None) -> ChatTurn:
        """Append a user message, stream the reply and persist the finished exchange."""


class AuthServiceProtocol(Protocol):
    """Bearer-token validation for the ai-chat relay."""

    def principal_from_bearer(self, token: str | None) -> UnifiedPrincipal | None:
        """Return the principal for a valid token, or ``None`` for missing or invalid tokens."""
