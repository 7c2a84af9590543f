from __future__ import annotations

from dataclasses import dataclass
import logging

from aligno_chat.api.schemas.chat import ChatMessage
from aligno_chat.services.contracts import (
    ChatStreamClientProtocol,
    SessionProviderProtocol,
    TranscriptStoreProtocol,
)
from aligno_chat.services.errors import (
    AuthRequiredError,
    ChatError,
    PaymentRequiredError,
    PersistenceError,
    RateLimitedError,
)
from aligno_chat.streaming.decoder import UpdateCallback
from aligno_chat.streaming.models import StreamOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """Non-blocking user-facing message describing a failure class."""

    title: str
    description: str


AUTH_REQUIRED_NOTIFICATION = Notification("Authentication required", "Please log in to use the AI assistant.")
RATE_LIMITED_NOTIFICATION = Notification("Rate limit exceeded", "Please try again later.")
PAYMENT_REQUIRED_NOTIFICATION = Notification("Payment required", "Please add funds to continue using AI features.")
GENERIC_ERROR_NOTIFICATION = Notification("Error", "Failed to send message. Please try again.")


def notification_for(error: ChatError) -> Notification:
    if isinstance(error, AuthRequiredError):
        return AUTH_REQUIRED_NOTIFICATION
    if isinstance(error, RateLimitedError):
        return RATE_LIMITED_NOTIFICATION
    if isinstance(error, PaymentRequiredError):
        return PAYMENT_REQUIRED_NOTIFICATION
    return GENERIC_ERROR_NOTIFICATION


@dataclass(frozen=True)
class ChatTurn:
    user_message: str
    assistant_message: str | None = None
    outcome: StreamOutcome | None = None
    notification: Notification | None = None
    persisted: bool = False


class ChatService:
    """Use-case service for one assistant conversation and its transcript persistence."""

    def __init__(
        self,
        client: ChatStreamClientProtocol,
        session_provider: SessionProviderProtocol,
        transcript_store: TranscriptStoreProtocol,
    ) -> None:
        self._client = client
        self._session_provider = session_provider
        self._transcript_store = transcript_store
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    async def send(self, user_message: str, on_update: UpdateCallback | None = None) -> ChatTurn:
        content = user_message.strip()
        if not content:
            raise ValueError("message must not be empty")

        self._messages.append(ChatMessage(role="user", content=content))

        session = await self._session_provider.get_session()
        try:
            if session is None:
                raise AuthRequiredError()
            result = await self._client.stream_chat(
                access_token=session.access_token,
                messages=list(self._messages),
                on_update=on_update,
            )
        except ChatError as exc:
            logger.info("ai chat request not started", extra={"reason": type(exc).__name__})
            return ChatTurn(user_message=content, notification=notification_for(exc))

        self._messages.append(ChatMessage(role="assistant", content=result.message))

        if result.outcome is StreamOutcome.FAILED:
            return ChatTurn(
                user_message=content,
                assistant_message=result.message,
                outcome=result.outcome,
                notification=GENERIC_ERROR_NOTIFICATION,
            )

        if session.user_id is None:
            logger.info("skipping transcript persistence for session without user id")
            return ChatTurn(user_message=content, assistant_message=result.message, outcome=result.outcome)

        try:
            await self._transcript_store.save_exchange(session, content, result.message)
        except PersistenceError:
            logger.exception("chat transcript persistence failed", extra={"user_id": session.user_id})
            return ChatTurn(
                user_message=content,
                assistant_message=result.message,
                outcome=result.outcome,
                notification=GENERIC_ERROR_NOTIFICATION,
            )

        return ChatTurn(
            user_message=content,
            assistant_message=result.message,
            outcome=result.outcome,
            persisted=True,
        )
