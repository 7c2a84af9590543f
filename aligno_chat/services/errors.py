from __future__ import annotations


class ChatError(Exception):
    """Base class for chat failures surfaced to the caller."""

    default_message = "chat request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthRequiredError(ChatError):
    default_message = "no valid session credential available"


class RateLimitedError(ChatError):
    default_message = "ai chat rate limited"


class PaymentRequiredError(ChatError):
    default_message = "ai chat credits exhausted"


class TransportError(ChatError):
    default_message = "ai chat transport failed"


class PersistenceError(ChatError):
    default_message = "failed to persist chat transcript"
