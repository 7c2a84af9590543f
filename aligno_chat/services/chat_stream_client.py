from __future__ import annotations

from collections.abc import Sequence
import logging

import httpx

from aligno_chat.api.schemas.chat import ChatMessage
from aligno_chat.services.errors import AuthRequiredError, PaymentRequiredError, RateLimitedError, TransportError
from aligno_chat.streaming.decoder import StreamingChatDecoder, UpdateCallback
from aligno_chat.streaming.models import StreamOutcome, StreamResult

logger = logging.getLogger(__name__)


class ChatStreamClient:
    """HTTP client for the streaming ai-chat endpoint."""

    def __init__(
        self,
        chat_url: str,
        *,
        timeout_seconds: float = 60.0,
        max_pending_retries: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._chat_url = chat_url
        self._max_pending_retries = max_pending_retries
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def stream_chat(
        self,
        *,
        access_token: str | None,
        messages: Sequence[ChatMessage],
        on_update: UpdateCallback | None = None,
    ) -> StreamResult:
        """POST the conversation and decode the streamed reply.

        Raises ``AuthRequiredError`` without touching the network when no token is
        available, and ``RateLimitedError`` / ``PaymentRequiredError`` / ``TransportError``
        when the endpoint refuses to start a stream. Failures after the stream opened are
        reported through the returned result instead.
        """

        if not access_token:
            raise AuthRequiredError()

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
        }
        body = {"messages": [message.model_dump() for message in messages]}
        decoder = StreamingChatDecoder(max_pending_retries=self._max_pending_retries)

        try:
            async with self._client.stream("POST", self._chat_url, json=body, headers=headers) as response:
                if response.status_code == 429:
                    logger.info("ai chat rate limited", extra={"status_code": 429})
                    raise RateLimitedError()
                if response.status_code == 402:
                    logger.info("ai chat credits exhausted", extra={"status_code": 402})
                    raise PaymentRequiredError()
                if not response.is_success:
                    logger.warning("ai chat stream refused", extra={"status_code": response.status_code})
                    raise TransportError(f"failed to start stream: status {response.status_code}")

                result = await decoder.consume(response.aiter_bytes(), on_update)
                if decoder.upstream_error is not None and result.outcome is not StreamOutcome.FAILED:
                    logger.warning(
                        "ai chat stream reported an upstream error",
                        extra={"error_code": decoder.upstream_error.get("code")},
                    )
                    result = StreamResult(
                        outcome=StreamOutcome.FAILED,
                        message=result.message,
                        error=TransportError(f"upstream failed mid-stream: {decoder.upstream_error.get('message')}"),
                    )
        except httpx.HTTPError as exc:
            logger.warning("ai chat request failed", extra={"error_type": type(exc).__name__})
            raise TransportError(f"failed to start stream: {exc}") from exc

        logger.info(
            "ai chat stream ended",
            extra={"outcome": result.outcome.value, "assembled_chars": len(result.message)},
        )
        return result

    async def aclose(self) -> None:
        await self._client.aclose()
