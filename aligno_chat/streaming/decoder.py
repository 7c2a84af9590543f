"""Incremental decoder for OpenAI-style chat completion event streams.

The AI chat endpoint answers with newline-delimited records::

    data: {"choices":[{"delta":{"content":"Hel"}}]}
    data: {"choices":[{"delta":{"content":"lo"}}]}
    data: [DONE]

Network chunks may split a record (or a multi-byte character) at any byte, so the
decoder buffers text until a line break arrives and re-queues a data record whose
JSON does not parse yet instead of dropping it.
"""

from __future__ import annotations

import asyncio
import codecs
import inspect
import json
import logging
from collections.abc import AsyncIterable, Awaitable, Callable
from typing import Any

from aligno_chat.streaming.models import DecoderState, StreamOutcome, StreamResult

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
COMMENT_PREFIX = ":"
DONE_SENTINEL = "[DONE]"

UpdateCallback = Callable[[str], Awaitable[None] | None]


def extract_delta_content(payload: Any) -> str | None:
    """Return ``choices[0].delta.content`` when the record carries non-empty text."""

    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first_choice = choices[0]
    if not isinstance(first_choice, dict):
        return None
    delta = first_choice.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class StreamingChatDecoder:
    """Turns raw response chunks into cumulative assistant message updates.

    One instance serves exactly one streaming request. ``max_pending_retries`` bounds
    how many further chunks a data record that failed to parse may wait for before it
    is discarded; ``None`` keeps waiting until the stream ends.
    """

    def __init__(self, *, encoding: str = "utf-8", max_pending_retries: int | None = None) -> None:
        if max_pending_retries is not None and max_pending_retries < 0:
            raise ValueError("max_pending_retries must be non-negative")
        self._text_decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._max_pending_retries = max_pending_retries
        self._buffer = ""
        self._message = ""
        self._state = DecoderState.IDLE
        self._result: StreamResult | None = None
        self._abandoned = False
        self._pending_line: str | None = None
        self._pending_failures = 0
        self._upstream_error: dict[str, Any] | None = None

    @property
    def state(self) -> DecoderState:
        return self._state

    @property
    def message(self) -> str:
        return self._message

    @property
    def result(self) -> StreamResult | None:
        return self._result

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    @property
    def upstream_error(self) -> dict[str, Any] | None:
        """Last in-band ``{"error": {...}}`` record the server sent, if any."""

        return self._upstream_error

    def feed(self, chunk: bytes | str) -> list[str]:
        """Process one transport chunk and return the cumulative message after each new fragment."""

        if self._abandoned or self._state.is_terminal:
            return []
        self._state = DecoderState.STREAMING
        if isinstance(chunk, str):
            # Bytes held for an unfinished character can no longer complete.
            text = self._text_decoder.decode(b"", final=True) + chunk
            self._text_decoder.reset()
        else:
            text = self._text_decoder.decode(chunk)
        self._buffer += text
        return self._drain_lines()

    def finish(self) -> StreamResult:
        """Finalize after the transport reported end of stream."""

        self._ensure_not_abandoned()
        if self._result is not None:
            return self._result
        tail = self._buffer + self._text_decoder.decode(b"", final=True)
        if tail.strip():
            logger.debug("dropping unterminated stream tail", extra={"pending_chars": len(tail)})
        self._buffer = ""
        return self._finalize(StreamOutcome.EXHAUSTED)

    def fail(self, error: BaseException) -> StreamResult:
        """Finalize after a transport read error, keeping the message assembled so far."""

        self._ensure_not_abandoned()
        if self._result is not None:
            return self._result
        return self._finalize(StreamOutcome.FAILED, error)

    def abandon(self) -> None:
        self._abandoned = True
        self._buffer = ""

    async def consume(
        self,
        chunks: AsyncIterable[bytes] | AsyncIterable[str],
        on_update: UpdateCallback | None = None,
    ) -> StreamResult:
        """Drive the decoder over ``chunks`` until the terminator, end of stream, or a read error."""

        iterator = aiter(chunks)
        try:
            while True:
                try:
                    chunk = await anext(iterator)
                except StopAsyncIteration:
                    return self.finish()
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "chat stream read failed",
                        extra={"error_type": type(exc).__name__, "assembled_chars": len(self._message)},
                    )
                    return self.fail(exc)

                for update in self.feed(chunk):
                    if on_update is not None:
                        pending = on_update(update)
                        if inspect.isawaitable(pending):
                            await pending

                if self._result is not None:
                    return self._result
        except asyncio.CancelledError:
            self.abandon()
            raise

    def _drain_lines(self) -> list[str]:
        updates: list[str] = []
        while True:
            newline_index = self._buffer.find("\n")
            if newline_index == -1:
                break
            line = self._buffer[:newline_index]
            self._buffer = self._buffer[newline_index + 1 :]

            if line.endswith("\r"):
                line = line[:-1]
            if not line.strip() or line.startswith(COMMENT_PREFIX):
                continue
            if not line.startswith(DATA_PREFIX):
                continue

            data = line[len(DATA_PREFIX) :].strip()
            if data == DONE_SENTINEL:
                self._finalize(StreamOutcome.COMPLETED)
                break

            try:
                payload = json.loads(data)
            except json.JSONDecodeError:
                if self._keep_pending(line):
                    # Wait for more input; the record may continue past this line break.
                    self._buffer = line + "\n" + self._buffer
                    break
                continue

            self._pending_line = None
            if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
                self._upstream_error = payload["error"]
            content = extract_delta_content(payload)
            if content:
                self._message += content
                updates.append(self._message)
        return updates

    def _keep_pending(self, line: str) -> bool:
        if line == self._pending_line:
            self._pending_failures += 1
        else:
            self._pending_line = line
            self._pending_failures = 0

        if self._max_pending_retries is not None and self._pending_failures >= self._max_pending_retries:
            logger.warning(
                "discarding malformed stream record",
                extra={"attempts": self._pending_failures + 1, "record_chars": len(line)},
            )
            self._pending_line = None
            self._pending_failures = 0
            return False
        return True

    def _finalize(self, outcome: StreamOutcome, error: BaseException | None = None) -> StreamResult:
        self._state = DecoderState(outcome.value)
        self._result = StreamResult(outcome=outcome, message=self._message, error=error)
        logger.debug(
            "chat stream finished",
            extra={"outcome": outcome.value, "assembled_chars": len(self._message)},
        )
        return self._result

    def _ensure_not_abandoned(self) -> None:
        if self._abandoned:
            raise RuntimeError("decoder was abandoned")
