from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StreamOutcome(str, Enum):
    """Terminal state of one decoding session."""

    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class DecoderState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self not in (DecoderState.IDLE, DecoderState.STREAMING)


@dataclass(frozen=True)
class StreamResult:
    """Final assembled assistant message and how the stream ended.

    ``error`` carries the transport exception for ``FAILED`` sessions so the caller
    can report it while still showing the partial ``message``.
    """

    outcome: StreamOutcome
    message: str
    error: BaseException | None = None
