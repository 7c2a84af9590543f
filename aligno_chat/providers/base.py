from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator


@dataclass
class ProviderClientError(Exception):
    status_code: int
    message: str


class ProviderClient(ABC):
    @abstractmethod
    async def open_chat_stream(self, payload: dict[str, Any]) -> AsyncIterator[str]:
        """Start a streaming completion and return its SSE-encoded records.

        Errors the upstream reports before the first chunk are raised from this call,
        so callers can answer with a plain status code before streaming begins.
        """
        raise NotImplementedError

    @abstractmethod
    async def aclose(self) -> None:
        raise NotImplementedError
