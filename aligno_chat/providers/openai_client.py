from __future__ import annotations

from typing import Any, AsyncIterator

from openai import APIError, APIStatusError, AsyncOpenAI, APITimeoutError, RateLimitError

from aligno_chat.providers.base import ProviderClient, ProviderClientError


def map_openai_error(exc: APIError) -> ProviderClientError:
    if isinstance(exc, APITimeoutError):
        return ProviderClientError(status_code=504, message=str(exc))
    if isinstance(exc, RateLimitError):
        return ProviderClientError(status_code=429, message=str(exc))
    if isinstance(exc, APIStatusError):
        status = exc.status_code
        mapped_status = 502 if status and status >= 500 else (status or 502)
        return ProviderClientError(status_code=mapped_status, message=str(exc))
    return ProviderClientError(status_code=502, message=str(exc))


class OpenAIProviderClient(ProviderClient):
    """Client for an OpenAI-compatible AI gateway."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)

    async def open_chat_stream(self, payload: dict[str, Any]) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(**{**payload, "stream": True})
        except APIError as exc:
            raise map_openai_error(exc) from exc
        return self._encode_stream(stream)

    async def _encode_stream(self, stream: Any) -> AsyncIterator[str]:
        try:
            async for chunk in stream:
                yield f"data: {chunk.model_dump_json()}\n\n"
        except APIError as exc:
            raise map_openai_error(exc) from exc
        yield "data: [DONE]\n\n"

    async def aclose(self) -> None:
        await self._client.close()
