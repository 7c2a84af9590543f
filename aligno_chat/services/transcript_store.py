from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from aligno_chat.services.errors import PersistenceError
from aligno_chat.services.session_provider import ChatSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptRecord:
    user_id: str | None
    role: str
    content: str


def exchange_rows(session: ChatSession, user_content: str, assistant_content: str) -> list[TranscriptRecord]:
    return [
        TranscriptRecord(user_id=session.user_id, role="user", content=user_content),
        TranscriptRecord(user_id=session.user_id, role="assistant", content=assistant_content),
    ]


class InMemoryTranscriptStore:
    """Process-local transcript store used when no hosted backend is configured."""

    def __init__(self) -> None:
        self.records: list[TranscriptRecord] = []

    async def save_exchange(self, session: ChatSession, user_content: str, assistant_content: str) -> None:
        self.records.extend(exchange_rows(session, user_content, assistant_content))


class RestTranscriptStore:
    """Inserts chat rows through the hosted backend's REST interface.

    Both rows go out in a single request so the backend stores the exchange atomically.
    Requests are authorized with the signed-in user's token so row-level policies apply.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "chat_messages",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout_seconds)
        self._api_key = api_key
        self._table = table

    async def save_exchange(self, session: ChatSession, user_content: str, assistant_content: str) -> None:
        rows = [
            {"user_id": record.user_id, "role": record.role, "content": record.content}
            for record in exchange_rows(session, user_content, assistant_content)
        ]
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        try:
            response = await self._client.post(f"/rest/v1/{self._table}", json=rows, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "chat transcript insert rejected",
                extra={"status_code": exc.response.status_code, "table": self._table},
            )
            raise PersistenceError(f"transcript insert failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("chat transcript insert failed", extra={"table": self._table})
            raise PersistenceError() from exc

    async def aclose(self) -> None:
        await self._client.aclose()
