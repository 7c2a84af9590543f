"""Shared test utilities and fixtures for aligno-chat tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
import json
import time

import jwt
import punq
import pytest

from aligno_chat.core.settings import Settings

TEST_JWT_SECRET = "test-secret-with-enough-bytes-for-hs256"


def delta_record(content: str) -> str:
    """One OpenAI-style streaming record carrying ``content`` as its delta."""

    return f"data: {json.dumps({'choices': [{'delta': {'content': content}}]}, ensure_ascii=False)}\n"


async def iter_chunks(chunks: Iterable[bytes | str]) -> AsyncIterator[bytes | str]:
    for chunk in chunks:
        yield chunk


async def failing_chunks(chunks: Iterable[bytes], error: Exception) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk
    raise error


def issue_access_token(
    user_id: str = "7d6722a0-905e-4e9a-8c1c-4e4504e194f4",
    *,
    secret: str = TEST_JWT_SECRET,
    audience: str = "authenticated",
    expires_in: int = 300,
) -> str:
    now = int(time.time())
    payload = {
        "sub": user_id,
        "email": "alice@example.com",
        "role": "authenticated",
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeTranscriptStore:
    """Records saved exchanges; optionally fails like a rejected insert."""

    def __init__(self, error: Exception | None = None) -> None:
        self.saved: list[tuple[str, str | None, str, str]] = []
        self._error = error

    async def save_exchange(self, session, user_content: str, assistant_content: str) -> None:
        if self._error is not None:
            raise self._error
        self.saved.append((session.access_token, session.user_id, user_content, assistant_content))


@pytest.fixture
def test_settings() -> Settings:
    return Settings(auth_jwt_secret=TEST_JWT_SECRET, ai_gateway_api_key="test-gateway-key")


@pytest.fixture
def fake_transcript_store() -> FakeTranscriptStore:
    return FakeTranscriptStore()


def build_test_container(bindings: dict[object, object]) -> punq.Container:
    """Create a punq container and bind protocol/service keys to test doubles."""

    container = punq.Container()
    for key, value in bindings.items():
        container.register(key, instance=value)
    return container
