from __future__ import annotations

from dataclasses import dataclass
import logging

import jwt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatSession:
    access_token: str
    user_id: str | None = None


def user_id_from_access_token(access_token: str) -> str | None:
    """Read the ``sub`` claim without verifying the signature.

    The ai-chat relay verifies the token; the client only needs the id to tag the
    rows it persists.
    """

    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        logger.warning("access token is not a decodable JWT")
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None


class StaticSessionProvider:
    """Session provider backed by a pre-issued access token."""

    def __init__(self, access_token: str | None, user_id: str | None = None) -> None:
        self._access_token = access_token
        self._user_id = user_id

    async def get_session(self) -> ChatSession | None:
        if not self._access_token:
            return None
        user_id = self._user_id or user_id_from_access_token(self._access_token)
        return ChatSession(access_token=self._access_token, user_id=user_id)
