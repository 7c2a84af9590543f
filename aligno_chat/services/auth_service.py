import logging

import jwt

from aligno_chat.api.schemas.auth import UnifiedPrincipal
from aligno_chat.core.settings import Settings

logger = logging.getLogger(__name__)


class JwtTokenValidator:
    """Validates access tokens issued by the hosted auth backend."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def decode(self, token: str) -> UnifiedPrincipal:
        payload = jwt.decode(
            token,
            self._settings.auth_jwt_secret,
            algorithms=[self._settings.auth_jwt_algorithm],
            audience=self._settings.auth_jwt_audience,
            options={"require": ["sub", "exp"]},
        )
        return UnifiedPrincipal(
            user_id=payload["sub"],
            email=payload.get("email"),
            role=payload.get("role", "authenticated"),
        )

    def principal_from_bearer(self, token: str | None) -> UnifiedPrincipal | None:
        if not token:
            return None
        try:
            return self.decode(token)
        except jwt.PyJWTError as exc:
            logger.info("rejected bearer token", extra={"reason": type(exc).__name__})
            return None
