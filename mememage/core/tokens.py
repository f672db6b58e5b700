"""Identity tokens (signed JWT) and bearer header parsing."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from mememage.core.config import Settings
from mememage.core.errors import InvalidTokenError

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(days=7)
ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Claims:
    sub: str
    username: str
    exp: datetime


class TokenService:
    """Issues and validates HS256 tokens with a fixed 7 day horizon."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret

    def issue(self, user_id: str, username: str, *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "username": username,
            "iat": issued_at,
            "exp": issued_at + TOKEN_TTL,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def validate(self, token: str) -> Claims:
        try:
            data = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc
        username = data.get("username")
        if not isinstance(username, str):
            raise InvalidTokenError("Invalid token: missing username claim")
        return Claims(
            sub=str(data["sub"]),
            username=username,
            exp=datetime.fromtimestamp(int(data["exp"]), tz=timezone.utc),
        )


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>``; None for any other shape."""
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        return None
    token = header_value[len(BEARER_PREFIX):]
    return token or None


def resolve_signing_secret(settings: Settings) -> str:
    """Pick the signing secret for this process.

    Production refuses to start without ``JWT_SECRET``. Other environments
    fall back to a random per-process secret, so tokens do not survive a
    restart.
    """
    if settings.jwt_secret:
        return settings.jwt_secret
    if settings.app_env == "prod":
        raise RuntimeError("JWT_SECRET must be configured when APP_ENV=prod.")
    logger.warning("JWT_SECRET not set; using an ephemeral signing secret for this process")
    return secrets.token_urlsafe(32)
