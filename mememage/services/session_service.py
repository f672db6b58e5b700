"""Bearer authentication helpers shared by the protected flows."""
from __future__ import annotations

import uuid
from typing import Optional

from mememage.core.errors import InvalidTokenError, UnauthenticatedError, ValidationError
from mememage.core.tokens import Claims, TokenService, extract_bearer_token


def authenticate(authorization: Optional[str], tokens: TokenService) -> Claims:
    """Turn an ``Authorization`` header value into validated claims."""
    if not authorization:
        raise UnauthenticatedError("Missing authorization header")
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthenticatedError("Invalid authorization header format")
    try:
        return tokens.validate(token)
    except InvalidTokenError as exc:
        raise UnauthenticatedError(exc.message) from exc


def resolve_user_id(claims: Claims) -> uuid.UUID:
    """Parse the token subject; a well-signed token with a bad subject is a 400."""
    try:
        return uuid.UUID(claims.sub)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid user ID") from exc
