"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from mememage.core.errors import ConflictError, UnauthenticatedError
from mememage.core.security import hash_password, verify_password
from mememage.core.tokens import TokenService
from mememage.domain.schemas import AuthPayload, LoginRequest, SignupRequest, UserPublic, parse_payload
from mememage.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Handles signup and login; both end by issuing a token."""

    repository: SQLRepository
    tokens: TokenService

    def _auth_payload(self, user) -> dict:
        token = self.tokens.issue(str(user.id), user.username)
        payload = AuthPayload(token=token, user=UserPublic.model_validate(user))
        return payload.model_dump(mode="json")

    # -------------------------------------- signup --------------------------------------
    def signup(self, data: Any) -> dict:
        request = parse_payload(SignupRequest, data)
        if self.repository.find_user_by_username(request.username):
            raise ConflictError("Username already exists")
        if self.repository.find_user_by_email(request.email):
            raise ConflictError("Email already exists")
        password_hash = hash_password(request.password)
        user = self.repository.create_user(request.username, request.email, password_hash)
        logger.info("Registered user %s (%s)", user.username, user.id)
        return self._auth_payload(user)

    # -------------------------------------- login --------------------------------------
    def login(self, data: Any) -> dict:
        request = parse_payload(LoginRequest, data)
        user = self.repository.find_user_by_username(request.username)
        if not user or not verify_password(request.password, user.password_hash):
            logger.info("Rejected login for %s", request.username)
            raise UnauthenticatedError("Invalid credentials")
        return self._auth_payload(user)
