from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from mememage.core.config import get_settings
from mememage.core.errors import InvalidTokenError
from mememage.core.tokens import TOKEN_TTL, TokenService, extract_bearer_token, resolve_signing_secret


def test_issue_then_validate_round_trips_identity(tokens):
    user_id = str(uuid.uuid4())
    claims = tokens.validate(tokens.issue(user_id, "alice"))

    assert claims.sub == user_id
    assert claims.username == "alice"


def test_expiration_is_seven_days_after_issuance(tokens):
    issued = datetime.now(timezone.utc).replace(microsecond=0)
    claims = tokens.validate(tokens.issue("42", "alice", now=issued))

    assert claims.exp - issued == TOKEN_TTL == timedelta(days=7)


def test_expired_token_is_rejected(tokens):
    issued = datetime.now(timezone.utc) - TOKEN_TTL - timedelta(minutes=1)
    token = tokens.issue("42", "alice", now=issued)

    with pytest.raises(InvalidTokenError):
        tokens.validate(token)


def test_foreign_signature_is_rejected(tokens):
    other = TokenService("another-secret-that-is-also-long-enough-for-hs256")
    with pytest.raises(InvalidTokenError):
        tokens.validate(other.issue("42", "alice"))


def test_tampered_and_garbage_tokens_are_rejected(tokens):
    token = tokens.issue("42", "alice")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    for bad in (tampered, "garbage", "a.b.c", ""):
        with pytest.raises(InvalidTokenError):
            tokens.validate(bad)


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("abc") is None
    assert extract_bearer_token("bearer abc") is None
    assert extract_bearer_token("Bearer ") is None
    assert extract_bearer_token("") is None
    assert extract_bearer_token(None) is None


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService("")


def test_signing_secret_comes_from_configuration(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "configured-secret")
    monkeypatch.setenv("APP_ENV", "dev")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert resolve_signing_secret(settings) == "configured-secret"

        unset = replace(settings, jwt_secret="")
        first = resolve_signing_secret(unset)
        assert first and first != resolve_signing_secret(unset)

        with pytest.raises(RuntimeError):
            resolve_signing_secret(replace(unset, app_env="prod"))
    finally:
        get_settings.cache_clear()
