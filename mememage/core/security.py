"""Security helpers (hashing and verification)."""

from __future__ import annotations

from argon2 import PasswordHasher, exceptions as argon_exc

from mememage.core.errors import CredentialError

_ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Create a salted Argon2 hash; every call yields a different string."""
    return _ph.hash(password)


def verify_password(password: str, stored_hash: str) -> bool:
    """Return whether ``password`` matches ``stored_hash``.

    A mismatch is a plain ``False``. Only a hash that is not a valid Argon2
    string raises ``CredentialError``.
    """
    try:
        return _ph.verify(stored_hash, password)
    except argon_exc.InvalidHashError as exc:
        raise CredentialError("Stored password hash is malformed") from exc
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError):
        return False
