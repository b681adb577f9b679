"""Password hashing and session token primitives."""
from __future__ import annotations

import secrets

import bcrypt

from agora.core.errors import PasswordPolicyError
from agora.core.settings import settings

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72
SESSION_TOKEN_BYTES = 32


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of ``plain``."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a password against a stored bcrypt hash.

    Args:
        plain: Candidate password as submitted by the client.
        hashed: Hash previously produced by :func:`hash_password`.

    Returns:
        True if ``plain`` is the password that produced ``hashed``; False for any
        other input, including an empty password or a malformed hash.
    """
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        return False


def validate_password_strength(plain: str) -> None:
    """Raise :class:`PasswordPolicyError` describing the first violated rule."""
    min_length = settings.password_min_length
    if len(plain) < min_length:
        raise PasswordPolicyError(f"Password must be at least {min_length} characters long")
    if len(plain.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise PasswordPolicyError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")
    if plain.strip() != plain:
        raise PasswordPolicyError("Password cannot start or end with whitespace")
    if not any(ch.isalpha() for ch in plain):
        raise PasswordPolicyError("Password must contain at least one letter")
    if not any(ch.isdigit() for ch in plain):
        raise PasswordPolicyError("Password must contain at least one digit")


def generate_session_token() -> str:
    """Return an unguessable, URL-safe session identifier."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
