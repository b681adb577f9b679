"""Input checks applied before any store access."""
from __future__ import annotations

import re
import uuid

from agora.core.errors import ValidationError

USERNAME_MAX_LENGTH = 30
EMAIL_MAX_LENGTH = 100

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_string(value: str, max_length: int, field: str) -> str:
    """Trim ``value`` and check it is non-empty, short enough and printable."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} cannot be empty")
    if len(cleaned) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    if _CONTROL_RE.search(cleaned):
        raise ValidationError(f"{field} contains invalid characters")
    return cleaned


def validate_username(value: str) -> str:
    username = sanitize_string(value, USERNAME_MAX_LENGTH, "username")
    if not _USERNAME_RE.match(username):
        raise ValidationError(
            "username may only contain letters, digits, dots, dashes and underscores"
        )
    return username


def validate_email(value: str) -> str:
    email = sanitize_string(value, EMAIL_MAX_LENGTH, "email")
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    return email.lower()


def validate_user_id(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, TypeError, AttributeError) as err:
        raise ValidationError("Invalid user ID format") from err
