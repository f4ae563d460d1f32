"""Field rules shared by account creation, update and registration."""

from __future__ import annotations

import re

from .errors import ValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def normalize_email(email: str) -> str:
    """Trim and lowercase an email so it can be stored or compared."""
    return email.strip().lower()


def validate_name(name: str | None) -> str:
    """Return the trimmed name or raise ``ValidationError``."""
    if is_blank(name):
        raise ValidationError("name is required")
    trimmed = name.strip()
    # code points, not grapheme clusters
    if len(trimmed) < NAME_MIN_LENGTH:
        raise ValidationError(f"name must contain at least {NAME_MIN_LENGTH} characters")
    if len(trimmed) > NAME_MAX_LENGTH:
        raise ValidationError(f"name cannot exceed {NAME_MAX_LENGTH} characters")
    return trimmed


def validate_email(email: str | None) -> str:
    """Return the normalised email or raise ``ValidationError``."""
    if is_blank(email):
        raise ValidationError("email is required")
    normalized = normalize_email(email)
    if len(normalized) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"email cannot exceed {EMAIL_MAX_LENGTH} characters")
    if not _EMAIL_PATTERN.match(normalized):
        raise ValidationError("email format is invalid")
    return normalized


def validate_password(password: str | None, confirm_password: str | None) -> str:
    """Check a new password against its confirmation and the length bounds."""
    if is_blank(password):
        raise ValidationError("password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"password must contain at least {PASSWORD_MIN_LENGTH} characters")
    # bcrypt only accepts the first 72 bytes of a secret
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"password cannot exceed {PASSWORD_MAX_BYTES} bytes")
    if password != confirm_password:
        raise ValidationError("passwords do not match")
    return password
