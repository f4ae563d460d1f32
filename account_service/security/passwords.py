"""bcrypt password hashing helpers."""

from __future__ import annotations

from functools import lru_cache

import bcrypt

from ..config import get_settings


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a plaintext password with a freshly generated salt.

    Two calls with the same input never return the same hash, so stored hashes
    must only be compared through :func:`verify_password`.
    """
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Return ``True`` when ``password`` matches the stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash or a secret bcrypt refuses to process
        return False


@lru_cache(maxsize=4)
def dummy_hash(rounds: int | None = None) -> str:
    """Hash compared against when there is no real one, so misses cost the same."""
    return hash_password("account-service-timing-equaliser", rounds)
