"""Utilities for issuing and validating application JWTs."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import jwt

from ..config import DEVELOPMENT_SIGNING_KEY, get_settings
from ..domain.account import Account

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def issue_access_token(
    account: Account,
    *,
    signing_key: str | None = None,
    issuer: str | None = None,
    audience: str | None = None,
    ttl_seconds: int | None = None,
) -> tuple[str, int]:
    """Create a signed JWT representing an authenticated account.

    Parameters
    ----------
    account:
        Account whose identity, display name and role are asserted.
    signing_key:
        Symmetric HS256 key; defaults to ``JWT_SECRET`` from the settings, which
        itself falls back to the development key.
    issuer, audience:
        Values for the ``iss`` and ``aud`` claims; default to the settings.
    ttl_seconds:
        Token lifetime; defaults to ``JWT_TTL_SECONDS`` (24 hours).

    Returns
    -------
    tuple[str, int]
        A tuple containing the encoded JWT string and its TTL (in seconds).
    """

    settings = get_settings()
    key = signing_key or settings.jwt_secret or DEVELOPMENT_SIGNING_KEY
    if key == DEVELOPMENT_SIGNING_KEY:
        logger.warning("issuing token signed with the development fallback key")

    now = int(time.time())
    expires_in = ttl_seconds if ttl_seconds is not None else settings.jwt_ttl_seconds
    payload: dict[str, Any] = {
        "iss": issuer or settings.jwt_issuer,
        "aud": audience or settings.jwt_audience,
        "sub": str(account.id),
        "email": account.email,
        "name": account.name,
        "role": account.role,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + expires_in,
    }

    token = jwt.encode(payload, key, algorithm=ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str,
    *,
    signing_key: str | None = None,
    issuer: str | None = None,
    audience: str | None = None,
) -> dict[str, Any]:
    """Decode and verify a JWT returning its payload.

    Raises
    ------
    jwt.PyJWTError
        Propagated when the token is invalid, expired, or issued for another
        issuer or audience.
    """

    settings = get_settings()
    return jwt.decode(
        token,
        signing_key or settings.jwt_secret or DEVELOPMENT_SIGNING_KEY,
        algorithms=[ALGORITHM],
        audience=audience or settings.jwt_audience,
        issuer=issuer or settings.jwt_issuer,
    )
