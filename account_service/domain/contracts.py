"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .account import DEFAULT_ROLE


@dataclass(slots=True)
class NewAccount:
    """Validated, normalised values for an account that has not been stored yet."""

    name: str
    email: str
    created_at: datetime
    password_hash: str | None = field(default=None, repr=False)
    role: str = DEFAULT_ROLE
    is_active: bool = True
