from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_ROLE = "User"


@dataclass(slots=True)
class Account:
    """Aggregate root for a user account."""

    id: int
    name: str
    email: str
    created_at: datetime
    password_hash: str | None = field(default=None, repr=False)
    role: str = DEFAULT_ROLE
    last_login_at: datetime | None = None
    is_active: bool = True
