from typing import Protocol

from .account import Account
from .contracts import NewAccount


class AccountStore(Protocol):
    """Protocol defining the storage capabilities the account service relies on.

    Emails passed in are already normalised. Implementations must back
    ``exists_by_email`` with a uniqueness constraint so that concurrent writers
    surface a ``ConflictError`` instead of creating duplicates.
    """

    def list_all(self) -> list[Account]:
        """Return every account ordered by creation time, oldest first."""
        ...

    def get_by_id(self, account_id: int) -> Account | None:
        ...

    def get_by_email(self, email: str) -> Account | None:
        ...

    def insert(self, account: NewAccount) -> Account:
        """Store a new account and return it with its assigned id."""
        ...

    def update(self, account: Account) -> None:
        ...

    def remove(self, account_id: int) -> bool:
        """Delete the account. Return True if a row was removed."""
        ...

    def exists_by_email(self, email: str, exclude_id: int | None = None) -> bool:
        ...

    def commit(self) -> None:
        """Flush pending writes."""
        ...
