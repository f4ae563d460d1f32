from __future__ import annotations

from dataclasses import replace

import pytest

from account_service.config import Settings
from account_service.domain.account import Account
from account_service.domain.contracts import NewAccount
from account_service.domain.credentials import CredentialIssuer
from account_service.domain.errors import ConflictError
from account_service.domain.service import AccountService

TEST_SIGNING_KEY = "test-signing-key-that-is-long-enough-for-hs256"
TEST_ROUNDS = 4


class FakeAccountRepository:
    """In-memory repository mimicking the Postgres adapter, unique email included."""

    def __init__(self) -> None:
        self._rows: dict[int, Account] = {}
        self._seq = 0
        self.commits = 0
        self.calls: list[str] = []

    def _copy(self, account: Account | None) -> Account | None:
        return replace(account) if account is not None else None

    def _email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        return any(
            row.email == email and row.id != exclude_id for row in self._rows.values()
        )

    def list_all(self) -> list[Account]:
        self.calls.append("list_all")
        rows = sorted(self._rows.values(), key=lambda row: (row.created_at, row.id))
        return [replace(row) for row in rows]

    def get_by_id(self, account_id: int) -> Account | None:
        self.calls.append("get_by_id")
        return self._copy(self._rows.get(account_id))

    def get_by_email(self, email: str) -> Account | None:
        self.calls.append("get_by_email")
        for row in self._rows.values():
            if row.email == email:
                return replace(row)
        return None

    def insert(self, account: NewAccount) -> Account:
        self.calls.append("insert")
        if self._email_taken(account.email):
            raise ConflictError("an account with this email already exists")
        self._seq += 1
        stored = Account(
            id=self._seq,
            name=account.name,
            email=account.email,
            created_at=account.created_at,
            password_hash=account.password_hash,
            role=account.role,
            is_active=account.is_active,
        )
        self._rows[stored.id] = stored
        return replace(stored)

    def update(self, account: Account) -> None:
        self.calls.append("update")
        if account.id not in self._rows:
            return
        if self._email_taken(account.email, exclude_id=account.id):
            raise ConflictError("an account with this email already exists")
        self._rows[account.id] = replace(account)

    def remove(self, account_id: int) -> bool:
        self.calls.append("remove")
        return self._rows.pop(account_id, None) is not None

    def exists_by_email(self, email: str, exclude_id: int | None = None) -> bool:
        self.calls.append("exists_by_email")
        return self._email_taken(email, exclude_id)

    def commit(self) -> None:
        self.commits += 1

    # test helper
    def set_active(self, account_id: int, active: bool) -> None:
        self._rows[account_id].is_active = active


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SIGNING_KEY, bcrypt_rounds=TEST_ROUNDS)


@pytest.fixture
def repository() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def service(repository: FakeAccountRepository) -> AccountService:
    return AccountService(repository, bcrypt_rounds=TEST_ROUNDS)


@pytest.fixture
def issuer(service: AccountService, settings: Settings) -> CredentialIssuer:
    return CredentialIssuer(service, settings)
