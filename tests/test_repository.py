"""Tests for the Postgres account repository using mocked psycopg objects."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg
import pytest
from psycopg.errors import UniqueViolation

from account_service.domain.contracts import NewAccount
from account_service.domain.errors import ConflictError, StorageError
from account_service.repository import SCHEMA_SQL, AccountRepository, create_schema

CREATED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _row(account_id: int = 1, email: str = "ada@ex.com") -> tuple:
    return (account_id, "Ada", email, CREATED_AT, "$2b$04$hash", "User", None, True)


@pytest.fixture
def cursor() -> MagicMock:
    return MagicMock()


@pytest.fixture
def conn(cursor: MagicMock) -> MagicMock:
    connection = MagicMock()
    connection.cursor.return_value.__enter__.return_value = cursor
    return connection


@pytest.fixture
def repo(conn: MagicMock) -> AccountRepository:
    return AccountRepository(conn)


def test_get_by_id_maps_row(repo, cursor):
    cursor.fetchone.return_value = _row(5)

    account = repo.get_by_id(5)

    assert account.id == 5
    assert account.email == "ada@ex.com"
    assert account.created_at == CREATED_AT
    assert account.password_hash == "$2b$04$hash"
    assert account.is_active is True
    query, params = cursor.execute.call_args.args
    assert "WHERE id = %s" in query
    assert params == (5,)


def test_get_by_email_returns_none_when_missing(repo, cursor):
    cursor.fetchone.return_value = None

    assert repo.get_by_email("nobody@example.com") is None


def test_list_all_orders_by_creation(repo, cursor):
    cursor.fetchall.return_value = [_row(1), _row(2, "b@ex.com")]

    accounts = repo.list_all()

    assert [account.id for account in accounts] == [1, 2]
    assert "ORDER BY created_at ASC, id ASC" in cursor.execute.call_args.args[0]


def test_insert_returns_account_with_generated_id(repo, cursor):
    cursor.fetchone.return_value = _row(9)

    account = repo.insert(
        NewAccount(name="Ada", email="ada@ex.com", created_at=CREATED_AT, password_hash="$2b$04$hash")
    )

    assert account.id == 9
    query, params = cursor.execute.call_args.args
    assert query.strip().startswith("INSERT INTO accounts")
    assert params == ("Ada", "ada@ex.com", CREATED_AT, "$2b$04$hash", "User", True)


def test_exists_by_email_excludes_own_id(repo, cursor):
    cursor.fetchone.return_value = (True,)

    assert repo.exists_by_email("ada@ex.com", exclude_id=3) is True
    query, params = cursor.execute.call_args.args
    assert "id <> %s" in query
    assert params == ["ada@ex.com", 3]

    cursor.fetchone.return_value = (False,)
    assert repo.exists_by_email("ada@ex.com") is False
    assert cursor.execute.call_args.args[1] == ["ada@ex.com"]


def test_remove_reports_rowcount(repo, cursor):
    cursor.rowcount = 1
    assert repo.remove(4) is True

    cursor.rowcount = 0
    assert repo.remove(4) is False


def test_unique_violation_becomes_conflict(repo, cursor):
    cursor.execute.side_effect = UniqueViolation("duplicate key value violates unique constraint")

    with pytest.raises(ConflictError):
        repo.insert(NewAccount(name="Ada", email="ada@ex.com", created_at=CREATED_AT))


def test_commit_time_unique_violation_becomes_conflict(repo, conn):
    conn.commit.side_effect = UniqueViolation("duplicate key value violates unique constraint")

    with pytest.raises(ConflictError):
        repo.commit()


def test_other_database_errors_become_storage_errors(repo, cursor):
    cursor.execute.side_effect = psycopg.OperationalError("connection lost")

    with pytest.raises(StorageError) as excinfo:
        repo.list_all()
    assert isinstance(excinfo.value.__cause__, psycopg.OperationalError)


def test_create_schema_runs_ddl_and_commits():
    pool = MagicMock()
    connection = pool.connection.return_value.__enter__.return_value

    create_schema(pool)

    connection.execute.assert_called_once_with(SCHEMA_SQL)
    connection.commit.assert_called_once_with()
    assert "UNIQUE (email)" in SCHEMA_SQL
