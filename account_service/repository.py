"""Postgres repository implementing the account storage port."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg import Connection
from psycopg.errors import UniqueViolation
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contracts import NewAccount
from .domain.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id BIGSERIAL PRIMARY KEY,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(255) NOT NULL,
    password_hash TEXT,
    role VARCHAR(50) NOT NULL DEFAULT 'User',
    created_at TIMESTAMPTZ NOT NULL,
    last_login_at TIMESTAMPTZ,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    CONSTRAINT accounts_email_key UNIQUE (email)
)
"""

_COLUMNS = "id, name, email, created_at, password_hash, role, last_login_at, is_active"


def create_schema(pool: ConnectionPool) -> None:
    """Create the ``accounts`` table if it does not exist yet."""
    with pool.connection() as conn:
        conn.execute(SCHEMA_SQL)
        conn.commit()


class AccountRepository:
    """Postgres-backed account persistence bound to a single connection.

    Writes join the connection's open transaction and only become visible to
    other sessions after :meth:`commit`.
    """

    def __init__(self, conn: Connection) -> None:
        """Store the connection used for all statements of this unit of work."""
        self._conn = conn

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except UniqueViolation as exc:
            raise ConflictError("an account with this email already exists") from exc
        except psycopg.Error as exc:
            logger.error("account storage failure: %s", exc)
            raise StorageError("account storage failure") from exc

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> Account | None:
        with self._translate_errors():
            with self._conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def list_all(self) -> list[Account]:
        """Return every account ordered by creation time."""
        with self._translate_errors():
            with self._conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM accounts ORDER BY created_at ASC, id ASC")
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def get_by_id(self, account_id: int) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE id = %s", (account_id,))

    def get_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE email = %s", (email,))

    def insert(self, account: NewAccount) -> Account:
        """Insert a new row and return the account with its generated id."""
        created = self._fetch_one(
            f"""
            INSERT INTO accounts (name, email, created_at, password_hash, role, is_active)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {_COLUMNS}
            """,
            (
                account.name,
                account.email,
                account.created_at,
                account.password_hash,
                account.role,
                account.is_active,
            ),
        )
        if created is None:
            raise StorageError("insert returned no row")
        return created

    def update(self, account: Account) -> None:
        """Write back the mutable columns of an existing account."""
        with self._translate_errors():
            with self._conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE accounts
                    SET name = %s, email = %s, role = %s, last_login_at = %s, is_active = %s
                    WHERE id = %s
                    """,
                    (
                        account.name,
                        account.email,
                        account.role,
                        account.last_login_at,
                        account.is_active,
                        account.id,
                    ),
                )

    def remove(self, account_id: int) -> bool:
        with self._translate_errors():
            with self._conn.cursor() as cur:
                cur.execute("DELETE FROM accounts WHERE id = %s", (account_id,))
                return cur.rowcount > 0

    def exists_by_email(self, email: str, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another account already uses ``email``."""
        clauses = ["email = %s"]
        params: list[Any] = [email]
        if exclude_id is not None:
            clauses.append("id <> %s")
            params.append(exclude_id)

        where_sql = " AND ".join(clauses)
        with self._translate_errors():
            with self._conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT EXISTS (SELECT 1 FROM accounts WHERE {where_sql})", params)
                row = cur.fetchone()
        return bool(row and row[0])

    def commit(self) -> None:
        with self._translate_errors():
            self._conn.commit()

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            id=row[0],
            name=row[1],
            email=row[2],
            created_at=row[3],
            password_hash=row[4],
            role=row[5],
            last_login_at=row[6],
            is_active=row[7],
        )
