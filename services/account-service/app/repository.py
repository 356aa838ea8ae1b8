"""Database repository for author accounts and their login-security state."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator

from psycopg import Connection
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, utcnow
from .metrics import AMBIGUOUS_LOOKUP

logger = logging.getLogger(__name__)

_COLUMNS = "account_id, username, password_hash, active, last_login_at, failed_login_attempts"


class AccountRepository:
    """Postgres-backed account persistence.

    Expects an ``accounts`` table with the columns listed in ``_COLUMNS``,
    ``account_id`` being a ``BIGSERIAL`` primary key and ``last_login_at`` a
    ``TIMESTAMPTZ``. Instances returned by :meth:`transaction` share a single
    connection and lock every row they read until the block exits.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        clock: Callable[[], datetime] = utcnow,
        connection: Connection | None = None,
    ) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool
        self._clock = clock
        self._conn = connection

    @contextmanager
    def transaction(self) -> Iterator["AccountRepository"]:
        """Yield a repository bound to one transaction with row-level locking.

        Commits when the block completes and rolls back if it raises. Nested
        calls reuse the outer transaction.
        """
        if self._conn is not None:
            yield self
            return
        with self._pool.connection() as conn:
            with conn.transaction():
                yield AccountRepository(self._pool, clock=self._clock, connection=conn)

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        if self._conn is not None:
            yield self._conn
            return
        with self._pool.connection() as conn:
            yield conn
            conn.commit()

    @property
    def _lock_clause(self) -> str:
        return " FOR UPDATE" if self._conn is not None else ""

    def find_by_username(self, username: str) -> Account | None:
        """Return the account with exactly this username, or ``None``.

        More than one matching row is a data-integrity fault; it is logged and
        counted, and the lookup is treated as not found.
        """
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM accounts
                    WHERE username = %s
                    ORDER BY account_id
                    LIMIT 2{self._lock_clause}
                    """,
                    (username,),
                )
                rows = cur.fetchall()
        if not rows:
            return None
        if len(rows) > 1:
            AMBIGUOUS_LOOKUP.inc()
            logger.error(
                "username %r matches more than one account (ids %s, %s); treating as not found",
                username,
                rows[0][0],
                rows[1][0],
            )
            return None
        return self._map_record(rows[0])

    def find_by_id(self, account_id: int) -> Account | None:
        """Fetch an account by primary key or return ``None``."""
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM accounts WHERE account_id = %s{self._lock_clause}",
                    (account_id,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def save(self, account: Account) -> Account:
        """Insert a new account or update an existing one, returning the stored row."""
        now = self._clock()
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                if account.account_id is None:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (username, password_hash, active, last_login_at,
                                              failed_login_attempts, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_COLUMNS}
                        """,
                        (
                            account.username,
                            account.password_hash,
                            account.active,
                            account.last_login_at,
                            account.failed_login_attempts,
                            now,
                            now,
                        ),
                    )
                else:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (account_id, username, password_hash, active, last_login_at,
                                              failed_login_attempts, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        ON CONFLICT (account_id) DO UPDATE SET
                            username = EXCLUDED.username,
                            password_hash = EXCLUDED.password_hash,
                            active = EXCLUDED.active,
                            last_login_at = EXCLUDED.last_login_at,
                            failed_login_attempts = EXCLUDED.failed_login_attempts,
                            updated_at = EXCLUDED.updated_at
                        RETURNING {_COLUMNS}
                        """,
                        (
                            account.account_id,
                            account.username,
                            account.password_hash,
                            account.active,
                            account.last_login_at,
                            account.failed_login_attempts,
                            now,
                            now,
                        ),
                    )
                record = cur.fetchone()
        return self._map_record(record)

    def find_inactive_since(self, threshold_minutes: int) -> list[Account]:
        """Return active accounts whose last login is older than the threshold, oldest first."""
        cutoff = self._clock() - timedelta(minutes=threshold_minutes)
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM accounts
                    WHERE active AND last_login_at < %s
                    ORDER BY last_login_at ASC, account_id ASC
                    """,
                    (cutoff,),
                )
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            username=row[1],
            password_hash=row[2],
            active=row[3],
            last_login_at=row[4],
            failed_login_attempts=row[5],
        )
