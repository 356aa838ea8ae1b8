"""In-memory account store used for local development and tests."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from itertools import count
from threading import RLock
from typing import Callable, Iterator

from .domain.account import Account, utcnow
from .metrics import AMBIGUOUS_LOOKUP

logger = logging.getLogger(__name__)


class InMemoryAccountRepository:
    """Thread-safe account store keeping rows in a dict.

    A single re-entrant lock stands in for row locks: a :meth:`transaction`
    block holds it until it exits, so read-modify-write sequences never
    interleave. Accounts are copied on the way in and out, so changes only
    become visible through :meth:`save`.
    """

    def __init__(self, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._rows: dict[int, Account] = {}
        self._ids = count(1)
        self._lock = RLock()

    @contextmanager
    def transaction(self) -> Iterator["InMemoryAccountRepository"]:
        with self._lock:
            snapshot = {account_id: replace(row) for account_id, row in self._rows.items()}
            try:
                yield self
            except BaseException:
                self._rows = snapshot
                raise

    def find_by_username(self, username: str) -> Account | None:
        with self._lock:
            matches = [row for row in self._rows.values() if row.username == username]
        if not matches:
            return None
        if len(matches) > 1:
            AMBIGUOUS_LOOKUP.inc()
            logger.error(
                "username %r matches %d accounts; treating as not found", username, len(matches)
            )
            return None
        return replace(matches[0])

    def find_by_id(self, account_id: int) -> Account | None:
        with self._lock:
            row = self._rows.get(account_id)
        return replace(row) if row is not None else None

    def save(self, account: Account) -> Account:
        with self._lock:
            if account.account_id is None:
                account = replace(account, account_id=next(self._ids))
            self._rows[account.account_id] = replace(account)
        return replace(account)

    def find_inactive_since(self, threshold_minutes: int) -> list[Account]:
        cutoff = self._clock() - timedelta(minutes=threshold_minutes)
        with self._lock:
            rows = [
                replace(row)
                for row in self._rows.values()
                if row.active and row.last_login_at < cutoff
            ]
        rows.sort(key=lambda row: (row.last_login_at, row.account_id))
        return rows
