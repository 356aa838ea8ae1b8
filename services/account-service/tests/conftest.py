"""Shared fixtures for the account service tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.config import Settings
from app.domain.account import Account
from app.memory_repository import InMemoryAccountRepository


class FakeClock:
    """Manually advanced clock handed to components instead of the wall clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        max_failed_login_attempts=3,
        inactivity_threshold_minutes=5,
        sweep_enabled=False,
        login_success_path="/app/home",
        login_failure_path="/login-failed.html",
        logout_path="/logged-out.html",
        admin_token="test-admin",
    )


@pytest.fixture
def add_account(store, clock):
    """Persist an account; ``minutes_ago`` sets its last login relative to the clock."""

    def _add(
        username: str,
        *,
        minutes_ago: int | None = None,
        active: bool = True,
        failed: int = 0,
        password_hash: str = "not-a-real-hash",
    ) -> Account:
        account = Account.new(username, password_hash)
        account.active = active
        account.failed_login_attempts = failed
        if minutes_ago is not None:
            account.last_login_at = clock() - timedelta(minutes=minutes_ago)
        return store.save(account)

    return _add
