"""Domain-level contracts shared by multiple layers."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Protocol

from .account import Account


class AccountStore(Protocol):
    """Persistence operations the login handlers and the sweep depend on."""

    def find_by_username(self, username: str) -> Account | None: ...

    def find_by_id(self, account_id: int) -> Account | None: ...

    def save(self, account: Account) -> Account: ...

    def find_inactive_since(self, threshold_minutes: int) -> list[Account]: ...

    def transaction(self) -> AbstractContextManager["AccountStore"]: ...


@dataclass(slots=True, frozen=True)
class LoginOutcome:
    """Where the web layer sends the browser after a login attempt."""

    redirect_to: str
    reason: str
    account_locked: bool = False


class OnLoginSuccess(Protocol):
    def on_login_success(self, username: str) -> LoginOutcome: ...


class OnLoginFailure(Protocol):
    def on_login_failure(self, username: str | None) -> LoginOutcome: ...


class PasswordEncoder(Protocol):
    """Hashes and verifies credentials; the algorithm is up to the implementation."""

    def encode(self, raw_password: str) -> str: ...

    def matches(self, raw_password: str, encoded_password: str) -> bool: ...
