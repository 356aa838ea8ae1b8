from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

NEVER_LOGGED_IN = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Account:
    """Author account together with its login-security bookkeeping."""

    account_id: int | None
    username: str
    password_hash: str = field(repr=False)
    active: bool = True
    last_login_at: datetime = NEVER_LOGGED_IN
    failed_login_attempts: int = 0

    @classmethod
    def new(cls, username: str, password_hash: str) -> "Account":
        """Build an unsaved account in its initial lifecycle state."""
        return cls(account_id=None, username=username, password_hash=password_hash)

    @property
    def has_logged_in(self) -> bool:
        return self.last_login_at > NEVER_LOGGED_IN
