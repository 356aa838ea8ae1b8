"""Account service orchestrating credential checks and account queries."""

from __future__ import annotations

import logging

from .account import Account
from .contracts import AccountStore, PasswordEncoder

logger = logging.getLogger(__name__)


class AccountService:
    """Account workflows backed by an ``AccountStore``."""

    def __init__(self, store: AccountStore, encoder: PasswordEncoder) -> None:
        """Store dependencies used to look up and verify accounts."""
        self._store = store
        self._encoder = encoder
        # Compared against when the username is unknown so both paths cost one hash check.
        self._dummy_hash = encoder.encode("timing-equalization")

    def authenticate(self, username: str, password: str) -> Account | None:
        """Return the account when the credentials are valid and the account is active.

        Unknown usernames, wrong passwords and deactivated accounts all yield
        ``None``; the caller cannot tell them apart.
        """
        account = self._store.find_by_username(username) if username else None
        if account is None:
            self._encoder.matches(password, self._dummy_hash)
            return None
        if not self._encoder.matches(password, account.password_hash):
            return None
        if not account.active:
            logger.info("rejecting login for deactivated account %r", username)
            return None
        return account

    def get_account(self, account_id: int) -> Account | None:
        """Retrieve an account by identifier."""
        return self._store.find_by_id(account_id)

    def create_account(self, username: str, password: str) -> Account:
        """Register a new active account that has never logged in.

        Raises ``ValueError`` when the username is empty or already taken.
        """
        if not username:
            raise ValueError("username must not be empty")
        with self._store.transaction() as store:
            if store.find_by_username(username) is not None:
                raise ValueError(f"username {username!r} already exists")
            account = store.save(Account.new(username, self._encoder.encode(password)))
        logger.info("created account %r with id %s", account.username, account.account_id)
        return account
