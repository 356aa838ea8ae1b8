"""Bookkeeping run by the login endpoint after credentials were checked."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from .account import utcnow
from .contracts import AccountStore, LoginOutcome
from .policy import should_lock
from ..config import Settings
from ..metrics import LOGIN_FAILURE, LOGIN_SUCCESS

logger = logging.getLogger(__name__)


class LoginSuccessHandler:
    """Records a successful login and sends the user to the landing page."""

    def __init__(
        self,
        store: AccountStore,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock

    def on_login_success(self, username: str) -> LoginOutcome:
        """Reset the failure counter and stamp the login time for ``username``.

        An authenticated name missing from the store means the authentication
        pipeline and the store disagree; it is logged at error level and the
        redirect still happens.
        """
        target = self._settings.login_success_path
        with self._store.transaction() as store:
            account = store.find_by_username(username)
            if account is None:
                logger.error("authenticated username %r has no account record", username)
                return LoginOutcome(redirect_to=target, reason="unknown-account")

            now = self._clock()
            if now > account.last_login_at:
                account.last_login_at = now
            account.failed_login_attempts = 0
            store.save(account)

        LOGIN_SUCCESS.inc()
        logger.info("user %r logged in", username)
        return LoginOutcome(redirect_to=target, reason="logged-in")


class LoginFailureHandler:
    """Counts a failed login and locks the account once the maximum is reached."""

    def __init__(self, store: AccountStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def on_login_failure(self, username: str | None) -> LoginOutcome:
        target = self._settings.login_failure_path
        if not username:
            LOGIN_FAILURE.labels(outcome="unknown").inc()
            logger.warning("login failed without a username")
            return LoginOutcome(redirect_to=target, reason="unknown-account")

        with self._store.transaction() as store:
            account = store.find_by_username(username)
            if account is None:
                LOGIN_FAILURE.labels(outcome="unknown").inc()
                logger.warning("login failed for unknown username %r", username)
                return LoginOutcome(redirect_to=target, reason="unknown-account")

            account.failed_login_attempts += 1
            locked = False
            if account.active and should_lock(
                account.failed_login_attempts, self._settings.max_failed_login_attempts
            ):
                account.active = False
                locked = True
            store.save(account)

        if locked:
            LOGIN_FAILURE.labels(outcome="locked").inc()
            logger.warning(
                "account %r locked after %d failed login attempts",
                username,
                account.failed_login_attempts,
            )
            return LoginOutcome(redirect_to=target, reason="account-locked", account_locked=True)

        LOGIN_FAILURE.labels(outcome="counted").inc()
        logger.info(
            "login failed for %r (%d consecutive failures)", username, account.failed_login_attempts
        )
        return LoginOutcome(redirect_to=target, reason="bad-credentials")
