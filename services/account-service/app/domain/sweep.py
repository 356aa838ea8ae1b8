"""Periodic deactivation of accounts that have not logged in for too long."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Callable

from .account import utcnow
from .contracts import AccountStore
from ..config import Settings
from ..metrics import SWEEP_DEACTIVATED, SWEEP_RUNS

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepResult:
    """Usernames deactivated by one sweep run, oldest-inactive first."""

    started_at: datetime
    deactivated: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.deactivated)


class InactivitySweepTask:
    """Deactivates active accounts whose last login is older than the threshold.

    Runs never overlap: a call made while another run holds the guard returns
    ``None`` straight away instead of waiting for it.
    """

    def __init__(
        self,
        store: AccountStore,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock
        self._guard = Lock()

    @property
    def running(self) -> bool:
        return self._guard.locked()

    def run(self) -> SweepResult | None:
        if not self._guard.acquire(blocking=False):
            SWEEP_RUNS.labels(status="skipped").inc()
            logger.info("inactivity sweep still running, skipping this tick")
            return None
        try:
            result = self._sweep()
        finally:
            self._guard.release()
        SWEEP_RUNS.labels(status="completed").inc()
        return result

    def _sweep(self) -> SweepResult:
        result = SweepResult(started_at=self._clock())
        threshold = self._settings.inactivity_threshold_minutes
        if threshold is None:
            logger.debug("no inactivity threshold configured, nothing to sweep")
            return result

        for candidate in self._store.find_inactive_since(threshold):
            with self._store.transaction() as store:
                # A login between the scan and this update wins over the sweep.
                account = store.find_by_id(candidate.account_id)
                if (
                    account is None
                    or not account.active
                    or account.last_login_at > candidate.last_login_at
                ):
                    continue
                account.active = False
                store.save(account)
            result.deactivated.append(account.username)
            SWEEP_DEACTIVATED.inc()
            logger.info(
                "deactivated account %r, last login %s",
                account.username,
                account.last_login_at.isoformat() if account.has_logged_in else "never",
            )

        logger.info(
            "inactivity sweep deactivated %d account(s) idle for more than %d minutes",
            result.count,
            threshold,
        )
        return result
