"""Background timer driving the inactivity sweep."""

from __future__ import annotations

import logging
from threading import Event, Lock, Thread

from .domain.sweep import InactivitySweepTask

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Invoke the sweep every ``interval_seconds`` on a daemon thread.

    Ticks are measured from the start of the previous tick. A tick that comes
    due while a run is still in progress is dropped by the task's own guard.
    """

    def __init__(self, task: InactivitySweepTask, interval_seconds: int) -> None:
        if interval_seconds <= 0:
            raise ValueError("sweep interval must be positive")
        self._task = task
        self._interval = interval_seconds
        self._stopped = Event()
        self._thread: Thread | None = None
        self._workers: list[Thread] = []
        self._workers_lock = Lock()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stopped.clear()
        self._thread = Thread(target=self._loop, name="inactivity-sweep", daemon=True)
        self._thread.start()
        logger.info("inactivity sweep scheduled every %d seconds", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop ticking and wait up to ``timeout`` seconds for an in-flight run to finish."""
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        with self._workers_lock:
            workers, self._workers = self._workers, []
        for worker in workers:
            worker.join(timeout)
            if worker.is_alive():
                logger.warning("inactivity sweep run still in progress after %s seconds", timeout)

    def _loop(self) -> None:
        while not self._stopped.wait(self._interval):
            worker = Thread(target=self._tick, name="inactivity-sweep-run", daemon=True)
            with self._workers_lock:
                self._workers = [w for w in self._workers if w.is_alive()]
                self._workers.append(worker)
                worker.start()

    def _tick(self) -> None:
        try:
            self._task.run()
        except Exception:
            logger.exception("inactivity sweep run failed")
