from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta
from threading import Event, Thread

from app.domain.sweep import InactivitySweepTask


def _task(store, settings, clock) -> InactivitySweepTask:
    return InactivitySweepTask(store, settings, clock)


def test_sweep_deactivates_alice_after_threshold(store, settings, clock, add_account):
    alice = add_account("alice", minutes_ago=10)

    result = _task(store, settings, clock).run()

    assert result.deactivated == ["alice"]
    assert store.find_by_id(alice.account_id).active is False


def test_sweep_skips_already_inactive_accounts(store, settings, clock, add_account, caplog):
    add_account("claire", minutes_ago=100, active=False)

    assert store.find_inactive_since(5) == []
    with caplog.at_level(logging.INFO, logger="app.domain.sweep"):
        result = _task(store, settings, clock).run()

    assert result.deactivated == []
    assert not any("claire" in record.getMessage() for record in caplog.records)


def test_sweep_keeps_recent_logins_active(store, settings, clock, add_account):
    recent = add_account("dave", minutes_ago=2)

    result = _task(store, settings, clock).run()

    assert result.count == 0
    assert store.find_by_id(recent.account_id).active is True


def test_sweep_includes_accounts_that_never_logged_in(store, settings, clock, add_account):
    add_account("erin")

    result = _task(store, settings, clock).run()

    assert result.deactivated == ["erin"]


def test_sweep_processes_oldest_inactive_first(store, settings, clock, add_account):
    add_account("middle", minutes_ago=60)
    add_account("recent", minutes_ago=6)
    add_account("oldest", minutes_ago=600)
    add_account("never")

    result = _task(store, settings, clock).run()

    assert result.deactivated == ["never", "oldest", "middle", "recent"]


def test_second_sweep_changes_nothing(store, settings, clock, add_account):
    add_account("alice", minutes_ago=10)
    add_account("bob", minutes_ago=20)
    task = _task(store, settings, clock)

    first = task.run()
    second = task.run()

    assert first.count == 2
    assert second.count == 0


def test_sweep_without_threshold_is_noop(store, settings, clock, add_account):
    alice = add_account("alice", minutes_ago=10_000)
    task = _task(store, replace(settings, inactivity_threshold_minutes=None), clock)

    result = task.run()

    assert result.count == 0
    assert store.find_by_id(alice.account_id).active is True


def test_login_during_sweep_wins(store, settings, clock, add_account):
    alice = add_account("alice", minutes_ago=10)
    bob = add_account("bob", minutes_ago=30)

    original = store.find_inactive_since

    def scan_then_login(threshold_minutes):
        candidates = original(threshold_minutes)
        refreshed = store.find_by_id(alice.account_id)
        refreshed.last_login_at = clock()
        store.save(refreshed)
        return candidates

    store.find_inactive_since = scan_then_login
    result = _task(store, settings, clock).run()

    assert result.deactivated == ["bob"]
    assert store.find_by_id(alice.account_id).active is True
    assert store.find_by_id(bob.account_id).active is False


def test_overlapping_run_is_skipped(store, settings, clock, add_account):
    add_account("alice", minutes_ago=10)
    entered = Event()
    release = Event()
    original = store.find_inactive_since

    def slow_scan(threshold_minutes):
        entered.set()
        release.wait(timeout=5)
        return original(threshold_minutes)

    store.find_inactive_since = slow_scan
    task = _task(store, settings, clock)
    results = []
    worker = Thread(target=lambda: results.append(task.run()))
    worker.start()
    assert entered.wait(timeout=5)

    assert task.running is True
    assert task.run() is None

    release.set()
    worker.join(timeout=5)
    assert results[0].deactivated == ["alice"]
    assert task.running is False


def test_sweep_uses_scan_result_regardless_of_task_clock(store, settings, clock, add_account):
    alice = add_account("alice", minutes_ago=10)

    def lagging_clock():
        return clock() - timedelta(hours=1)

    result = InactivitySweepTask(store, settings, lagging_clock).run()

    assert result.deactivated == ["alice"]
    assert store.find_by_id(alice.account_id).active is False
