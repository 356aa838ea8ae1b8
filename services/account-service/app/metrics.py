"""Prometheus counters for login outcomes and inactivity sweeps."""

from __future__ import annotations

from prometheus_client import Counter

LOGIN_SUCCESS = Counter(
    "login_success_total",
    "Successful logins recorded against an account.",
)
LOGIN_FAILURE = Counter(
    "login_failure_total",
    "Failed login attempts by outcome (unknown, counted, locked).",
    ["outcome"],
)
AMBIGUOUS_LOOKUP = Counter(
    "account_lookup_ambiguous_total",
    "Username lookups that matched more than one account.",
)
SWEEP_RUNS = Counter(
    "sweep_runs_total",
    "Inactivity sweep invocations by status (completed, skipped).",
    ["status"],
)
SWEEP_DEACTIVATED = Counter(
    "sweep_deactivated_total",
    "Accounts deactivated by the inactivity sweep.",
)
