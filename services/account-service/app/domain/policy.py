"""Lockout decision shared by the login failure handler."""

from __future__ import annotations


def should_lock(failed_attempts: int, max_allowed: int | None) -> bool:
    """Return ``True`` once ``failed_attempts`` reaches the configured maximum.

    ``max_allowed`` of ``None`` means no maximum is configured, so accounts are
    never locked for failed logins.
    """
    if max_allowed is None:
        return False
    return failed_attempts >= max_allowed
