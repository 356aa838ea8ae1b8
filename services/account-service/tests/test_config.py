from __future__ import annotations

import pytest

from app.config import Settings


def test_thresholds_default_to_unbounded(monkeypatch):
    monkeypatch.delenv("MAX_FAILED_LOGIN_ATTEMPTS", raising=False)
    monkeypatch.delenv("INACTIVITY_THRESHOLD_MINUTES", raising=False)

    settings = Settings()

    assert settings.max_failed_login_attempts is None
    assert settings.inactivity_threshold_minutes is None


def test_thresholds_read_from_environment(monkeypatch):
    monkeypatch.setenv("MAX_FAILED_LOGIN_ATTEMPTS", "3")
    monkeypatch.setenv("INACTIVITY_THRESHOLD_MINUTES", " 5 ")
    monkeypatch.setenv("SWEEP_ENABLED", "false")

    settings = Settings()

    assert settings.max_failed_login_attempts == 3
    assert settings.inactivity_threshold_minutes == 5
    assert settings.sweep_enabled is False


@pytest.mark.parametrize("raw", ["", "0", "-2"])
def test_blank_or_non_positive_threshold_means_unbounded(monkeypatch, raw):
    monkeypatch.setenv("MAX_FAILED_LOGIN_ATTEMPTS", raw)
    assert Settings().max_failed_login_attempts is None


def test_non_integer_threshold_is_rejected(monkeypatch):
    monkeypatch.setenv("INACTIVITY_THRESHOLD_MINUTES", "five")
    with pytest.raises(ValueError, match="INACTIVITY_THRESHOLD_MINUTES"):
        Settings()


def test_settings_are_immutable():
    settings = Settings(max_failed_login_attempts=3)
    with pytest.raises(AttributeError):
        settings.max_failed_login_attempts = 10
