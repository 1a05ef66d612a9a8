"""Unit tests for settings loading."""

import pytest
from pydantic import ValidationError

from reservation_service.config import load_settings


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@localhost/reservations")
    return monkeypatch


def test_defaults(env):
    """Test documented defaults apply when only the database is set."""
    settings = load_settings()

    assert settings.payment_retry_max_attempts == 3
    assert settings.payment_breaker_failure_threshold == 5
    assert settings.max_stay_days == 30
    assert settings.bank_transfer_grace_days == 2
    assert settings.expiry_sweep_interval_seconds == 3600


def test_payment_timeout(env):
    """Test connect and read timeouts are kept apart."""
    env.setenv("PAYMENT_CONNECT_TIMEOUT_SECONDS", "1.5")
    env.setenv("PAYMENT_READ_TIMEOUT_SECONDS", "4")

    timeout = load_settings().payment_timeout

    assert timeout.connect == 1.5
    assert timeout.read == 4.0


@pytest.mark.parametrize(
    "name, value",
    [
        ("PAYMENT_RETRY_MAX_ATTEMPTS", "0"),
        ("PAYMENT_READ_TIMEOUT_SECONDS", "-1"),
        ("PAYMENT_BREAKER_FAILURE_THRESHOLD", "0"),
    ],
)
def test_invalid_values_are_rejected(env, name, value):
    """Test nonsensical resilience settings fail at startup."""
    env.setenv(name, value)

    with pytest.raises(ValidationError):
        load_settings()


def test_database_url_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(ValidationError):
        load_settings()
