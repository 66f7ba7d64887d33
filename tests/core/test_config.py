"""Tests for settings validation."""

from __future__ import annotations

import pytest

from estoque.core.config import Settings, get_settings
from estoque.domain.replenishment.models import ReplenishmentConfig


def test_defaults():
    """Replenishment defaults match the admin panel's global config."""
    settings = Settings(_env_file=None)

    assert ReplenishmentConfig.from_settings(settings) == ReplenishmentConfig(
        window_days=90,
        supplier_lead_time_days=7,
        full_release_lead_time_days=3,
        safety_stock_units=10,
        minimum_coverage_days=30,
    )
    assert settings.replenishment_snapshot_path is None


def test_env_overrides(monkeypatch):
    """Environment variables are case-insensitive."""
    monkeypatch.setenv("replenishment_full_release_days", "5")
    monkeypatch.setenv("LOG_JSON", "false")

    settings = get_settings()

    assert settings.replenishment_full_release_days == 5
    assert settings.log_json is False


def test_settings_cached():
    """get_settings returns the same instance until the cache is cleared."""
    assert get_settings() is get_settings()


@pytest.mark.parametrize(
    "name,value",
    [
        ("REPLENISHMENT_WINDOW_DAYS", "0"),
        ("REPLENISHMENT_SAFETY_STOCK", "-1"),
        ("REPLENISHMENT_MIN_COVERAGE_DAYS", "zero"),
    ],
)
def test_invalid_env_raises_runtime_error(monkeypatch, name, value):
    """Invalid values fail fast and name the offending variable."""
    monkeypatch.setenv(name, value)

    with pytest.raises(RuntimeError, match=name):
        get_settings()
