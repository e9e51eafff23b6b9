"""Shared fixtures for the Budget Tracker tests."""

from datetime import datetime

import pytest

from budget_tracker.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Isolate every test from the caller's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ("BUDGET_LIMIT_PASSWORD", "STORAGE_BACKEND", "STORAGE_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    """Mid-month reference time: June 2024 has 30 days, the 15th is day 15."""
    return datetime(2024, 6, 15, 12, 0)
