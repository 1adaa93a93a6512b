from datetime import datetime, timezone

import pytest

from junit_testkit.config import ENV_OPTIONS

START = datetime(2026, 10, 19, 6, 3, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_reporter_env(monkeypatch):
    for var in ENV_OPTIONS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fixed_clock():
    return lambda: START
