"""Pytest configuration shared by the unit and integration suites."""

import os
from pathlib import Path

# Keep a developer's .env out of the test run; set before sqlcraft is imported.
os.environ.setdefault(
    "SQLCRAFT_ENV_FILE", str(Path(__file__).parent / "fixtures" / "missing.env")
)

import pytest

from sqlcraft.config import get_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Give every test settings built from its own environment."""
    for name in list(os.environ):
        if name.startswith("SQLCRAFT_") and name != "SQLCRAFT_ENV_FILE":
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_dsn() -> str:
    return "sqlite://"
