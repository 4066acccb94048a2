"""Shared fixtures for logweave tests."""

import os

import pytest

from logweave.foundation.config import clear_settings_cache
from logweave.io.transports import MemoryTransport


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> object:
    """Isolate every test from LOGWEAVE_* and color variables and from any .env file in the cwd."""
    for key in list(os.environ):
        if key.startswith("LOGWEAVE_") or key in ("NO_COLOR", "FORCE_COLOR", "CI", "PYTHON_ENV"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def memory() -> MemoryTransport:
    return MemoryTransport()
