"""Shared fixtures for the NagarSeva test suite.

Environment overrides are applied before any test module imports
``config.settings`` so that the app under test runs on the keyword
fallback, without the background poller and without rate limiting.
"""

from __future__ import annotations

import os

os.environ["GCP_PROJECT_ID"] = ""
os.environ["NAGARSEVA_ENABLE_NOTIFICATION_POLLER"] = "false"
os.environ["NAGARSEVA_STORE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"
os.environ["ADMIN_API_KEY"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from src.services.store import InMemoryRecordStore  # noqa: E402


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
