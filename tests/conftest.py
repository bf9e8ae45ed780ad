"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are seeded here, before anything imports
``app.core.config``, so settings resolve to test-friendly values.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.adapters.rate_limit.in_memory import InMemoryCounterStore  # noqa: E402
from app.adapters.session_sink.in_memory import InMemorySessionSink  # noqa: E402
from app.api.routes.webhooks import get_session_sink  # noqa: E402
from app.core.rate_limit import get_counter_store  # noqa: E402
from app.main import app  # noqa: E402

TEST_WEBHOOK_SECRET = os.environ["WEBHOOK_SECRET"]


@pytest.fixture
def counter_store() -> InMemoryCounterStore:
    return InMemoryCounterStore()


@pytest.fixture
def session_sink() -> InMemorySessionSink:
    return InMemorySessionSink()


@pytest.fixture
def client(counter_store: InMemoryCounterStore, session_sink: InMemorySessionSink):
    """TestClient with a fresh counter store and session sink per test."""
    app.dependency_overrides[get_counter_store] = lambda: counter_store
    app.dependency_overrides[get_session_sink] = lambda: session_sink
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
