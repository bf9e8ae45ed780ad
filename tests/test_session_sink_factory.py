"""Tests for session sink selection."""

from unittest.mock import patch

import pytest

from app.adapters.session_sink.factory import create_session_sink
from app.adapters.session_sink.in_memory import InMemorySessionSink
from app.api.routes import webhooks
from app.api.routes.webhooks import get_session_sink
from app.core.errors import ConfigurationAppError


@pytest.fixture(autouse=True)
def reset_sink():
    webhooks._session_sink = None
    yield
    webhooks._session_sink = None


@patch("app.adapters.session_sink.factory.settings")
def test_memory_sink(mock_settings) -> None:
    mock_settings.webhook.session_sink = "Memory"

    assert isinstance(create_session_sink(), InMemorySessionSink)


@patch("app.adapters.session_sink.factory.settings")
def test_unknown_sink(mock_settings) -> None:
    mock_settings.webhook.session_sink = "postgres"

    with pytest.raises(ConfigurationAppError) as exc_info:
        create_session_sink()

    assert exc_info.value.code == "session_sink_unknown_backend"


@patch("app.adapters.session_sink.factory.settings")
def test_route_sink_is_created_once(mock_settings) -> None:
    mock_settings.webhook.session_sink = "memory"

    sink = get_session_sink()

    assert isinstance(sink, InMemorySessionSink)
    assert get_session_sink() is sink
