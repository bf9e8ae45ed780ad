"""Factory for the session sink chosen by WEBHOOK_SESSION_SINK."""

import logging

from app.adapters.session_sink.base import AbstractSessionSink
from app.adapters.session_sink.in_memory import InMemorySessionSink
from app.core.config import settings
from app.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_session_sink() -> AbstractSessionSink:
    """Instantiate the session sink named in settings.

    Only ``memory`` ships today. It keeps every record for the life of the
    process, and duplicate detection does not span processes, so it suits a
    single worker in development or tests. A database or queue sink plugs in
    here behind ``AbstractSessionSink``.

    Raises:
        ConfigurationAppError: If WEBHOOK_SESSION_SINK names an unknown sink.
    """
    backend = settings.webhook.session_sink.lower()

    if backend == "memory":
        logger.warning(
            "session_sink.in_memory",
            extra={"detail": "records are kept per process and lost on restart"},
        )
        return InMemorySessionSink()

    raise ConfigurationAppError(
        code="session_sink_unknown_backend",
        message=f"Unknown session sink: '{backend}'. Supported sinks: memory",
    )
