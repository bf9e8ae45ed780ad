"""In-memory session sink (local development and tests).

Keeps accepted sessions in a dict keyed by session id. Per-process only.
"""

from __future__ import annotations

import threading

from app.adapters.session_sink.base import AbstractSessionSink
from app.core.errors import ConflictAppError
from app.schemas.webhook import SessionRecord


class InMemorySessionSink(AbstractSessionSink):
    """Session sink that rejects duplicate session ids."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def get(self, session_id: str) -> SessionRecord | None:
        return self._records.get(session_id)

    async def submit(self, record: SessionRecord) -> None:
        with self._lock:
            if record.session_id in self._records:
                raise ConflictAppError(
                    code="session_already_exists",
                    message="Session already exists",
                    details={"session_id": record.session_id},
                )
            self._records[record.session_id] = record
