"""Session sink interface.

Persistence and job queuing live outside the webhook guard; routes depend on
this abstraction only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from app.schemas.webhook import SessionRecord


class AbstractSessionSink(ABC):
    """Destination for sessions accepted by the webhook endpoint."""

    @abstractmethod
    async def submit(self, record: SessionRecord) -> None:
        """Store or enqueue a session record.

        Args:
            record: Session derived from an authenticated webhook.

        Raises:
            ConflictAppError: If a session with the same id was already submitted.
        """
        raise NotImplementedError
