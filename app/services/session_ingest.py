"""Turn authenticated webhook payloads into session records."""

from __future__ import annotations

import logging
from datetime import datetime

from app.adapters.session_sink.base import AbstractSessionSink
from app.schemas.webhook import SessionCompletedPayload, SessionRecord

logger = logging.getLogger(__name__)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def build_session_record(payload: SessionCompletedPayload) -> SessionRecord:
    """Flatten a webhook payload and derive the computed session fields.

    Args:
        payload: Validated webhook body.

    Returns:
        SessionRecord ready for the session sink.
    """
    actual = None
    if payload.tutor_join_time and payload.tutor_leave_time:
        actual = minutes_between(payload.tutor_join_time, payload.tutor_leave_time)

    tutor_feedback = payload.tutor_feedback
    student_feedback = payload.student_feedback

    return SessionRecord(
        session_id=payload.session_id,
        tutor_id=payload.tutor_id,
        student_id=payload.student_id,
        session_start_time=payload.session_start_time,
        session_end_time=payload.session_end_time,
        tutor_join_time=payload.tutor_join_time,
        student_join_time=payload.student_join_time,
        tutor_leave_time=payload.tutor_leave_time,
        student_leave_time=payload.student_leave_time,
        subjects_covered=list(payload.subjects_covered),
        is_first_session=payload.is_first_session,
        session_length_scheduled=minutes_between(
            payload.session_start_time, payload.session_end_time
        ),
        session_length_actual=actual,
        was_rescheduled=payload.was_rescheduled,
        rescheduled_by=payload.rescheduled_by,
        reschedule_count=1 if payload.was_rescheduled else 0,
        tutor_feedback_rating=tutor_feedback.rating if tutor_feedback else None,
        tutor_feedback_description=tutor_feedback.description if tutor_feedback else None,
        student_feedback_rating=student_feedback.rating if student_feedback else None,
        student_feedback_description=student_feedback.description if student_feedback else None,
        video_url=str(payload.video_url) if payload.video_url else None,
        transcript_url=str(payload.transcript_url) if payload.transcript_url else None,
        ai_summary=payload.ai_summary,
        priority="high" if payload.is_first_session else "normal",
    )


async def ingest_session(payload: SessionCompletedPayload, sink: AbstractSessionSink) -> SessionRecord:
    """Build the session record and hand it to the sink.

    Raises:
        ConflictAppError: If the sink already holds this session.
    """
    record = build_session_record(payload)
    await sink.submit(record)
    logger.info(
        "webhook.session_ingested",
        extra={
            "session_id": record.session_id,
            "tutor_id": record.tutor_id,
            "priority": record.priority,
        },
    )
    return record
