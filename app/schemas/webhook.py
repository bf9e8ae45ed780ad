"""Pydantic schemas for the session-completed webhook."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal

from pydantic import AnyUrl, AwareDatetime, BaseModel, Field, field_validator


class SessionFeedback(BaseModel):
    """Post-session feedback left by a tutor or a student."""

    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5.")
    description: str = Field(..., description="Free-text feedback.")


class SessionCompletedPayload(BaseModel):
    """Body of a session-completed webhook as sent by the tutoring platform.

    Timestamps are ISO-8601 in UTC with a ``Z`` suffix. Join and leave times
    may be ``null``; the other optional fields may be omitted but not sent as
    ``null``.
    """

    session_id: str = Field(..., min_length=1, description="Platform session identifier.")
    tutor_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    session_start_time: AwareDatetime = Field(..., description="Scheduled start.")
    session_end_time: AwareDatetime = Field(..., description="Scheduled end.")
    tutor_join_time: AwareDatetime | None = None
    student_join_time: AwareDatetime | None = None
    tutor_leave_time: AwareDatetime | None = None
    student_leave_time: AwareDatetime | None = None
    subjects_covered: List[str] = Field(default_factory=list)
    is_first_session: bool = False
    was_rescheduled: bool = False
    rescheduled_by: Literal["tutor", "student", "system"] | None = None
    tutor_feedback: SessionFeedback | None = None
    student_feedback: SessionFeedback | None = None
    video_url: AnyUrl | None = None
    transcript_url: AnyUrl | None = None
    ai_summary: str | None = None

    @field_validator(
        "session_start_time",
        "session_end_time",
        "tutor_join_time",
        "student_join_time",
        "tutor_leave_time",
        "student_leave_time",
        mode="before",
    )
    @classmethod
    def _require_utc_suffix(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.endswith("Z"):
            raise ValueError("Timestamp must be ISO-8601 UTC ending in 'Z'")
        return value

    @field_validator(
        "rescheduled_by",
        "tutor_feedback",
        "student_feedback",
        "video_url",
        "transcript_url",
        "ai_summary",
        mode="before",
    )
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Omitted fields keep their default; an explicit null is an error.
        if value is None:
            raise ValueError("Field may be omitted but must not be null")
        return value


class SessionRecord(BaseModel):
    """Flattened session handed to the session sink for storage/processing."""

    session_id: str
    tutor_id: str
    student_id: str
    session_start_time: datetime
    session_end_time: datetime
    tutor_join_time: datetime | None = None
    student_join_time: datetime | None = None
    tutor_leave_time: datetime | None = None
    student_leave_time: datetime | None = None
    subjects_covered: List[str] = Field(default_factory=list)
    is_first_session: bool = False
    session_length_scheduled: int = Field(
        ..., description="Scheduled length in whole minutes."
    )
    session_length_actual: int | None = Field(
        None, description="Tutor join-to-leave length in whole minutes, when known."
    )
    was_rescheduled: bool = False
    rescheduled_by: str | None = None
    reschedule_count: int = 0
    tutor_feedback_rating: int | None = None
    tutor_feedback_description: str | None = None
    student_feedback_rating: int | None = None
    student_feedback_description: str | None = None
    video_url: str | None = None
    transcript_url: str | None = None
    ai_summary: str | None = None
    priority: Literal["high", "normal"] = Field(
        "normal", description="Processing priority: 'high' for first sessions."
    )


class WebhookAcceptedResponse(BaseModel):
    """Response returned once a webhook has been accepted."""

    success: bool = True
    session_id: str
    queued: bool = Field(..., description="Whether the session was handed off for processing.")
    message: str
