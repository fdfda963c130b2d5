"""
Job ORM model.

The operational record the JobManager drives from processing to a terminal
state for one generation request. Optionally linked to a session.

Dependencies: sqlalchemy, virtual_staging.boundary.db.base
System role: Generation job tracking
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from virtual_staging.boundary.db.base import Base, UUIDMixin, TimestampMixin


class JobType(str, enum.Enum):
    """
    Generation job types.

    EMPTY_ROOM: Remove furniture from the room photo (one provider call)
    STAGING: Furnish the room in a style (N parallel variant calls)
    MASK: Segment objects named by a text prompt (one call, no session)
    """

    EMPTY_ROOM = "empty_room"
    STAGING = "staging"
    MASK = "mask"


class JobStatus(str, enum.Enum):
    """
    Job execution states.

    PENDING: Accepted, provider not yet called
    PROCESSING: Credits reserved, provider calls in flight
    COMPLETED: All variants returned an image; terminal
    FAILED: A variant failed, timed out, or the job was reaped; terminal
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobModel(Base, UUIDMixin, TimestampMixin):
    """
    Job ORM model.

    The id is generated before credits are reserved so the debit ledger
    entry and the job share it.

    Attributes:
        user_id: Owning user
        session_id: Optional staging session (set NULL when the session is purged)
        type: EMPTY_ROOM / STAGING / MASK
        status: PENDING / PROCESSING / COMPLETED / FAILED
        input_image_url: Image sent to the provider
        prompt: First prompt sent to the provider (the text prompt for masks)
        style: Staging style preset
        room_type: Staging room type
        result_urls: One URL per variant, in call order
        credits_used: Credits debited for this job
        provider_job_ids: Provider request ids, comma-joined
        error_message: Failure reason
        completed_at: Terminal timestamp
        purge_at: When stored artifacts become eligible for deletion
    """

    __tablename__ = "jobs"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    session_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("sessions.id", ondelete="SET NULL"),
        nullable=True,
    )

    type: Mapped[JobType] = mapped_column(
        Enum(JobType, native_enum=False),
        nullable=False,
    )

    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, native_enum=False),
        nullable=False,
        default=JobStatus.PENDING,
        index=True,
    )

    input_image_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    prompt: Mapped[str | None] = mapped_column(String(4096), nullable=True)

    style: Mapped[str | None] = mapped_column(String(64), nullable=True)

    room_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    result_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    credits_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    provider_job_ids: Mapped[str | None] = mapped_column(String(512), nullable=True)

    error_message: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    purge_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
