"""
Generation ORM model.

One versioned empty-room or staging attempt inside a session. The
generation_number is a per-(session, type) retry counter.

Dependencies: sqlalchemy, virtual_staging.boundary.db.base
System role: Generation history persistence
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from virtual_staging.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class GenerationType(str, enum.Enum):
    """Kind of generation attempt."""

    EMPTY_ROOM = "empty_room"
    STAGING = "staging"


class GenerationStatus(str, enum.Enum):
    """Lifecycle of a generation attempt."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Generation attempt ORM model.

    Attributes:
        session_id: Parent session (cascade delete)
        generation_type: EMPTY_ROOM / STAGING
        generation_number: 1, 2, 3... per (session, type), gapless
        input_image_url: Image the provider was given
        output_image_urls: Ordered result URLs (empty unless completed)
        style: Staging style preset
        room_type: Staging room type
        credits_cost: Credits charged for this attempt
        provider_job_id: Provider request ids, comma-joined
        status: PENDING / PROCESSING / COMPLETED / FAILED
        error_message: Failure reason
        completed_at: Terminal timestamp

    Constraints:
        (session_id, generation_type, generation_number) unique
    """

    __tablename__ = "generations"
    __table_args__ = (
        UniqueConstraint(
            "session_id",
            "generation_type",
            "generation_number",
            name="uq_generations_session_type_number",
        ),
    )

    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    generation_type: Mapped[GenerationType] = mapped_column(
        Enum(GenerationType, native_enum=False),
        nullable=False,
    )

    generation_number: Mapped[int] = mapped_column(Integer, nullable=False)

    input_image_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    output_image_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    style: Mapped[str | None] = mapped_column(String(64), nullable=True)

    room_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    credits_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    provider_job_id: Mapped[str | None] = mapped_column(String(512), nullable=True)

    status: Mapped[GenerationStatus] = mapped_column(
        Enum(GenerationStatus, native_enum=False),
        nullable=False,
        default=GenerationStatus.PENDING,
    )

    error_message: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    session = relationship("SessionModel", back_populates="generations")
