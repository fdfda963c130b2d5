"""
Staging session ORM model.

One end-to-end staging workflow against a single original photo. Groups the
empty-room and staging generation attempts made for it.

Dependencies: sqlalchemy, virtual_staging.boundary.db.base
System role: Session persistence for generation history
"""

import enum
import uuid

from sqlalchemy import Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from virtual_staging.boundary.db.base import Base, UUIDMixin, TimestampMixin


class RoomStateChoice(str, enum.Enum):
    """
    How the session obtains its empty room.

    ALREADY_EMPTY: The original photo is used as the empty room
    GENERATE_EMPTY: An empty-room generation must produce it
    """

    ALREADY_EMPTY = "already_empty"
    GENERATE_EMPTY = "generate_empty"


class SessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Session ORM model for one user staging workflow.

    Cascade delete ensures generations are removed with their session.

    Attributes:
        user_id: Owning user
        original_image_url: Uploaded room photo
        room_state_choice: ALREADY_EMPTY / GENERATE_EMPTY
        selected_empty_room_url: Empty room chosen as staging input
        title: Optional session title
        description: Optional session description
        empty_room_attempts: Empty-room attempts ever numbered in this session
        staging_attempts: Staging attempts ever numbered in this session
        generations: One-to-many GenerationModel rows (cascade delete)
    """

    __tablename__ = "sessions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    original_image_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    room_state_choice: Mapped[RoomStateChoice] = mapped_column(
        Enum(RoomStateChoice, native_enum=False),
        nullable=False,
    )

    selected_empty_room_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    title: Mapped[str | None] = mapped_column(String(255), nullable=True)

    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # High-water marks for generation numbering; retention never lowers them
    empty_room_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    staging_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    generations = relationship(
        "GenerationModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
