"""
Generation tracker.

Records versioned generation attempts under a session. Numbers come from
a per-(session, type) counter on the session row, incremented inside the
inserting transaction while the row is locked, so deleting old attempts
never frees a number. The (session, type, number) unique constraint
rejects any duplicate that slips past.

Dependencies: virtual_staging.boundary.db.CRUD
System role: GenerationTracker (numbering + attempt history)
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.base import utcnow
from virtual_staging.boundary.db.CRUD.generation_crud import generation_crud
from virtual_staging.boundary.db.CRUD.session_crud import session_crud
from virtual_staging.boundary.db.models.generation_model import (
    GenerationModel,
    GenerationStatus,
    GenerationType,
)
from virtual_staging.boundary.db.models.session_model import RoomStateChoice
from virtual_staging.core.exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)


class GenerationTracker:
    """Per-session attempt numbering and recording."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def next_generation_number(self, session_id: UUID, generation_type: GenerationType) -> int:
        """Number the next attempt of this type will get, starting at 1."""
        return await self.count_attempts(session_id, generation_type) + 1

    async def count_attempts(self, session_id: UUID, generation_type: GenerationType) -> int:
        """
        Attempts ever numbered for (session, type), including deleted ones.

        Raises:
            SessionNotFoundError: Session does not exist
        """
        count = await session_crud.get_attempt_count(self.db, session_id, generation_type)
        if count is None:
            raise SessionNotFoundError(session_id)
        return count

    async def record_generation(
        self,
        session_id: UUID,
        generation_type: GenerationType,
        input_image_url: str,
        status: GenerationStatus,
        output_image_urls: list[str] | None = None,
        style: str | None = None,
        room_type: str | None = None,
        credits_cost: int = 0,
        provider_job_id: str | None = None,
        error_message: str | None = None,
    ) -> GenerationModel:
        """
        Append an attempt with the next generation number.

        Locks the session row, takes the next number from its counter and
        inserts in the caller's transaction. A completed empty-room attempt on a
        generate_empty session without a selection becomes the selected
        empty room. The session's updated_at is bumped either way.

        Args:
            session_id: Parent session
            generation_type: EMPTY_ROOM or STAGING
            input_image_url: Image the provider received
            status: Attempt status
            output_image_urls: Ordered outputs (completed attempts only)
            style: Staging style
            room_type: Staging room type
            credits_cost: Credits charged
            provider_job_id: Provider request ids
            error_message: Failure reason

        Returns:
            GenerationModel: Inserted attempt

        Raises:
            SessionNotFoundError: Session vanished before recording
        """
        session = await session_crud.lock(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        number = await session_crud.allocate_generation_number(self.db, session_id, generation_type)
        terminal = status in (GenerationStatus.COMPLETED, GenerationStatus.FAILED)
        outputs = list(output_image_urls or []) if status == GenerationStatus.COMPLETED else []

        generation = await generation_crud.create(
            self.db,
            session_id=session_id,
            generation_type=generation_type,
            generation_number=number,
            input_image_url=input_image_url,
            output_image_urls=outputs,
            style=style,
            room_type=room_type,
            credits_cost=credits_cost,
            provider_job_id=provider_job_id,
            status=status,
            error_message=error_message,
            completed_at=utcnow() if terminal else None,
        )

        selected = None
        if (
            generation_type == GenerationType.EMPTY_ROOM
            and status == GenerationStatus.COMPLETED
            and outputs
            and session.room_state_choice == RoomStateChoice.GENERATE_EMPTY
            and not session.selected_empty_room_url
        ):
            selected = outputs[0]
        await session_crud.touch(self.db, session_id, selected_empty_room_url=selected)

        logger.info(
            f"{__name__}:record_generation - Generation recorded",
            extra={
                "session_id": str(session_id),
                "generation_type": generation_type.value,
                "generation_number": number,
                "status": status.value,
            },
        )
        return generation
