"""
Session service orchestrator.

SessionStore for staging workflows: creation, owner-scoped lookup,
empty-room selection and the history view grouped by generation type.

Dependencies: virtual_staging.boundary.db.CRUD, virtual_staging.boundary.db.models
System role: Session use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.CRUD.generation_crud import generation_crud
from virtual_staging.boundary.db.CRUD.session_crud import session_crud
from virtual_staging.boundary.db.models.generation_model import GenerationModel, GenerationType
from virtual_staging.boundary.db.models.session_model import RoomStateChoice, SessionModel
from virtual_staging.core.exceptions import SessionNotFoundError, ValidationError

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


def serialize_generation(generation: GenerationModel) -> dict:
    return {
        "id": str(generation.id),
        "generation_type": generation.generation_type.value,
        "generation_number": generation.generation_number,
        "input_image_url": generation.input_image_url,
        "output_image_urls": list(generation.output_image_urls or []),
        "style": generation.style,
        "room_type": generation.room_type,
        "credits_cost": generation.credits_cost,
        "status": generation.status.value,
        "error_message": generation.error_message,
        "created_at": generation.created_at,
        "completed_at": generation.completed_at,
    }


def serialize_session(session: SessionModel, generations: list[GenerationModel] | None = None) -> dict:
    """
    Project a session and its generations for history views.

    Generations are partitioned by type and ordered by generation_number
    descending.
    """
    data = {
        "id": str(session.id),
        "original_image_url": session.original_image_url,
        "room_state_choice": session.room_state_choice.value,
        "selected_empty_room_url": session.selected_empty_room_url,
        "title": session.title,
        "description": session.description,
        "created_at": session.created_at,
        "updated_at": session.updated_at,
    }
    if generations is not None:
        ordered = sorted(generations, key=lambda g: g.generation_number, reverse=True)
        data["empty_room_generations"] = [
            serialize_generation(g) for g in ordered if g.generation_type == GenerationType.EMPTY_ROOM
        ]
        data["staging_generations"] = [
            serialize_generation(g) for g in ordered if g.generation_type == GenerationType.STAGING
        ]
    return data


class SessionService:
    """Session service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def create_session(
        self,
        user_id: UUID,
        original_image_url: str,
        room_state_choice: str,
        title: str | None = None,
        description: str | None = None,
    ) -> SessionModel:
        """
        Start a staging workflow for one photo.

        An already-empty room uses the original photo as its selected
        empty room right away.

        Args:
            user_id: Owner
            original_image_url: Uploaded room photo
            room_state_choice: "already_empty" or "generate_empty"
            title: Optional title
            description: Optional description

        Returns:
            SessionModel: Created session

        Raises:
            ValidationError: Unknown room_state_choice or missing image URL
        """
        if not original_image_url or not original_image_url.strip():
            raise ValidationError("Original image URL is required", field="original_image_url")

        try:
            choice = RoomStateChoice(room_state_choice)
        except ValueError as e:
            raise ValidationError(
                f"Invalid room state choice: {room_state_choice}",
                field="room_state_choice",
            ) from e

        selected = original_image_url if choice == RoomStateChoice.ALREADY_EMPTY else None
        session = await session_crud.create(
            self.db,
            user_id=user_id,
            original_image_url=original_image_url,
            room_state_choice=choice,
            selected_empty_room_url=selected,
            title=title,
            description=description,
        )

        logger.info(
            f"{__name__}:create_session - Session created",
            extra={"session_id": str(session.id), "user_id": str(user_id), "choice": choice.value},
        )
        return session

    async def get_session(self, user_id: UUID, session_id: UUID) -> SessionModel:
        """
        Owner-scoped session lookup.

        Raises:
            SessionNotFoundError: Missing or owned by another user
        """
        session = await session_crud.get_for_user(self.db, session_id, user_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def get_session_with_history(self, user_id: UUID, session_id: UUID) -> dict:
        """Single session with its grouped generation history."""
        session = await session_crud.get_with_generations(self.db, session_id, user_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return serialize_session(session, list(session.generations))

    async def list_sessions_with_history(self, user_id: UUID, limit: int = HISTORY_LIMIT) -> list[dict]:
        """
        Most recently updated sessions with grouped generations.

        Args:
            user_id: Owner
            limit: Maximum number of sessions

        Returns:
            list[dict]: Sessions newest first, each with empty_room_generations
                and staging_generations
        """
        sessions = await session_crud.list_with_generations(self.db, user_id, limit=limit)
        return [serialize_session(s, list(s.generations)) for s in sessions]

    async def select_empty_room(self, user_id: UUID, session_id: UUID, url: str) -> SessionModel:
        """
        Choose the empty room used as staging input.

        The URL must be an output of a completed empty-room generation of
        the session, or the original photo of an already-empty session.

        Raises:
            SessionNotFoundError: Missing or foreign session
            ValidationError: URL not produced by this session
        """
        session = await self.get_session(user_id, session_id)

        allowed: set[str] = set()
        if session.room_state_choice == RoomStateChoice.ALREADY_EMPTY:
            allowed.add(session.original_image_url)
        completed = await generation_crud.list_completed(self.db, session_id, GenerationType.EMPTY_ROOM)
        for generation in completed:
            allowed.update(generation.output_image_urls or [])

        if url not in allowed:
            raise ValidationError("Image is not an empty room of this session", field="url")

        await session_crud.touch(self.db, session_id, selected_empty_room_url=url)
        await self.db.refresh(session)

        logger.info(
            f"{__name__}:select_empty_room - Empty room selected",
            extra={"session_id": str(session_id), "user_id": str(user_id)},
        )
        return session
