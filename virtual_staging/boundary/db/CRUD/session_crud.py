"""
Session CRUD operations.

Provides Create, Read, Update, Delete operations for SessionModel
with owner-scoped queries, row locking for generation numbering and
eager loading of generation history.

Dependencies: sqlalchemy, virtual_staging.boundary.db.models
System role: Session persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from virtual_staging.boundary.db.base import utcnow
from virtual_staging.boundary.db.CRUD.base_crud import BaseCRUD
from virtual_staging.boundary.db.models.generation_model import GenerationType
from virtual_staging.boundary.db.models.session_model import SessionModel

ATTEMPT_COUNTERS = {
    GenerationType.EMPTY_ROOM: SessionModel.empty_room_attempts,
    GenerationType.STAGING: SessionModel.staging_attempts,
}


class SessionCRUD(BaseCRUD[SessionModel]):
    """
    CRUD operations for SessionModel.

    Extends BaseCRUD with owner scoping and generation eager loading.
    """

    def __init__(self) -> None:
        super().__init__(SessionModel)

    async def get_for_user(
        self,
        session: AsyncSession,
        id: UUID,
        user_id: UUID,
    ) -> SessionModel | None:
        """
        Retrieve a session only if it belongs to the user.

        Args:
            session: Async database session
            id: Session UUID
            user_id: Requesting user

        Returns:
            SessionModel if found and owned, None otherwise
        """
        stmt = select(SessionModel).where(SessionModel.id == id, SessionModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock(self, session: AsyncSession, id: UUID) -> SessionModel | None:
        """
        Lock the session row for the rest of the transaction.

        Serializes generation-number allocation on the same session.
        """
        stmt = (
            select(SessionModel)
            .where(SessionModel.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_generations(
        self,
        session: AsyncSession,
        id: UUID,
        user_id: UUID,
    ) -> SessionModel | None:
        """Owner-scoped session with eagerly loaded generations."""
        stmt = (
            select(SessionModel)
            .where(SessionModel.id == id, SessionModel.user_id == user_id)
            .options(selectinload(SessionModel.generations))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_generations(
        self,
        session: AsyncSession,
        user_id: UUID,
        limit: int = 50,
    ) -> Sequence[SessionModel]:
        """
        Most recently updated sessions of a user with generations loaded.

        Args:
            session: Async database session
            user_id: Owner
            limit: Maximum number of sessions

        Returns:
            Sessions ordered by updated_at descending
        """
        stmt = (
            select(SessionModel)
            .where(SessionModel.user_id == user_id)
            .options(selectinload(SessionModel.generations))
            .execution_options(populate_existing=True)
            .order_by(SessionModel.updated_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_attempt_count(
        self,
        session: AsyncSession,
        id: UUID,
        generation_type: GenerationType,
    ) -> int | None:
        """Attempts numbered so far for a session and type, None if the session is gone."""
        stmt = select(ATTEMPT_COUNTERS[generation_type]).where(SessionModel.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def allocate_generation_number(
        self,
        session: AsyncSession,
        id: UUID,
        generation_type: GenerationType,
    ) -> int | None:
        """
        Increment the attempt counter for a type and return the new value.

        Args:
            session: Async database session
            id: Session UUID
            generation_type: EMPTY_ROOM or STAGING

        Returns:
            Allocated generation number, None if the session is gone
        """
        counter = ATTEMPT_COUNTERS[generation_type]
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == id)
            .values({counter: counter + 1})
            .returning(counter)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch(
        self,
        session: AsyncSession,
        id: UUID,
        selected_empty_room_url: str | None = None,
    ) -> None:
        """
        Bump updated_at, optionally setting the selected empty room.

        Args:
            session: Async database session
            id: Session UUID
            selected_empty_room_url: New selected empty room, if any
        """
        values: dict = {"updated_at": utcnow()}
        if selected_empty_room_url is not None:
            values["selected_empty_room_url"] = selected_empty_room_url
        await session.execute(update(SessionModel).where(SessionModel.id == id).values(**values))

    async def get_ids_created_before(
        self,
        session: AsyncSession,
        cutoff: datetime,
        user_id: UUID | None = None,
    ) -> Sequence[UUID]:
        """Ids of sessions created before the cutoff, optionally for one user."""
        stmt = select(SessionModel.id).where(SessionModel.created_at < cutoff)
        if user_id is not None:
            stmt = stmt.where(SessionModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_ids(self, session: AsyncSession, ids: Sequence[UUID]) -> int:
        """Delete sessions by id, returning the number removed."""
        if not ids:
            return 0
        result = await session.execute(delete(SessionModel).where(SessionModel.id.in_(ids)))
        return result.rowcount


session_crud = SessionCRUD()
