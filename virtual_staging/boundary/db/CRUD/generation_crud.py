"""
Generation CRUD operations.

Provides history reads and retention deletes for GenerationModel.

Dependencies: sqlalchemy, virtual_staging.boundary.db.models
System role: Generation history persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.CRUD.base_crud import BaseCRUD
from virtual_staging.boundary.db.models.generation_model import (
    GenerationModel,
    GenerationStatus,
    GenerationType,
)
from virtual_staging.boundary.db.models.session_model import SessionModel


class GenerationCRUD(BaseCRUD[GenerationModel]):
    """
    CRUD operations for GenerationModel.

    Extends BaseCRUD with completed-attempt lookups and cleanup queries.
    """

    def __init__(self) -> None:
        super().__init__(GenerationModel)

    async def list_completed(
        self,
        session: AsyncSession,
        session_id: UUID,
        generation_type: GenerationType,
    ) -> Sequence[GenerationModel]:
        """Completed attempts of one type for a session."""
        stmt = select(GenerationModel).where(
            GenerationModel.session_id == session_id,
            GenerationModel.generation_type == generation_type,
            GenerationModel.status == GenerationStatus.COMPLETED,
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_failed_before(
        self,
        session: AsyncSession,
        cutoff: datetime,
        session_ids: Sequence[UUID] | None = None,
    ) -> int:
        """
        Delete failed generations created before the cutoff.

        Args:
            session: Async database session
            cutoff: Creation time threshold
            session_ids: Restrict to these sessions when given

        Returns:
            Number of rows deleted
        """
        stmt = delete(GenerationModel).where(
            GenerationModel.status == GenerationStatus.FAILED,
            GenerationModel.created_at < cutoff,
        )
        if session_ids is not None:
            stmt = stmt.where(GenerationModel.session_id.in_(session_ids))
        result = await session.execute(stmt)
        return result.rowcount

    async def delete_for_sessions(self, session: AsyncSession, session_ids: Sequence[UUID]) -> int:
        """Delete every generation of the given sessions."""
        if not session_ids:
            return 0
        stmt = delete(GenerationModel).where(GenerationModel.session_id.in_(session_ids))
        result = await session.execute(stmt)
        return result.rowcount

    async def delete_orphans(self, session: AsyncSession) -> int:
        """Delete generations whose session no longer exists."""
        stmt = delete(GenerationModel).where(
            GenerationModel.session_id.not_in(select(SessionModel.id))
        )
        result = await session.execute(stmt)
        return result.rowcount


generation_crud = GenerationCRUD()
