"""
User CRUD operations.

Dependencies: sqlalchemy, virtual_staging.boundary.db.models
System role: User persistence operations for identity resolution
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.CRUD.base_crud import BaseCRUD
from virtual_staging.boundary.db.models.user_model import UserModel


class UserCRUD(BaseCRUD[UserModel]):
    """CRUD operations for UserModel keyed by external identity."""

    def __init__(self) -> None:
        super().__init__(UserModel)

    async def get_by_external_id(
        self,
        session: AsyncSession,
        external_id: str,
    ) -> UserModel | None:
        """
        Retrieve user by identity provider subject.

        Args:
            session: Async database session
            external_id: External identity

        Returns:
            UserModel if found, None otherwise
        """
        stmt = select(UserModel).where(UserModel.external_id == external_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


user_crud = UserCRUD()
