"""
User service.

Identity resolution for the request layer and the sign-in hook that
creates a user with a zero-balance credit account.

Dependencies: sqlalchemy, virtual_staging.boundary.db.CRUD
System role: Identity resolver
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.boundary.db.CRUD.user_crud import user_crud
from virtual_staging.boundary.db.models.user_model import UserModel
from virtual_staging.core.exceptions import UnauthorizedError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """Maps external identities to internal users."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def resolve(self, external_id: str | None) -> UUID:
        """
        Internal user id for an external identity.

        Raises:
            UnauthorizedError: No identity supplied
            UserNotFoundError: Identity never registered
        """
        if not external_id or not external_id.strip():
            raise UnauthorizedError("Missing user identity")

        user = await user_crud.get_by_external_id(self.db, external_id.strip())
        if user is None:
            raise UserNotFoundError(external_id)
        return user.id

    async def register(
        self,
        external_id: str,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        image_url: str | None = None,
    ) -> UserModel:
        """
        Create the user and its credit account; idempotent per identity.

        Args:
            external_id: Identity provider subject
            email: Primary email
            first_name: Given name
            last_name: Family name
            image_url: Avatar URL

        Returns:
            UserModel: New or existing user

        Raises:
            UnauthorizedError: Empty identity
        """
        if not external_id or not external_id.strip():
            raise UnauthorizedError("Missing user identity")
        external_id = external_id.strip()

        existing = await user_crud.get_by_external_id(self.db, external_id)
        if existing is not None:
            return existing

        try:
            user = await user_crud.create(
                self.db,
                external_id=external_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                image_url=image_url,
            )
            await CreditLedger(self.db).ensure_account(user.id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await user_crud.get_by_external_id(self.db, external_id)
            if existing is None:
                raise
            return existing

        logger.info(
            f"{__name__}:register - User registered",
            extra={"user_id": str(user.id), "external_id": external_id},
        )
        return user
