"""
User schemas.

Dependencies: pydantic
System role: Identity registration API contracts
"""

import uuid

from pydantic import Field

from virtual_staging.models.common import CamelModel


class RegisterUserRequest(CamelModel):
    """Sign-in hook payload from the identity provider."""

    external_id: str = Field(description="Identity provider subject")
    email: str = ""
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None


class UserResponse(CamelModel):
    id: uuid.UUID
    external_id: str
    email: str
    balance: int
