"""
User API endpoints.

Routes: POST /users

Sign-in hook from the identity layer; idempotent per external id.

Dependencies: virtual_staging.application.services.user_service, virtual_staging.models
System role: Identity registration HTTP API
"""

from fastapi import APIRouter, Depends

from virtual_staging.api.deps import get_user_service
from virtual_staging.api.error_handling import handle_staging_errors
from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.application.services.user_service import UserService
from virtual_staging.models.user import RegisterUserRequest, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse)
@handle_staging_errors
async def register_user(
    body: RegisterUserRequest,
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Create the user and a zero-balance credit account if missing."""
    user = await user_service.register(
        external_id=body.external_id,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        image_url=body.image_url,
    )
    balance = await CreditLedger(user_service.db).get_balance(user.id)
    return UserResponse(id=user.id, external_id=user.external_id, email=user.email, balance=balance)
