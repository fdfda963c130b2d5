"""
Session API endpoints.

Routes: POST /sessions, GET /sessions/history, GET /sessions/{id},
PUT /sessions/{id}/empty-room

Dependencies: virtual_staging.application.services.session_service, virtual_staging.models
System role: Session HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from virtual_staging.api.deps import get_current_user_id, get_session_service
from virtual_staging.api.error_handling import handle_staging_errors
from virtual_staging.application.services.session_service import SessionService, serialize_session
from virtual_staging.models.session import (
    CreateSessionRequest,
    SelectEmptyRoomRequest,
    SessionHistoryItem,
    SessionHistoryResponse,
    SessionResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
@handle_staging_errors
async def create_session(
    body: CreateSessionRequest,
    user_id: UUID = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """
    Start a staging workflow for an uploaded photo.

    Raises:
        HTTPException(400): Unknown room state choice
    """
    session = await session_service.create_session(
        user_id,
        original_image_url=body.original_image_url,
        room_state_choice=body.room_state_choice,
        title=body.title,
        description=body.description,
    )
    await session_service.db.commit()
    return SessionResponse(**serialize_session(session))


@router.get("/history", response_model=SessionHistoryResponse)
@handle_staging_errors
async def get_session_history(
    user_id: UUID = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service),
) -> SessionHistoryResponse:
    """Most recently updated sessions with generations grouped by type."""
    sessions = await session_service.list_sessions_with_history(user_id)
    return SessionHistoryResponse(sessions=[SessionHistoryItem(**s) for s in sessions])


@router.get("/{session_id}", response_model=SessionHistoryItem)
@handle_staging_errors
async def get_session(
    session_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service),
) -> SessionHistoryItem:
    """
    Single session with its history.

    Raises:
        HTTPException(404): Session not found
    """
    session = await session_service.get_session_with_history(user_id, session_id)
    return SessionHistoryItem(**session)


@router.put("/{session_id}/empty-room", response_model=SessionResponse)
@handle_staging_errors
async def select_empty_room(
    session_id: UUID,
    body: SelectEmptyRoomRequest,
    user_id: UUID = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """
    Choose which generated empty room staging starts from.

    Raises:
        HTTPException(400): Image not produced by this session
        HTTPException(404): Session not found
    """
    session = await session_service.select_empty_room(user_id, session_id, body.url)
    await session_service.db.commit()
    return SessionResponse(**serialize_session(session))
