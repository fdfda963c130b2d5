"""
Generation API endpoints.

Routes: POST /generations/empty-room, POST /generations/staging,
    POST /generations/mask

All run the job to a terminal state before responding. A failed job
(credits refunded) is returned with status "failed" rather than an error.

Dependencies: virtual_staging.application.services.job_manager, virtual_staging.models
System role: Generation HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from virtual_staging.api.deps import get_current_user_id, get_job_manager
from virtual_staging.api.error_handling import handle_staging_errors
from virtual_staging.application.services.job_manager import GenerationRequest, JobManager
from virtual_staging.boundary.db.models.job_model import JobType
from virtual_staging.models.generation import (
    EmptyRoomRequest,
    GenerationResponse,
    MaskRequest,
    StagingRequest,
)

router = APIRouter(prefix="/generations", tags=["generations"])


@router.post("/empty-room", response_model=GenerationResponse)
@handle_staging_errors
async def generate_empty_room(
    body: EmptyRoomRequest,
    user_id: UUID = Depends(get_current_user_id),
    job_manager: JobManager = Depends(get_job_manager),
) -> GenerationResponse:
    """
    Remove furniture from a room photo.

    Raises:
        HTTPException(400): Invalid request, stale generation number or attempt limit
        HTTPException(402): Insufficient credits
        HTTPException(404): Session not found
    """
    result = await job_manager.start_generation(
        user_id,
        GenerationRequest(
            job_type=JobType.EMPTY_ROOM,
            image_url=body.image_url,
            session_id=body.session_id,
            generation_number=body.generation_number,
        ),
    )
    return GenerationResponse(**result)


@router.post("/staging", response_model=GenerationResponse)
@handle_staging_errors
async def generate_staging(
    body: StagingRequest,
    user_id: UUID = Depends(get_current_user_id),
    job_manager: JobManager = Depends(get_job_manager),
) -> GenerationResponse:
    """
    Furnish an empty room in a style, producing one image per variant.

    Raises:
        HTTPException(400): Invalid style, room type or generation number
        HTTPException(402): Insufficient credits
        HTTPException(404): Session not found
    """
    result = await job_manager.start_generation(
        user_id,
        GenerationRequest(
            job_type=JobType.STAGING,
            image_url=body.image_url,
            style=body.style,
            room_type=body.room_type,
            session_id=body.session_id,
            generation_number=body.generation_number,
        ),
    )
    return GenerationResponse(**result)


@router.post("/mask", response_model=GenerationResponse)
@handle_staging_errors
async def generate_mask(
    body: MaskRequest,
    user_id: UUID = Depends(get_current_user_id),
    job_manager: JobManager = Depends(get_job_manager),
) -> GenerationResponse:
    """
    Segment the objects named by the text prompt into mask images.

    Raises:
        HTTPException(400): Missing or oversized text prompt
        HTTPException(402): Insufficient credits
    """
    result = await job_manager.start_generation(
        user_id,
        GenerationRequest(
            job_type=JobType.MASK,
            image_url=body.image_url,
            text_prompt=body.text_prompt,
        ),
    )
    return GenerationResponse(**result)
