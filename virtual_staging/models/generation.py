"""
Generation request/response schemas.

Style and room type stay plain strings here; the JobManager validates
them against the catalogue so errors carry the offending field.

Dependencies: pydantic
System role: Generation API contracts
"""

import uuid

from pydantic import Field

from virtual_staging.models.common import CamelModel


class EmptyRoomRequest(CamelModel):
    """Request schema for an empty-room generation."""

    image_url: str = Field(description="Room photo to empty")
    session_id: uuid.UUID | None = Field(default=None, description="Session the attempt belongs to")
    generation_number: int | None = Field(default=None, description="Expected next attempt number")


class StagingRequest(CamelModel):
    """Request schema for a multi-variant staging generation."""

    image_url: str = Field(description="Empty room to furnish")
    style: str = Field(description="Style preset")
    room_type: str | None = Field(default=None, description="Room type (defaults to living_room)")
    session_id: uuid.UUID | None = None
    generation_number: int | None = None


class MaskRequest(CamelModel):
    """Request schema for a text-prompted mask generation."""

    image_url: str = Field(description="Room photo to segment")
    text_prompt: str = Field(description="Objects to mask, e.g. \"furniture\"")


class GenerationResponse(CamelModel):
    """Terminal outcome of a generation request."""

    job_id: uuid.UUID
    status: str
    result_urls: list[str]
    credits_used: int
    generation_number: int | None = None
    error_message: str | None = None
