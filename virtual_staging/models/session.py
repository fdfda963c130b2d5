"""
Session domain schemas.

Request/response schemas for sessions and their generation history.

Dependencies: pydantic
System role: Session API contracts
"""

import uuid
from datetime import datetime

from pydantic import Field

from virtual_staging.models.common import CamelModel


class CreateSessionRequest(CamelModel):
    """Request schema for creating a new staging session."""

    original_image_url: str = Field(description="Uploaded room photo")
    room_state_choice: str = Field(description="already_empty or generate_empty")
    title: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=2000)


class SelectEmptyRoomRequest(CamelModel):
    url: str = Field(description="Empty room image to stage from")


class GenerationRecord(CamelModel):
    """One generation attempt in a session history."""

    id: uuid.UUID
    generation_type: str
    generation_number: int
    input_image_url: str
    output_image_urls: list[str]
    style: str | None = None
    room_type: str | None = None
    credits_cost: int
    status: str
    error_message: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class SessionResponse(CamelModel):
    """Response schema for session operations."""

    id: uuid.UUID
    original_image_url: str
    room_state_choice: str
    selected_empty_room_url: str | None = None
    title: str | None = None
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class SessionHistoryItem(SessionResponse):
    """Session with generations grouped by type, newest attempt first."""

    empty_room_generations: list[GenerationRecord] = Field(default_factory=list)
    staging_generations: list[GenerationRecord] = Field(default_factory=list)


class SessionHistoryResponse(CamelModel):
    sessions: list[SessionHistoryItem]
