"""Request and response schemas for the Story Recorder API.

Stories themselves are returned as ``StoryRecord`` (see
``story_recorder/models/story.py``); the admin client needs every stored
field for filtering, so there is no separate response projection.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response after a successful upload."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    message: str = Field(default="Story saved.")
    story_id: str = Field(description="Assigned story id, e.g. '001'.")
    category: str = Field(description="Category the story was recorded for.")
    duration: float = Field(description="Stored duration in seconds.")


class ErrorResponse(BaseModel):
    """Structured error body returned for every handled failure."""

    model_config = ConfigDict(frozen=True)

    error: str = Field(
        description="Machine-readable code: missing_author, invalid_category, "
        "missing_file, file_too_large or internal_failure.",
    )
    detail: str = Field(description="Human-readable message safe to show to the user.")


class LikeResponse(BaseModel):
    """New like state after a toggle."""

    model_config = ConfigDict(frozen=True)

    id: str
    liked: bool


class DeleteResponse(BaseModel):
    """Confirmation of a deleted story."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    id: str


class HealthResponse(BaseModel):
    """Liveness probe body."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    timestamp: datetime
    transcoder: str = Field(description="Active transcoder, or 'none'.")
    transcoder_available: bool = False
