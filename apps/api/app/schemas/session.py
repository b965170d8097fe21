"""Session API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    vibe: str = Field(min_length=1, max_length=50)
    mode: str = Field(min_length=1, max_length=50)
    duration_minutes: int = Field(ge=1)
    metadata: dict[str, Any] | None = None


class UpdateSessionRequest(BaseModel):
    """Partial update; omitted or null fields keep their stored value."""

    vibe: str | None = Field(default=None, min_length=1, max_length=50)
    mode: str | None = Field(default=None, min_length=1, max_length=50)
    duration_minutes: int | None = Field(default=None, ge=1)
    video_url: str | None = None
    status: str | None = Field(default=None, min_length=1, max_length=20)


class Session(BaseModel):
    id: str
    vibe: str
    mode: str
    duration_minutes: int
    status: str
    video_url: str | None = None
    metadata: dict[str, Any] | None = None
    summary: str | None = None
    summary_generated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
