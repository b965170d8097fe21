"""Message API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CreateMessageRequest(BaseModel):
    role: str = Field(min_length=1, max_length=10)
    text: str
    timestamp: int = Field(ge=0, description="Epoch milliseconds; defines transcript order.")
    relative_offset: int = Field(default=0, ge=0)
    audio_url: str | None = None
    metadata: dict[str, Any] | None = None


class UpdateMessageRequest(BaseModel):
    text: str | None = None
    relative_offset: int | None = Field(default=None, ge=0)
    audio_url: str | None = None


class Message(BaseModel):
    id: str
    session_id: str
    role: str
    text: str
    timestamp: int
    relative_offset: int
    audio_url: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime
