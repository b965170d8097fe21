"""Summary and avatar animation API schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.domain.animation import ItemState


class SessionSummary(BaseModel):
    session_id: str
    summary: str
    generated_at: datetime


class GenerationAccepted(BaseModel):
    session_id: str
    status: Literal["processing"] = "processing"
    message: str


class AnimationItemOutcome(BaseModel):
    message_id: str
    state: ItemState
    attempts: int
    output_url: str | None = None
    error_code: str | None = None
    error_detail: str | None = None


class AnimationBatchOutcome(BaseModel):
    """Latest batch for a session; while one is queued or running only ``started_at`` is meaningful."""

    session_id: str
    status: Literal["processing", "completed"]
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    timed_out: int = 0
    items: list[AnimationItemOutcome] = Field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None


class GenerationCapabilities(BaseModel):
    avatar_animation: bool
    summary: bool
