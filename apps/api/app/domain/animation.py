"""Avatar animation job types shared by the provider adapter and the batch orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

ANIMATED_VIDEO_METADATA_KEY = "animatedVideoUrl"
ANIMATION_ENABLED_METADATA_KEY = "animateAvatar"
HOST_ROLE = "ai"


def normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def is_host_role(role: str | None) -> bool:
    """Host messages are the ones the avatar speaks; roles compare case-insensitively."""
    return normalize_role(role) == HOST_ROLE


def unfetchable_reference_reason(value: str | None) -> str | None:
    """Why a media reference cannot be fetched by a remote provider, or ``None`` when it can."""
    text = (value or "").strip()
    if text.startswith("data:"):
        return "is an inline data URI; upload it to storage first"
    if not text.startswith(("https://", "http://")):
        return "is not a network URL"
    return None


class JobStatus(str, Enum):
    """Remote job status as observed through the provider adapter.

    ``TIMED_OUT`` is never reported by a provider; the orchestrator records it
    when the poll budget runs out.
    """

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    TIMED_OUT = "TIMED_OUT"


class ItemState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    ABANDONED = "ABANDONED"


class MessageSkip(str, Enum):
    """Why a host message was left out of a batch. Skips are not failures."""

    ANIMATION_DISABLED = "animation_disabled"
    NO_AUDIO = "no_audio"
    ALREADY_ANIMATED = "already_animated"


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    source_image: str
    audio_url: str
    session_id: str
    item_id: str


@dataclass(frozen=True, slots=True)
class JobHandle:
    provider_job_id: str
    submitted_at: datetime


@dataclass(frozen=True, slots=True)
class JobPending:
    status: JobStatus = JobStatus.PENDING


@dataclass(frozen=True, slots=True)
class JobRunning:
    status: JobStatus = JobStatus.RUNNING


@dataclass(frozen=True, slots=True)
class JobSucceeded:
    output_url: str | None
    status: JobStatus = JobStatus.SUCCEEDED


@dataclass(frozen=True, slots=True)
class JobFailed:
    detail: str | None = None
    canceled: bool = False

    @property
    def status(self) -> JobStatus:
        return JobStatus.CANCELED if self.canceled else JobStatus.FAILED


ProviderResponse = JobPending | JobRunning | JobSucceeded | JobFailed


@dataclass(frozen=True, slots=True)
class JobResult:
    item_id: str
    output_url: str | None = None
    error_detail: str | None = None


@dataclass(slots=True)
class ItemOutcome:
    item_id: str
    state: ItemState
    attempts: int = 0
    output_url: str | None = None
    error_code: str | None = None
    error_detail: str | None = None


@dataclass(slots=True)
class BatchOutcome:
    """Aggregate result of one batch.

    ``attempted`` is ``succeeded + failed + timed_out``; skipped items were never attempted.
    """

    session_id: str
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    timed_out: int = 0
    items: list[ItemOutcome] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def record(self, outcome: ItemOutcome) -> None:
        self.items.append(outcome)
        self.attempted += 1
        if outcome.state is ItemState.SUCCEEDED:
            self.succeeded += 1
            return
        if outcome.state is ItemState.TIMED_OUT:
            self.timed_out += 1
            return
        self.failed += 1
