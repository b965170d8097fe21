"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class ForbiddenError(BaseModel):
    code: Literal["FORBIDDEN"]
    message: str


class ProviderNotConfiguredError(BaseModel):
    code: Literal["PROVIDER_NOT_CONFIGURED"]
    message: str
    details: dict[str, Any] | None = None


class TranscriptEmptyError(BaseModel):
    code: Literal["TRANSCRIPT_EMPTY"]
    message: str


class UpstreamGenerationError(BaseModel):
    code: Literal["SUMMARY_GENERATION_FAILED"]
    message: str
    details: dict[str, Any] | None = None
