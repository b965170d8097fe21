"""Authenticated caller schema."""

from pydantic import BaseModel, Field


class AuthPrincipal(BaseModel):
    """Owner identity resolved from a bearer token; sessions are scoped to ``user_id``."""

    user_id: str = Field(min_length=1)
    email: str | None = None
