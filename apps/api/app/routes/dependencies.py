"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from app.adapters.providers import (
    AnimationProvider,
    GeminiSummaryClient,
    ReplicateAnimationClient,
    SummaryProvider,
)
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import AuthPrincipal
from app.services.avatar_animation import AvatarAnimationService, PollPolicy
from app.services.sessions import SessionService
from app.services.summaries import SummaryService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthPrincipal:
    """Validate bearer token and attach normalized principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error("Invalid or missing bearer token")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s provider=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
            verifier.provider_name,
        )
        raise _auth_error(str(exc) or "Invalid bearer token") from exc

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s provider=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
        verifier.provider_name,
    )
    request.state.auth_principal = principal
    return principal


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_animation_provider(settings: Annotated[Settings, Depends(get_settings)]) -> AnimationProvider:
    return ReplicateAnimationClient(
        api_token=settings.replicate_api_token,
        api_base=settings.replicate_api_base,
        model_version=settings.replicate_model_version,
        timeout_seconds=settings.provider_request_timeout_seconds,
    )


def get_summary_provider(settings: Annotated[Settings, Depends(get_settings)]) -> SummaryProvider:
    return GeminiSummaryClient(
        api_key=settings.gemini_api_key,
        api_base=settings.gemini_api_base,
        model=settings.gemini_model,
        timeout_seconds=settings.provider_request_timeout_seconds,
    )


def get_session_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> SessionService:
    return SessionService(store)


def get_avatar_animation_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    provider: Annotated[AnimationProvider, Depends(get_animation_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AvatarAnimationService:
    policy = PollPolicy(
        interval_seconds=settings.animation_poll_interval_seconds,
        max_attempts=settings.animation_max_poll_attempts,
        max_concurrency=settings.animation_max_concurrency,
    )
    return AvatarAnimationService(store, provider, policy)


def get_summary_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    provider: Annotated[SummaryProvider, Depends(get_summary_provider)],
) -> SummaryService:
    return SummaryService(store, provider)
