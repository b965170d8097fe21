"""Summary and avatar animation routes."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query, status

from app.routes.dependencies import (
    get_authenticated_principal,
    get_avatar_animation_service,
    get_summary_service,
)
from app.schemas.auth import AuthPrincipal
from app.schemas.error import (
    ErrorResponse,
    ForbiddenError,
    NoLeakNotFoundError,
    ProviderNotConfiguredError,
    TranscriptEmptyError,
    UpstreamGenerationError,
)
from app.schemas.generation import (
    AnimationBatchOutcome,
    GenerationAccepted,
    GenerationCapabilities,
    SessionSummary,
)
from app.services.avatar_animation import AvatarAnimationService
from app.services.summaries import SummaryService

router = APIRouter(tags=["Generation"])


@router.post(
    "/sessions/{sessionId}/generate-summary",
    response_model=SessionSummary,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        404: {"model": NoLeakNotFoundError},
        409: {"model": TranscriptEmptyError},
        502: {"model": UpstreamGenerationError},
        503: {"model": ProviderNotConfiguredError},
    },
)
async def generate_summary(
    session_id: Annotated[str, Path(alias="sessionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SummaryService, Depends(get_summary_service)],
) -> SessionSummary:
    return await service.generate_summary(owner_id=principal.user_id, session_id=session_id)


@router.post(
    "/sessions/{sessionId}/generate-avatars",
    response_model=GenerationAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        404: {"model": NoLeakNotFoundError},
        422: {"model": ErrorResponse},
        503: {"model": ProviderNotConfiguredError},
    },
)
async def generate_avatars(
    session_id: Annotated[str, Path(alias="sessionId")],
    avatar_image_url: Annotated[str, Query(alias="avatarImageUrl", min_length=1)],
    background_tasks: BackgroundTasks,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[AvatarAnimationService, Depends(get_avatar_animation_service)],
    skip_animated: Annotated[bool, Query(alias="skipAnimated")] = False,
) -> GenerationAccepted:
    service.authorize_batch(owner_id=principal.user_id, session_id=session_id, avatar_image_url=avatar_image_url)
    service.mark_batch_queued(session_id=session_id)
    background_tasks.add_task(
        service.run_batch_in_background,
        session_id=session_id,
        avatar_image_url=avatar_image_url,
        skip_animated=skip_animated,
    )
    return GenerationAccepted(session_id=session_id, message="Avatar animation generation initiated")


@router.get(
    "/sessions/{sessionId}/avatar-animation",
    response_model=AnimationBatchOutcome,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        404: {"model": NoLeakNotFoundError},
    },
)
async def get_latest_animation_batch(
    session_id: Annotated[str, Path(alias="sessionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[AvatarAnimationService, Depends(get_avatar_animation_service)],
) -> AnimationBatchOutcome:
    return service.get_latest_batch(owner_id=principal.user_id, session_id=session_id)


@router.get(
    "/generation/capabilities",
    response_model=GenerationCapabilities,
    responses={401: {"model": ErrorResponse}},
)
async def get_capabilities(
    _: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    animation: Annotated[AvatarAnimationService, Depends(get_avatar_animation_service)],
    summaries: Annotated[SummaryService, Depends(get_summary_service)],
) -> GenerationCapabilities:
    return GenerationCapabilities(avatar_animation=animation.is_available(), summary=summaries.is_available())
