"""Session and message routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Response, status

from app.routes.dependencies import get_authenticated_principal, get_session_service
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ErrorResponse, ForbiddenError, NoLeakNotFoundError
from app.schemas.message import CreateMessageRequest, Message, UpdateMessageRequest
from app.schemas.session import CreateSessionRequest, Session, UpdateSessionRequest
from app.services.sessions import SessionService

router = APIRouter(prefix="/sessions", tags=["Sessions"])

_OWNED_SESSION_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse},
    403: {"model": ForbiddenError},
    404: {"model": NoLeakNotFoundError},
}


@router.post(
    "",
    response_model=Session,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
)
async def create_session(
    payload: CreateSessionRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Session:
    return service.create_session(owner_id=principal.user_id, payload=payload)


@router.get("", response_model=list[Session], responses={401: {"model": ErrorResponse}})
async def list_sessions(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> list[Session]:
    return service.list_sessions(owner_id=principal.user_id)


@router.get("/{sessionId}", response_model=Session, responses=_OWNED_SESSION_RESPONSES)
async def get_session(
    session_id: Annotated[str, Path(alias="sessionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Session:
    return service.get_session(owner_id=principal.user_id, session_id=session_id)


@router.put("/{sessionId}", response_model=Session, responses=_OWNED_SESSION_RESPONSES)
async def update_session(
    session_id: Annotated[str, Path(alias="sessionId")],
    payload: UpdateSessionRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Session:
    return service.update_session(owner_id=principal.user_id, session_id=session_id, payload=payload)


@router.patch("/{sessionId}/metadata", response_model=Session, responses=_OWNED_SESSION_RESPONSES)
async def update_session_metadata(
    session_id: Annotated[str, Path(alias="sessionId")],
    updates: Annotated[dict[str, Any], Body()],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Session:
    return service.update_metadata(owner_id=principal.user_id, session_id=session_id, updates=updates)


@router.delete(
    "/{sessionId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_OWNED_SESSION_RESPONSES,
)
async def delete_session(
    session_id: Annotated[str, Path(alias="sessionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Response:
    service.delete_session(owner_id=principal.user_id, session_id=session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{sessionId}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
    responses=_OWNED_SESSION_RESPONSES,
)
async def add_message(
    session_id: Annotated[str, Path(alias="sessionId")],
    payload: CreateMessageRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Message:
    return service.add_message(owner_id=principal.user_id, session_id=session_id, payload=payload)


@router.get("/{sessionId}/messages", response_model=list[Message], responses=_OWNED_SESSION_RESPONSES)
async def list_messages(
    session_id: Annotated[str, Path(alias="sessionId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> list[Message]:
    return service.list_messages(owner_id=principal.user_id, session_id=session_id)


@router.put("/{sessionId}/messages/{messageId}", response_model=Message, responses=_OWNED_SESSION_RESPONSES)
async def update_message(
    session_id: Annotated[str, Path(alias="sessionId")],
    message_id: Annotated[str, Path(alias="messageId")],
    payload: UpdateMessageRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Message:
    return service.update_message(
        owner_id=principal.user_id,
        session_id=session_id,
        message_id=message_id,
        payload=payload,
    )


@router.delete(
    "/{sessionId}/messages/{messageId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_OWNED_SESSION_RESPONSES,
)
async def delete_message(
    session_id: Annotated[str, Path(alias="sessionId")],
    message_id: Annotated[str, Path(alias="messageId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[SessionService, Depends(get_session_service)],
) -> Response:
    service.delete_message(owner_id=principal.user_id, session_id=session_id, message_id=message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
