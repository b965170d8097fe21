"""Session and message service layer."""

from typing import Any

from app.errors import ApiError
from app.repositories.memory import InMemoryStore, MessageRecord, SessionRecord
from app.schemas.message import CreateMessageRequest, Message, UpdateMessageRequest
from app.schemas.session import CreateSessionRequest, Session, UpdateSessionRequest


def require_owned_session(store: InMemoryStore, *, owner_id: str, session_id: str) -> SessionRecord:
    """Resolve a live session for its owner; missing is 404, foreign ownership is 403."""
    record = store.get_session(session_id)
    if record is None:
        raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")
    if record.owner_id != owner_id:
        raise ApiError(status_code=403, code="FORBIDDEN", message="Session belongs to another user")
    return record


def require_session_message(
    store: InMemoryStore, *, owner_id: str, session_id: str, message_id: str
) -> MessageRecord:
    """Resolve a message through its owned session; a message of another session is not found."""
    require_owned_session(store, owner_id=owner_id, session_id=session_id)
    record = store.get_message(message_id)
    if record is None or record.session_id != session_id:
        raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")
    return record


class SessionService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_session(self, *, owner_id: str, payload: CreateSessionRequest) -> Session:
        record = self._store.create_session(
            owner_id=owner_id,
            vibe=payload.vibe,
            mode=payload.mode,
            duration_minutes=payload.duration_minutes,
            metadata=payload.metadata,
        )
        return self._to_session(record)

    def list_sessions(self, *, owner_id: str) -> list[Session]:
        return [self._to_session(record) for record in self._store.list_sessions_for_owner(owner_id)]

    def get_session(self, *, owner_id: str, session_id: str) -> Session:
        record = require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        return self._to_session(record)

    def update_session(self, *, owner_id: str, session_id: str, payload: UpdateSessionRequest) -> Session:
        require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        record = self._store.update_session(session_id, payload.model_dump(exclude_none=True))
        return self._to_session(record)

    def update_metadata(self, *, owner_id: str, session_id: str, updates: dict[str, Any]) -> Session:
        require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        record = self._store.merge_session_metadata(session_id, updates)
        return self._to_session(record)

    def delete_session(self, *, owner_id: str, session_id: str) -> None:
        require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        self._store.soft_delete_session(session_id)

    def add_message(self, *, owner_id: str, session_id: str, payload: CreateMessageRequest) -> Message:
        require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        record = self._store.add_message(
            session_id=session_id,
            role=payload.role,
            text=payload.text,
            timestamp=payload.timestamp,
            relative_offset=payload.relative_offset,
            audio_url=payload.audio_url,
            metadata=payload.metadata,
        )
        return self._to_message(record)

    def list_messages(self, *, owner_id: str, session_id: str) -> list[Message]:
        require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        return [self._to_message(record) for record in self._store.list_messages_ordered(session_id)]

    def update_message(
        self, *, owner_id: str, session_id: str, message_id: str, payload: UpdateMessageRequest
    ) -> Message:
        require_session_message(self._store, owner_id=owner_id, session_id=session_id, message_id=message_id)
        record = self._store.update_message(message_id, payload.model_dump(exclude_none=True))
        return self._to_message(record)

    def delete_message(self, *, owner_id: str, session_id: str, message_id: str) -> None:
        require_session_message(self._store, owner_id=owner_id, session_id=session_id, message_id=message_id)
        self._store.delete_message(message_id)

    @staticmethod
    def _to_session(record: SessionRecord) -> Session:
        return Session(
            id=record.id,
            vibe=record.vibe,
            mode=record.mode,
            duration_minutes=record.duration_minutes,
            status=record.status,
            video_url=record.video_url,
            metadata=record.metadata,
            summary=record.summary,
            summary_generated_at=record.summary_generated_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    @staticmethod
    def _to_message(record: MessageRecord) -> Message:
        return Message(
            id=record.id,
            session_id=record.session_id,
            role=record.role,
            text=record.text,
            timestamp=record.timestamp,
            relative_offset=record.relative_offset,
            audio_url=record.audio_url,
            metadata=record.metadata,
            created_at=record.created_at,
        )
