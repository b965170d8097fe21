"""In-memory repositories used by the API scaffold and tests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
import threading
from typing import Any
from uuid import uuid4

from app.domain.animation import BatchOutcome
from app.domain.metadata_merge import merge_metadata, merge_metadata_updates

_SESSION_UPDATE_FIELDS = frozenset({"vibe", "mode", "duration_minutes", "video_url", "status"})
_MESSAGE_UPDATE_FIELDS = frozenset({"text", "relative_offset", "audio_url"})


@dataclass(slots=True)
class SessionRecord:
    id: str
    owner_id: str
    vibe: str
    mode: str
    duration_minutes: int
    created_at: datetime
    updated_at: datetime | None = None
    metadata: dict[str, Any] | None = None
    status: str = "draft"
    video_url: str | None = None
    summary: str | None = None
    summary_generated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass(slots=True)
class MessageRecord:
    id: str
    session_id: str
    role: str
    text: str
    timestamp: int
    relative_offset: int
    created_at: datetime
    audio_url: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for scaffolding and tests.

    Metadata writes go through a locked read-modify-write so that concurrent
    writers only ever replace the keys they own.
    """

    sessions: dict[str, SessionRecord] = field(default_factory=dict)
    messages: dict[str, MessageRecord] = field(default_factory=dict)
    animation_batches_by_session: dict[str, BatchOutcome] = field(default_factory=dict)
    animation_batches_started_at: dict[str, datetime] = field(default_factory=dict)
    session_write_count: int = 0
    message_write_count: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def create_session(
        self,
        *,
        owner_id: str,
        vibe: str,
        mode: str,
        duration_minutes: int,
        metadata: Mapping[str, Any] | None = None,
    ) -> SessionRecord:
        now = datetime.now(UTC)
        session = SessionRecord(
            id=str(uuid4()),
            owner_id=owner_id,
            vibe=vibe,
            mode=mode,
            duration_minutes=duration_minutes,
            created_at=now,
            updated_at=now,
            metadata=dict(metadata) if metadata is not None else None,
        )
        with self._lock:
            self.sessions[session.id] = session
            self.session_write_count += 1
        return session

    def get_session(self, session_id: str) -> SessionRecord | None:
        session = self.sessions.get(session_id)
        if session is None or session.deleted_at is not None:
            return None
        return session

    def list_sessions_for_owner(self, owner_id: str) -> list[SessionRecord]:
        sessions = [
            record
            for record in self.sessions.values()
            if record.owner_id == owner_id and record.deleted_at is None
        ]
        sessions.sort(key=lambda record: record.created_at, reverse=True)
        return sessions

    def soft_delete_session(self, session_id: str) -> None:
        with self._lock:
            session = self.sessions[session_id]
            session.deleted_at = datetime.now(UTC)
            session.updated_at = session.deleted_at
            self.session_write_count += 1

    def update_session(self, session_id: str, changes: Mapping[str, Any]) -> SessionRecord:
        unknown = set(changes) - _SESSION_UPDATE_FIELDS
        if unknown:
            raise ValueError(f"session fields are not updatable: {sorted(unknown)}")
        with self._lock:
            session = self.sessions[session_id]
            for name, value in changes.items():
                setattr(session, name, value)
            session.updated_at = datetime.now(UTC)
            self.session_write_count += 1
            return session

    def merge_session_metadata(self, session_id: str, updates: Mapping[str, Any]) -> SessionRecord:
        with self._lock:
            session = self.sessions[session_id]
            session.metadata = merge_metadata_updates(session.metadata, updates)
            session.updated_at = datetime.now(UTC)
            self.session_write_count += 1
            return session

    def save_session_summary(self, session_id: str, *, summary: str, generated_at: datetime) -> SessionRecord:
        """Persist summary text and its timestamp as one update."""
        with self._lock:
            session = self.sessions[session_id]
            session.summary = summary
            session.summary_generated_at = generated_at
            session.updated_at = generated_at
            self.session_write_count += 1
            return session

    def add_message(
        self,
        *,
        session_id: str,
        role: str,
        text: str,
        timestamp: int,
        relative_offset: int = 0,
        audio_url: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> MessageRecord:
        message = MessageRecord(
            id=str(uuid4()),
            session_id=session_id,
            role=role,
            text=text,
            timestamp=timestamp,
            relative_offset=relative_offset,
            created_at=datetime.now(UTC),
            audio_url=audio_url,
            metadata=dict(metadata) if metadata is not None else None,
        )
        with self._lock:
            self.messages[message.id] = message
            self.message_write_count += 1
        return message

    def get_message(self, message_id: str) -> MessageRecord | None:
        return self.messages.get(message_id)

    def list_messages_ordered(self, session_id: str) -> list[MessageRecord]:
        """Messages of a session in timestamp order; ties keep insertion order."""
        messages = [record for record in self.messages.values() if record.session_id == session_id]
        messages.sort(key=lambda record: record.timestamp)
        return messages

    def update_message(self, message_id: str, changes: Mapping[str, Any]) -> MessageRecord:
        unknown = set(changes) - _MESSAGE_UPDATE_FIELDS
        if unknown:
            raise ValueError(f"message fields are not updatable: {sorted(unknown)}")
        with self._lock:
            message = self.messages[message_id]
            for name, value in changes.items():
                setattr(message, name, value)
            self.message_write_count += 1
            return message

    def delete_message(self, message_id: str) -> None:
        with self._lock:
            del self.messages[message_id]
            self.message_write_count += 1

    def merge_message_metadata(self, message_id: str, key: str, value: Any) -> MessageRecord:
        with self._lock:
            message = self.messages[message_id]
            message.metadata = merge_metadata(message.metadata, key, value)
            self.message_write_count += 1
            return message

    def mark_animation_batch_started(self, session_id: str, started_at: datetime) -> datetime:
        """Record that a batch is queued or running; an existing marker keeps its original time."""
        with self._lock:
            return self.animation_batches_started_at.setdefault(session_id, started_at)

    def clear_animation_batch_started(self, session_id: str) -> None:
        with self._lock:
            self.animation_batches_started_at.pop(session_id, None)

    def get_animation_batch_started(self, session_id: str) -> datetime | None:
        return self.animation_batches_started_at.get(session_id)

    def record_animation_batch(self, outcome: BatchOutcome) -> None:
        with self._lock:
            self.animation_batches_by_session[outcome.session_id] = outcome

    def get_latest_animation_batch(self, session_id: str) -> BatchOutcome | None:
        return self.animation_batches_by_session.get(session_id)
