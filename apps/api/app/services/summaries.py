"""Session summary generation."""

from datetime import UTC, datetime
import logging

from app.adapters.providers.base import SummaryProvider
from app.core.logging_safety import safe_log_identifier
from app.domain.transcript import SessionDescriptor, TranscriptLine, build_summary_prompt
from app.errors import ApiError, GenerationError, ProviderConfigurationError
from app.repositories.memory import InMemoryStore
from app.schemas.generation import SessionSummary
from app.services.sessions import require_owned_session

logger = logging.getLogger(__name__)


class SummaryService:
    """Single-shot summary: build prompt, call the provider once, persist the text.

    No retry happens here; the caller decides whether to invoke again.
    """

    def __init__(self, store: InMemoryStore, provider: SummaryProvider) -> None:
        self._store = store
        self._provider = provider

    def is_available(self) -> bool:
        return self._provider.is_configured

    async def generate_summary(self, *, owner_id: str, session_id: str) -> SessionSummary:
        session = require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        safe_session_id = safe_log_identifier(session.id, prefix="sid")

        if not self._provider.is_configured:
            logger.warning("summary.rejected session_id=%s code=PROVIDER_NOT_CONFIGURED", safe_session_id)
            raise ApiError(
                status_code=503,
                code="PROVIDER_NOT_CONFIGURED",
                message="Summary generation is not configured",
                details={"provider": self._provider.provider_name},
            )

        messages = self._store.list_messages_ordered(session.id)
        if not messages:
            raise ApiError(status_code=409, code="TRANSCRIPT_EMPTY", message="Session has no messages to summarize")

        prompt = build_summary_prompt(
            SessionDescriptor(vibe=session.vibe, mode=session.mode, duration_minutes=session.duration_minutes),
            [TranscriptLine(role=m.role, text=m.text, timestamp=m.timestamp) for m in messages],
        )

        try:
            summary = await self._provider.generate(prompt)
        except ProviderConfigurationError as exc:
            raise ApiError(
                status_code=503,
                code="PROVIDER_NOT_CONFIGURED",
                message="Summary generation is not configured",
                details={"provider": self._provider.provider_name},
            ) from exc
        except GenerationError as exc:
            logger.warning(
                "summary.failed session_id=%s code=%s reason=%s",
                safe_session_id,
                exc.code,
                exc.detail,
            )
            raise ApiError(
                status_code=502,
                code="SUMMARY_GENERATION_FAILED",
                message="Failed to generate summary",
                details={"reason": exc.code},
            ) from exc

        generated_at = datetime.now(UTC)
        self._store.save_session_summary(session.id, summary=summary, generated_at=generated_at)
        logger.info(
            "summary.generated session_id=%s messages=%s chars=%s",
            safe_session_id,
            len(messages),
            len(summary),
        )
        return SessionSummary(session_id=session.id, summary=summary, generated_at=generated_at)
