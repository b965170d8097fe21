"""Avatar animation batch orchestration.

One batch covers the host messages of a session. Each eligible message gets
its own remote job which is submitted, polled until a terminal provider status
or until the attempt budget runs out, and persisted the moment it succeeds.
Item-scoped failures end that item only; the batch always runs to the end and
reports a ``BatchOutcome``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
import logging

from app.adapters.providers.base import AnimationProvider
from app.core.logging_safety import safe_log_identifier, safe_log_reference
from app.domain.animation import (
    ANIMATED_VIDEO_METADATA_KEY,
    ANIMATION_ENABLED_METADATA_KEY,
    BatchOutcome,
    GenerationRequest,
    ItemOutcome,
    ItemState,
    JobFailed,
    JobHandle,
    JobResult,
    JobSucceeded,
    MessageSkip,
    is_host_role,
    unfetchable_reference_reason,
)
from app.domain.item_fsm import ItemLifecycle
from app.errors import (
    ApiError,
    GenerationError,
    MalformedSuccessError,
    ProviderConfigurationError,
    ProviderReportedFailure,
    TransientProviderError,
)
from app.repositories.memory import InMemoryStore, MessageRecord, SessionRecord
from app.schemas.generation import AnimationBatchOutcome, AnimationItemOutcome
from app.services.sessions import require_owned_session

logger = logging.getLogger(__name__)

_TIMED_OUT_CODE = "POLL_BUDGET_EXHAUSTED"
_INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


@dataclass(frozen=True, slots=True)
class PollPolicy:
    interval_seconds: float = 5.0
    max_attempts: int = 60
    max_concurrency: int = 1


class AvatarAnimationService:
    def __init__(self, store: InMemoryStore, provider: AnimationProvider, policy: PollPolicy) -> None:
        self._store = store
        self._provider = provider
        self._policy = policy

    def is_available(self) -> bool:
        return self._provider.is_configured

    def authorize_batch(self, *, owner_id: str, session_id: str, avatar_image_url: str) -> SessionRecord:
        """Run the batch-fatal checks up front so a request can be rejected before anything is enqueued."""
        session = require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        reason = unfetchable_reference_reason(avatar_image_url)
        if reason is not None:
            logger.warning(
                "animation.rejected session_id=%s code=INVALID_GENERATION_INPUT image=%s",
                safe_log_identifier(session_id, prefix="sid"),
                safe_log_reference(avatar_image_url),
            )
            raise ApiError(
                status_code=422,
                code="INVALID_GENERATION_INPUT",
                message=f"Avatar image {reason}",
                details={"field": "avatarImageUrl"},
            )
        if not self._provider.is_configured:
            logger.warning(
                "animation.rejected session_id=%s code=PROVIDER_NOT_CONFIGURED",
                safe_log_identifier(session_id, prefix="sid"),
            )
            raise ApiError(
                status_code=503,
                code="PROVIDER_NOT_CONFIGURED",
                message="Avatar animation is not configured",
                details={"provider": self._provider.provider_name},
            )
        return session

    def mark_batch_queued(self, *, session_id: str) -> datetime:
        return self._store.mark_animation_batch_started(session_id, datetime.now(UTC))

    def get_latest_batch(self, *, owner_id: str, session_id: str) -> AnimationBatchOutcome:
        require_owned_session(self._store, owner_id=owner_id, session_id=session_id)
        started_at = self._store.get_animation_batch_started(session_id)
        if started_at is not None:
            return AnimationBatchOutcome(session_id=session_id, status="processing", started_at=started_at)
        outcome = self._store.get_latest_animation_batch(session_id)
        if outcome is None:
            raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")
        return self._to_batch_outcome(outcome)

    async def run_batch_in_background(
        self,
        *,
        session_id: str,
        avatar_image_url: str,
        skip_animated: bool = False,
    ) -> None:
        """Background-task entry point; batch-fatal errors are logged since nobody awaits the result."""
        try:
            await self.generate_animated_avatars(
                session_id=session_id,
                avatar_image_url=avatar_image_url,
                skip_animated=skip_animated,
            )
        except ProviderConfigurationError as exc:
            logger.error(
                "animation.batch_rejected session_id=%s code=%s",
                safe_log_identifier(session_id, prefix="sid"),
                exc.code,
            )
        except ApiError as exc:
            logger.error(
                "animation.batch_rejected session_id=%s code=%s",
                safe_log_identifier(session_id, prefix="sid"),
                exc.payload.code,
            )
        finally:
            self._store.clear_animation_batch_started(session_id)

    async def generate_animated_avatars(
        self,
        *,
        session_id: str,
        avatar_image_url: str,
        skip_animated: bool = False,
    ) -> BatchOutcome:
        # Configuration is batch-fatal: nothing is attempted without credentials.
        self._provider.ensure_configured()

        session = self._store.get_session(session_id)
        if session is None:
            raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")

        started_at = self._store.mark_animation_batch_started(session_id, datetime.now(UTC))
        try:
            return await self._run_batch(
                session,
                avatar_image_url=avatar_image_url,
                skip_animated=skip_animated,
                started_at=started_at,
            )
        finally:
            self._store.clear_animation_batch_started(session_id)

    async def _run_batch(
        self,
        session: SessionRecord,
        *,
        avatar_image_url: str,
        skip_animated: bool,
        started_at: datetime,
    ) -> BatchOutcome:
        session_id = session.id
        safe_session_id = safe_log_identifier(session_id, prefix="sid")
        outcome = BatchOutcome(session_id=session_id, started_at=started_at)
        enabled = (session.metadata or {}).get(ANIMATION_ENABLED_METADATA_KEY) is True
        host_messages = [m for m in self._store.list_messages_ordered(session_id) if is_host_role(m.role)]
        if not host_messages:
            logger.warning("animation.no_host_messages session_id=%s", safe_session_id)

        eligible: list[MessageRecord] = []
        for message in host_messages:
            skip = self._skip_reason(message, enabled=enabled, skip_animated=skip_animated)
            if skip is None:
                eligible.append(message)
                continue
            outcome.skipped += 1
            logger.info(
                "animation.item_skipped session_id=%s message_id=%s reason=%s",
                safe_session_id,
                safe_log_identifier(message.id, prefix="mid"),
                skip.value,
            )

        logger.info(
            "animation.batch_started session_id=%s eligible=%s skipped=%s image=%s",
            safe_session_id,
            len(eligible),
            outcome.skipped,
            safe_log_reference(avatar_image_url),
        )

        semaphore = asyncio.Semaphore(self._policy.max_concurrency)

        async def run_item(message: MessageRecord) -> ItemOutcome:
            async with semaphore:
                return await self._process_item(
                    session_id=session_id,
                    avatar_image_url=avatar_image_url,
                    message=message,
                )

        for item_outcome in await asyncio.gather(*(run_item(message) for message in eligible)):
            outcome.record(item_outcome)

        outcome.completed_at = datetime.now(UTC)
        self._store.record_animation_batch(outcome)
        logger.info(
            "animation.batch_completed session_id=%s attempted=%s succeeded=%s failed=%s timed_out=%s skipped=%s",
            safe_session_id,
            outcome.attempted,
            outcome.succeeded,
            outcome.failed,
            outcome.timed_out,
            outcome.skipped,
        )
        return outcome

    @staticmethod
    def _skip_reason(message: MessageRecord, *, enabled: bool, skip_animated: bool) -> MessageSkip | None:
        if not enabled:
            return MessageSkip.ANIMATION_DISABLED
        if not (message.audio_url or "").strip():
            return MessageSkip.NO_AUDIO
        if skip_animated and (message.metadata or {}).get(ANIMATED_VIDEO_METADATA_KEY):
            return MessageSkip.ALREADY_ANIMATED
        return None

    async def _process_item(
        self,
        *,
        session_id: str,
        avatar_image_url: str,
        message: MessageRecord,
    ) -> ItemOutcome:
        lifecycle = ItemLifecycle(message.id)
        log_ids = (
            safe_log_identifier(session_id, prefix="sid"),
            safe_log_identifier(message.id, prefix="mid"),
        )
        request = GenerationRequest(
            source_image=avatar_image_url,
            audio_url=message.audio_url or "",
            session_id=session_id,
            item_id=message.id,
        )

        try:
            handle = await self._provider.submit(request)
            lifecycle.advance(ItemState.SUBMITTED)
            return await self._poll_until_terminal(lifecycle, handle, log_ids)
        except asyncio.CancelledError:
            # The remote job keeps running; only local polling stops.
            lifecycle.advance(ItemState.ABANDONED)
            logger.warning(
                "animation.item_abandoned session_id=%s message_id=%s attempts=%s",
                *log_ids,
                lifecycle.attempts,
            )
            raise
        except GenerationError as exc:
            return self._fail(lifecycle, log_ids, code=exc.code, detail=exc.detail)
        except Exception as exc:
            logger.exception(
                "animation.item_error session_id=%s message_id=%s state=%s",
                *log_ids,
                lifecycle.state.value,
            )
            return self._fail(lifecycle, log_ids, code=_INTERNAL_ERROR_CODE, detail=type(exc).__name__)

    async def _poll_until_terminal(
        self,
        lifecycle: ItemLifecycle,
        handle: JobHandle,
        log_ids: tuple[str, str],
    ) -> ItemOutcome:
        max_attempts = self._policy.max_attempts
        while lifecycle.attempts < max_attempts:
            await asyncio.sleep(self._policy.interval_seconds)
            lifecycle.attempts += 1
            lifecycle.advance(ItemState.POLLING)

            try:
                observation = await self._provider.poll(handle)
            except TransientProviderError as exc:
                # Counted against the same budget, so this cannot loop forever.
                logger.warning(
                    "animation.poll_transient session_id=%s message_id=%s attempt=%s/%s reason=%s",
                    *log_ids,
                    lifecycle.attempts,
                    max_attempts,
                    exc.detail,
                )
                continue

            logger.debug(
                "animation.polled session_id=%s message_id=%s attempt=%s/%s provider_status=%s",
                *log_ids,
                lifecycle.attempts,
                max_attempts,
                observation.status.value,
            )
            if isinstance(observation, JobSucceeded):
                if not observation.output_url:
                    raise MalformedSuccessError("provider reported success without an output reference")
                result = JobResult(item_id=lifecycle.item_id, output_url=observation.output_url)
                return self._succeed(lifecycle, log_ids, result)
            if isinstance(observation, JobFailed):
                label = "canceled by provider" if observation.canceled else "failed by provider"
                detail = f"{label}: {observation.detail}" if observation.detail else label
                raise ProviderReportedFailure(detail)

        lifecycle.advance(ItemState.TIMED_OUT)
        logger.warning(
            "animation.item_timed_out session_id=%s message_id=%s attempts=%s",
            *log_ids,
            lifecycle.attempts,
        )
        return ItemOutcome(
            item_id=lifecycle.item_id,
            state=lifecycle.state,
            attempts=lifecycle.attempts,
            error_code=_TIMED_OUT_CODE,
            error_detail=f"no terminal status after {lifecycle.attempts} polls",
        )

    def _succeed(self, lifecycle: ItemLifecycle, log_ids: tuple[str, str], result: JobResult) -> ItemOutcome:
        # Persist before reporting so a crash later in the batch keeps this result.
        self._store.merge_message_metadata(result.item_id, ANIMATED_VIDEO_METADATA_KEY, result.output_url)
        lifecycle.advance(ItemState.SUCCEEDED)
        logger.info(
            "animation.item_succeeded session_id=%s message_id=%s attempts=%s output=%s",
            *log_ids,
            lifecycle.attempts,
            safe_log_reference(result.output_url),
        )
        return ItemOutcome(
            item_id=result.item_id,
            state=lifecycle.state,
            attempts=lifecycle.attempts,
            output_url=result.output_url,
        )

    @staticmethod
    def _fail(lifecycle: ItemLifecycle, log_ids: tuple[str, str], *, code: str, detail: str) -> ItemOutcome:
        lifecycle.advance(ItemState.FAILED)
        logger.warning(
            "animation.item_failed session_id=%s message_id=%s attempts=%s code=%s detail=%s",
            *log_ids,
            lifecycle.attempts,
            code,
            detail,
        )
        return ItemOutcome(
            item_id=lifecycle.item_id,
            state=lifecycle.state,
            attempts=lifecycle.attempts,
            error_code=code,
            error_detail=detail,
        )

    @staticmethod
    def _to_batch_outcome(outcome: BatchOutcome) -> AnimationBatchOutcome:
        return AnimationBatchOutcome(
            session_id=outcome.session_id,
            status="completed",
            attempted=outcome.attempted,
            succeeded=outcome.succeeded,
            failed=outcome.failed,
            skipped=outcome.skipped,
            timed_out=outcome.timed_out,
            items=[
                AnimationItemOutcome(
                    message_id=item.item_id,
                    state=item.state,
                    attempts=item.attempts,
                    output_url=item.output_url,
                    error_code=item.error_code,
                    error_detail=item.error_detail,
                )
                for item in outcome.items
            ],
            started_at=outcome.started_at,
            completed_at=outcome.completed_at,
        )
