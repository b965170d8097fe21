"""Replicate SadTalker adapter for talking-avatar video jobs."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import Any

import httpx

from app.adapters.providers.base import AnimationProvider
from app.adapters.providers.http import decode_json_body, send_provider_request
from app.core.logging_safety import safe_log_identifier, safe_log_reference
from app.domain.animation import (
    GenerationRequest,
    JobFailed,
    JobHandle,
    JobPending,
    JobRunning,
    JobSucceeded,
    ProviderResponse,
    unfetchable_reference_reason,
)
from app.errors import (
    MalformedSuccessError,
    ProviderReportedFailure,
    ProviderValidationError,
    TransientProviderError,
)

logger = logging.getLogger(__name__)

_SADTALKER_INPUT_DEFAULTS: dict[str, Any] = {
    "preprocess": "crop",
    "still_mode": False,
    "use_enhancer": True,
    "result_format": "mp4",
}
_PENDING_STATUSES = frozenset({"starting", "queued"})
_RUNNING_STATUSES = frozenset({"processing"})
_CANCELED_STATUSES = frozenset({"canceled", "cancelled"})


def _require_fetchable_reference(value: str, *, field_name: str) -> None:
    reason = unfetchable_reference_reason(value)
    if reason is not None:
        raise ProviderValidationError(f"{field_name} {reason}")


def _extract_output(output: Any) -> str | None:
    if isinstance(output, list):
        output = output[0] if output else None
    if isinstance(output, dict):
        output = output.get("uri") or output.get("url")
    if isinstance(output, str) and output.strip():
        return output.strip()
    return None


def decode_prediction(payload: Any) -> ProviderResponse:
    """Translate a Replicate prediction document into a ``ProviderResponse`` variant."""
    if not isinstance(payload, dict):
        raise TransientProviderError("prediction payload is not an object")

    status = str(payload.get("status") or "").strip().lower()
    if not status:
        raise TransientProviderError("prediction payload has no status")
    if status in _PENDING_STATUSES:
        return JobPending()
    if status in _RUNNING_STATUSES:
        return JobRunning()
    if status == "succeeded":
        return JobSucceeded(output_url=_extract_output(payload.get("output")))

    error = payload.get("error")
    detail = str(error) if error not in (None, "") else None
    if status == "failed":
        return JobFailed(detail=detail)
    if status in _CANCELED_STATUSES:
        return JobFailed(detail=detail, canceled=True)

    logger.warning("replicate.unknown_status status=%s", status)
    return JobRunning()


class ReplicateAnimationClient(AnimationProvider):
    provider_name = "replicate"

    def __init__(
        self,
        *,
        api_token: str | None,
        api_base: str,
        model_version: str,
        timeout_seconds: float,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_token = (api_token or "").strip() or None
        self._api_base = api_base.rstrip("/")
        self._model_version = model_version
        self._timeout = timeout_seconds
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return self._api_token is not None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }

    async def submit(self, request: GenerationRequest) -> JobHandle:
        self.ensure_configured()
        _require_fetchable_reference(request.audio_url, field_name="audio reference")
        _require_fetchable_reference(request.source_image, field_name="source image")

        body = {
            "version": self._model_version,
            "input": {
                "source_image": request.source_image,
                "driven_audio": request.audio_url,
                **_SADTALKER_INPUT_DEFAULTS,
            },
        }
        logger.info(
            "replicate.submit item_id=%s image=%s audio=%s",
            safe_log_identifier(request.item_id, prefix="mid"),
            safe_log_reference(request.source_image),
            safe_log_reference(request.audio_url),
        )
        response = await send_provider_request(
            "POST",
            f"{self._api_base}/predictions",
            headers=self._headers(),
            timeout=self._timeout,
            http_client=self._http_client,
            json=body,
        )
        if response.status_code >= 400:
            raise ProviderReportedFailure(f"prediction rejected with HTTP {response.status_code}")

        payload = decode_json_body(response)
        prediction_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(prediction_id, str) or not prediction_id:
            raise MalformedSuccessError("prediction response has no id")
        return JobHandle(provider_job_id=prediction_id, submitted_at=datetime.now(UTC))

    async def poll(self, handle: JobHandle) -> ProviderResponse:
        self.ensure_configured()
        response = await send_provider_request(
            "GET",
            f"{self._api_base}/predictions/{handle.provider_job_id}",
            headers=self._headers(),
            timeout=self._timeout,
            http_client=self._http_client,
        )
        if response.status_code >= 400:
            return JobFailed(detail=f"prediction lookup rejected with HTTP {response.status_code}")
        return decode_prediction(decode_json_body(response))


__all__ = ["ReplicateAnimationClient", "decode_prediction"]
