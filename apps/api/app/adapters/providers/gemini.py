"""Gemini adapter for session summaries."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.adapters.providers.base import SummaryProvider
from app.adapters.providers.http import decode_json_body, send_provider_request
from app.errors import MalformedSuccessError, ProviderReportedFailure

logger = logging.getLogger(__name__)


def extract_candidate_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise MalformedSuccessError("completion payload is not an object")

    candidates = payload.get("candidates")
    if not candidates:
        feedback = payload.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if reason:
            raise ProviderReportedFailure(f"prompt blocked: {reason}")
        raise MalformedSuccessError("completion has no candidates")

    first = candidates[0] if isinstance(candidates, list) else None
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        raise MalformedSuccessError("completion candidate has no parts")

    text = parts[0].get("text")
    if not isinstance(text, str) or not text.strip():
        raise MalformedSuccessError("completion text is empty")
    return text


class GeminiSummaryClient(SummaryProvider):
    provider_name = "gemini"

    def __init__(
        self,
        *,
        api_key: str | None,
        api_base: str,
        model: str,
        timeout_seconds: float,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip() or None
        self._api_base = api_base.rstrip("/")
        self._model = model
        self._timeout = timeout_seconds
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    async def generate(self, prompt: str) -> str:
        self.ensure_configured()
        response = await send_provider_request(
            "POST",
            f"{self._api_base}/models/{self._model}:generateContent",
            headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
            timeout=self._timeout,
            http_client=self._http_client,
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        if response.status_code >= 400:
            raise ProviderReportedFailure(f"completion rejected with HTTP {response.status_code}")

        text = extract_candidate_text(decode_json_body(response))
        logger.info("gemini.completed model=%s chars=%s", self._model, len(text))
        return text


__all__ = ["GeminiSummaryClient", "extract_candidate_text"]
