"""Gemini summary adapter tests."""

from __future__ import annotations

import json
import unittest

import httpx

from app.adapters.providers.gemini import GeminiSummaryClient
from app.errors import (
    MalformedSuccessError,
    ProviderConfigurationError,
    ProviderReportedFailure,
    TransientProviderError,
)

_API_BASE = "https://gemini.test/v1beta"


def _completion(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class GeminiSummaryClientTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(200, json=_completion("## Summary"))

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.responder(request)

        self.http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    async def asyncTearDown(self) -> None:
        await self.http_client.aclose()

    def _client(self, api_key: str | None = "g-key") -> GeminiSummaryClient:
        return GeminiSummaryClient(
            api_key=api_key,
            api_base=_API_BASE,
            model="gemini-pro",
            timeout_seconds=5.0,
            http_client=self.http_client,
        )

    async def test_generate_returns_first_candidate_text(self) -> None:
        text = await self._client().generate("Summarize this")

        self.assertEqual(text, "## Summary")
        sent = self.requests[0]
        self.assertEqual(str(sent.url), f"{_API_BASE}/models/gemini-pro:generateContent")
        self.assertEqual(sent.headers["x-goog-api-key"], "g-key")
        self.assertNotIn("g-key", str(sent.url))
        self.assertEqual(json.loads(sent.content), {"contents": [{"parts": [{"text": "Summarize this"}]}]})

    async def test_missing_key_fails_fast_without_network(self) -> None:
        with self.assertRaises(ProviderConfigurationError):
            await self._client(api_key=None).generate("Summarize this")
        self.assertEqual(self.requests, [])

    async def test_empty_completion_is_malformed(self) -> None:
        for payload in (_completion("   "), {"candidates": []}, {"candidates": [{"content": {}}]}):
            with self.subTest(payload=payload):
                self.responder = lambda request, payload=payload: httpx.Response(200, json=payload)
                with self.assertRaises(MalformedSuccessError):
                    await self._client().generate("Summarize this")

    async def test_blocked_prompt_is_reported_failure(self) -> None:
        self.responder = lambda request: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

        with self.assertRaises(ProviderReportedFailure) as context:
            await self._client().generate("Summarize this")
        self.assertIn("SAFETY", context.exception.detail)

    async def test_http_errors_are_classified(self) -> None:
        self.responder = lambda request: httpx.Response(400, json={"error": {"message": "bad"}})
        with self.assertRaises(ProviderReportedFailure):
            await self._client().generate("Summarize this")

        self.responder = lambda request: httpx.Response(502, text="bad gateway")
        with self.assertRaises(TransientProviderError):
            await self._client().generate("Summarize this")


if __name__ == "__main__":
    unittest.main()
