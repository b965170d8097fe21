"""Replicate animation adapter tests."""

from __future__ import annotations

from datetime import UTC, datetime
import json
import unittest

import httpx

from app.adapters.providers.replicate import ReplicateAnimationClient, decode_prediction
from app.domain.animation import (
    GenerationRequest,
    JobFailed,
    JobHandle,
    JobPending,
    JobRunning,
    JobStatus,
    JobSucceeded,
)
from app.errors import (
    MalformedSuccessError,
    ProviderConfigurationError,
    ProviderReportedFailure,
    ProviderValidationError,
    TransientProviderError,
)

_API_BASE = "https://replicate.test/v1"


def _request(audio_url: str = "https://storage.test/audio/1.mp3") -> GenerationRequest:
    return GenerationRequest(
        source_image="https://storage.test/avatar.png",
        audio_url=audio_url,
        session_id="session-1",
        item_id="message-1",
    )


def _handle(prediction_id: str = "pred-1") -> JobHandle:
    return JobHandle(provider_job_id=prediction_id, submitted_at=datetime.now(UTC))


class DecodePredictionTests(unittest.TestCase):
    def test_status_mapping(self) -> None:
        self.assertEqual(decode_prediction({"status": "starting"}), JobPending())
        self.assertEqual(decode_prediction({"status": "processing"}), JobRunning())
        self.assertEqual(
            decode_prediction({"status": "succeeded", "output": "https://cdn.test/v.mp4"}),
            JobSucceeded(output_url="https://cdn.test/v.mp4"),
        )
        self.assertEqual(
            decode_prediction({"status": "succeeded", "output": ["https://cdn.test/a.mp4", "https://cdn.test/b.mp4"]}),
            JobSucceeded(output_url="https://cdn.test/a.mp4"),
        )

    def test_success_without_output_is_kept_empty_for_the_orchestrator(self) -> None:
        for output in (None, "", [], ["  "], {"other": 1}):
            with self.subTest(output=output):
                decoded = decode_prediction({"status": "succeeded", "output": output})
                self.assertIsInstance(decoded, JobSucceeded)
                self.assertIsNone(decoded.output_url)

    def test_failed_and_canceled_are_normal_observations(self) -> None:
        failed = decode_prediction({"status": "failed", "error": "bad audio"})
        self.assertEqual(failed, JobFailed(detail="bad audio"))
        self.assertIs(failed.status, JobStatus.FAILED)

        canceled = decode_prediction({"status": "canceled"})
        self.assertTrue(canceled.canceled)
        self.assertIs(canceled.status, JobStatus.CANCELED)
        self.assertIsNone(canceled.detail)

    def test_unreadable_payloads_are_transient(self) -> None:
        for payload in (None, [], "succeeded", {"id": "pred-1"}):
            with self.subTest(payload=payload):
                with self.assertRaises(TransientProviderError):
                    decode_prediction(payload)

    def test_unknown_status_keeps_polling(self) -> None:
        self.assertEqual(decode_prediction({"status": "warming"}), JobRunning())


class ReplicateAnimationClientTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(201, json={"id": "pred-1", "status": "starting"})

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.responder(request)

        self.http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    async def asyncTearDown(self) -> None:
        await self.http_client.aclose()

    def _client(self, api_token: str | None = "r8-token") -> ReplicateAnimationClient:
        return ReplicateAnimationClient(
            api_token=api_token,
            api_base=_API_BASE,
            model_version="sadtalker-version",
            timeout_seconds=5.0,
            http_client=self.http_client,
        )

    async def test_submit_creates_prediction_and_returns_handle(self) -> None:
        handle = await self._client().submit(_request())

        self.assertEqual(handle.provider_job_id, "pred-1")
        self.assertEqual(len(self.requests), 1)
        sent = self.requests[0]
        self.assertEqual(sent.method, "POST")
        self.assertEqual(str(sent.url), f"{_API_BASE}/predictions")
        self.assertEqual(sent.headers["Authorization"], "Bearer r8-token")
        body = json.loads(sent.content)
        self.assertEqual(body["version"], "sadtalker-version")
        self.assertEqual(body["input"]["source_image"], "https://storage.test/avatar.png")
        self.assertEqual(body["input"]["driven_audio"], "https://storage.test/audio/1.mp3")
        self.assertEqual(body["input"]["result_format"], "mp4")

    async def test_missing_token_fails_fast_without_network(self) -> None:
        client = self._client(api_token="  ")
        self.assertFalse(client.is_configured)

        with self.assertRaises(ProviderConfigurationError):
            await client.submit(_request())
        self.assertEqual(self.requests, [])

    async def test_inline_audio_is_rejected_without_network(self) -> None:
        with self.assertRaises(ProviderValidationError):
            await self._client().submit(_request(audio_url="data:audio/mpeg;base64,AAAA"))
        self.assertEqual(self.requests, [])

    async def test_submit_rejection_and_server_errors_are_classified(self) -> None:
        self.responder = lambda request: httpx.Response(422, json={"detail": "invalid version"})
        with self.assertRaises(ProviderReportedFailure):
            await self._client().submit(_request())

        self.responder = lambda request: httpx.Response(503, text="unavailable")
        with self.assertRaises(TransientProviderError):
            await self._client().submit(_request())

    async def test_submit_without_prediction_id_is_malformed(self) -> None:
        self.responder = lambda request: httpx.Response(201, json={"status": "starting"})
        with self.assertRaises(MalformedSuccessError):
            await self._client().submit(_request())

    async def test_poll_decodes_terminal_failure_without_raising(self) -> None:
        self.responder = lambda request: httpx.Response(200, json={"status": "failed", "error": "bad audio"})

        observation = await self._client().poll(_handle())

        self.assertEqual(observation, JobFailed(detail="bad audio"))
        self.assertEqual(str(self.requests[0].url), f"{_API_BASE}/predictions/pred-1")

    async def test_poll_transport_problems_are_transient(self) -> None:
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        cases = [
            lambda request: httpx.Response(500, text="boom"),
            lambda request: httpx.Response(429, text="slow down"),
            lambda request: httpx.Response(200, text="<html>not json</html>"),
            timeout,
        ]
        for responder in cases:
            with self.subTest(responder=responder):
                self.responder = responder
                with self.assertRaises(TransientProviderError):
                    await self._client().poll(_handle())

    async def test_poll_lookup_rejection_is_a_failed_observation(self) -> None:
        self.responder = lambda request: httpx.Response(404, json={"detail": "Not found"})

        observation = await self._client().poll(_handle())

        self.assertIsInstance(observation, JobFailed)
        self.assertIn("404", observation.detail)


if __name__ == "__main__":
    unittest.main()
