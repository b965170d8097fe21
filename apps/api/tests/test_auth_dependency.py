"""Bearer authentication dependency and verifier adapter tests."""

from __future__ import annotations

import os
import sys
import types
import unittest
from unittest.mock import patch

from fastapi import Request
from fastapi.testclient import TestClient

from app.adapters.auth.base import AuthVerificationError
from app.adapters.auth.firebase_auth import FirebaseTokenVerifier
from app.adapters.auth.mock_auth import MockTokenVerifier
from app.core.config import Settings, get_settings
from app.main import create_app
from app.routes.dependencies import get_session_service, get_token_verifier
from app.services.sessions import SessionService


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "MONUMENTO_AUTH_PROVIDER",
        "MONUMENTO_FIREBASE_PROJECT_ID",
        "MONUMENTO_FIREBASE_AUDIENCE",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["MONUMENTO_AUTH_PROVIDER"] = "mock"
        os.environ["MONUMENTO_FIREBASE_PROJECT_ID"] = "test-project"
        os.environ["MONUMENTO_FIREBASE_AUDIENCE"] = "test-audience"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class AuthApiTests(_SettingsEnvCase):
    def test_missing_authorization_header_returns_401_and_no_side_effect(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.post("/api/v1/sessions", json={"vibe": "Warm", "mode": "Biography", "duration_minutes": 30})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")
        self.assertEqual(app.state.store.session_write_count, 0)

    def test_auth_is_checked_before_payload_validation(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.post(
            "/api/v1/sessions",
            headers={"Authorization": "Bearer not-a-valid-token"},
            json={},
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(app.state.store.session_write_count, 0)

    def test_generation_routes_require_bearer(self) -> None:
        client = TestClient(create_app())

        for path in (
            "/api/v1/sessions/session-1/generate-summary",
            "/api/v1/sessions/session-1/generate-avatars?avatarImageUrl=https://storage.test/a.png",
        ):
            with self.subTest(path=path):
                response = client.post(path)
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()["code"], "UNAUTHORIZED")

    def test_principal_is_attached_to_request_state(self) -> None:
        app = create_app()
        client = TestClient(app)
        observed_user_id: dict[str, str] = {}

        def _override_session_service(request: Request) -> SessionService:
            observed_user_id["value"] = request.state.auth_principal.user_id
            return SessionService(app.state.store)

        app.dependency_overrides[get_session_service] = _override_session_service

        response = client.post(
            "/api/v1/sessions",
            headers={"Authorization": "Bearer test:user-state:guest@example.com"},
            json={"vibe": "Warm", "mode": "Biography", "duration_minutes": 30},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(observed_user_id.get("value"), "user-state")
        self.assertEqual(app.state.store.sessions[response.json()["id"]].owner_id, "user-state")

    def test_mock_token_verifier_normalizes_principal(self) -> None:
        principal = MockTokenVerifier().verify_token("test:user-42: host@example.com ")

        self.assertEqual(principal.user_id, "user-42")
        self.assertEqual(principal.email, "host@example.com")

    def test_mock_token_verifier_rejects_invalid_token(self) -> None:
        for token in ("user-42", "test:", "test: :x"):
            with self.subTest(token=token):
                with self.assertRaises(AuthVerificationError):
                    MockTokenVerifier().verify_token(token)

    def test_dependency_selects_firebase_verifier(self) -> None:
        settings = Settings(
            auth_provider="firebase",
            firebase_project_id="test-project",
            firebase_audience="test-audience",
        )

        verifier = get_token_verifier(settings)

        self.assertIsInstance(verifier, FirebaseTokenVerifier)
        self.assertEqual(verifier.provider_name, "firebase")


class FirebaseVerifierUnitTests(unittest.TestCase):
    @staticmethod
    def _fake_firebase_modules(decoded_token: dict[str, str]) -> dict[str, types.ModuleType]:
        fake_admin = types.ModuleType("firebase_admin")
        fake_auth = types.ModuleType("firebase_admin.auth")

        fake_admin._apps = []

        def initialize_app(options: dict | None = None) -> object:
            app_handle = object()
            fake_admin._apps.append(app_handle)
            return app_handle

        def verify_id_token(token: str, check_revoked: bool = True) -> dict[str, str]:
            if token != "valid-jwt":
                raise ValueError("invalid token")
            if not check_revoked:
                raise ValueError("must validate revoked tokens")
            return decoded_token

        fake_admin.initialize_app = initialize_app
        fake_admin.auth = fake_auth
        fake_auth.verify_id_token = verify_id_token

        return {
            "firebase_admin": fake_admin,
            "firebase_admin.auth": fake_auth,
        }

    def test_firebase_verifier_normalizes_principal(self) -> None:
        fake_modules = self._fake_firebase_modules(
            {
                "uid": "firebase-user-1",
                "aud": "aud-a",
                "email": "storyteller@example.com",
            }
        )

        with patch.dict(sys.modules, fake_modules):
            verifier = FirebaseTokenVerifier(project_id="project-a", audience="aud-a")
            principal = verifier.verify_token("valid-jwt")

        self.assertEqual(principal.user_id, "firebase-user-1")
        self.assertEqual(principal.email, "storyteller@example.com")

    def test_firebase_verifier_rejects_invalid_token_and_audience(self) -> None:
        fake_modules = self._fake_firebase_modules({"uid": "firebase-user-1", "aud": "unexpected-aud"})

        with patch.dict(sys.modules, fake_modules):
            verifier = FirebaseTokenVerifier(project_id="project-a", audience="aud-a")
            with self.assertRaises(AuthVerificationError):
                verifier.verify_token("valid-jwt")
            with self.assertRaises(AuthVerificationError):
                verifier.verify_token("forged-jwt")


if __name__ == "__main__":
    unittest.main()
