"""Bearer token verification interface."""

from abc import ABC, abstractmethod

from app.schemas.auth import AuthPrincipal


class AuthVerificationError(Exception):
    """The token was rejected; the message is safe to return to the caller."""


class TokenVerifier(ABC):
    """Turns a bearer token into the principal that owns sessions."""

    provider_name: str = "unknown"

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Return the owning principal or raise ``AuthVerificationError``."""


__all__ = ["AuthVerificationError", "TokenVerifier"]
