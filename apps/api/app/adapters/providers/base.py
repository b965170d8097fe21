"""Generation provider interfaces."""

from abc import ABC, abstractmethod

from app.domain.animation import GenerationRequest, JobHandle, ProviderResponse
from app.errors import ProviderConfigurationError


class AnimationProvider(ABC):
    """Provider-neutral submit/poll interface for talking-avatar video jobs."""

    provider_name: str = "animation"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present."""

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise ProviderConfigurationError(f"{self.provider_name} credentials are not configured")

    @abstractmethod
    async def submit(self, request: GenerationRequest) -> JobHandle:
        """Start a remote job. Raises a ``GenerationError`` subclass on failure."""

    @abstractmethod
    async def poll(self, handle: JobHandle) -> ProviderResponse:
        """Observe a remote job once.

        Provider-reported failures come back as ``JobFailed``; only transport
        problems raise (``TransientProviderError``).
        """


class SummaryProvider(ABC):
    """Provider-neutral single-shot text completion interface."""

    provider_name: str = "summary"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present."""

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise ProviderConfigurationError(f"{self.provider_name} credentials are not configured")

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return non-empty completion text for ``prompt``."""


__all__ = ["AnimationProvider", "SummaryProvider"]
