"""Generation provider adapters."""

from .base import AnimationProvider, SummaryProvider
from .gemini import GeminiSummaryClient
from .replicate import ReplicateAnimationClient

__all__ = [
    "AnimationProvider",
    "SummaryProvider",
    "GeminiSummaryClient",
    "ReplicateAnimationClient",
]
