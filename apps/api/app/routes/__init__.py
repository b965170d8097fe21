"""Route modules."""

from .generation import router as generation_router
from .sessions import router as sessions_router

__all__ = ["generation_router", "sessions_router"]
