"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any
from urllib.parse import urlsplit


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_log_reference(url: str | None) -> str:
    """Reduce a media reference to scheme and host so signed query strings never reach logs."""
    text = (url or "").strip()
    if not text:
        return "missing"
    if text.startswith("data:"):
        return "data-uri"

    parts = urlsplit(text)
    if not parts.scheme or not parts.netloc:
        return "unparsed"
    return f"{parts.scheme}://{parts.netloc}"
