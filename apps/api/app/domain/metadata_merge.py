"""Non-destructive metadata merge."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def merge_metadata(existing: Mapping[str, Any] | None, key: str, value: Any) -> dict[str, Any]:
    """Return a new mapping with ``key`` set to ``value`` and every other key preserved.

    ``existing`` is never mutated and ``None`` is treated as an empty mapping.
    Applying the same key/value twice yields the same result as applying it once.
    """
    merged = dict(existing) if existing is not None else {}
    merged[key] = value
    return merged


def merge_metadata_updates(existing: Mapping[str, Any] | None, updates: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(existing) if existing is not None else {}
    for key, value in updates.items():
        merged = merge_metadata(merged, key, value)
    return merged
