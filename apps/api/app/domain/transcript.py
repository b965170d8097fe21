"""Deterministic transcript and summary prompt assembly."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from app.domain.animation import HOST_ROLE, normalize_role

HOST_LABEL = "Host"
GUEST_LABEL = "Guest"

_ROLE_LABELS: dict[str, str] = {
    HOST_ROLE: HOST_LABEL,
    "user": GUEST_LABEL,
}

_SUMMARY_PROMPT_TEMPLATE = """Please analyze this podcast interview transcript and provide a comprehensive summary.

**Interview Details:**
- Host Style: {vibe}
- Interview Mode: {mode}
- Duration: {duration_minutes} minutes

**Transcript:**
{transcript}

**Please provide:**

1. **Executive Summary** (2-3 sentences): The main theme and purpose of the conversation

2. **Key Topics Discussed** (bullet points): 3-5 major topics that were covered

3. **Notable Quotes** (if any): 1-2 memorable or insightful quotes from the conversation

4. **Insights & Takeaways** (bullet points): 2-3 key insights or lessons from the discussion

5. **Emotional Tone**: Brief description of the overall mood and energy of the conversation

Format the summary in a clear, well-structured way using markdown.
"""


@dataclass(frozen=True, slots=True)
class TranscriptLine:
    role: str
    text: str
    timestamp: int


@dataclass(frozen=True, slots=True)
class SessionDescriptor:
    vibe: str
    mode: str
    duration_minutes: int


def speaker_label(role: str | None) -> str:
    """Map a message role to its transcript label; unknown roles read as the guest."""
    return _ROLE_LABELS.get(normalize_role(role), GUEST_LABEL)


def build_transcript(lines: Iterable[TranscriptLine]) -> str:
    # sorted() is stable, so equal timestamps keep their given order.
    ordered = sorted(lines, key=lambda line: line.timestamp)
    return "\n\n".join(f"{speaker_label(line.role)}: {line.text}" for line in ordered)


def build_summary_prompt(descriptor: SessionDescriptor, lines: Iterable[TranscriptLine]) -> str:
    return _SUMMARY_PROMPT_TEMPLATE.format(
        vibe=descriptor.vibe,
        mode=descriptor.mode,
        duration_minutes=descriptor.duration_minutes,
        transcript=build_transcript(lines),
    )
