"""Transcript and summary prompt assembly tests."""

from __future__ import annotations

import unittest

from app.domain.animation import is_host_role
from app.domain.transcript import (
    GUEST_LABEL,
    HOST_LABEL,
    SessionDescriptor,
    TranscriptLine,
    build_summary_prompt,
    build_transcript,
    speaker_label,
)

_DESCRIPTOR = SessionDescriptor(vibe="curious", mode="deep-dive", duration_minutes=25)


class TranscriptTests(unittest.TestCase):
    def test_roles_map_to_fixed_labels_with_guest_default(self) -> None:
        self.assertEqual(speaker_label("ai"), HOST_LABEL)
        self.assertEqual(speaker_label("user"), GUEST_LABEL)
        self.assertEqual(speaker_label("narrator"), GUEST_LABEL)
        self.assertEqual(speaker_label(None), GUEST_LABEL)

    def test_lines_follow_timestamp_order_not_input_order(self) -> None:
        lines = [
            TranscriptLine(role="user", text="Thanks for having me.", timestamp=2000),
            TranscriptLine(role="ai", text="Welcome to the show.", timestamp=1000),
        ]

        self.assertEqual(
            build_transcript(lines),
            "Host: Welcome to the show.\n\nGuest: Thanks for having me.",
        )

    def test_equal_timestamps_keep_given_order(self) -> None:
        lines = [
            TranscriptLine(role="ai", text="first", timestamp=5),
            TranscriptLine(role="user", text="second", timestamp=5),
        ]
        self.assertEqual(build_transcript(lines), "Host: first\n\nGuest: second")

    def test_prompt_is_byte_identical_across_calls(self) -> None:
        lines = [
            TranscriptLine(role="ai", text="What got you started?", timestamp=10),
            TranscriptLine(role="user", text="A broken radio.", timestamp=20),
        ]

        first = build_summary_prompt(_DESCRIPTOR, lines)
        second = build_summary_prompt(_DESCRIPTOR, list(lines))

        self.assertEqual(first.encode("utf-8"), second.encode("utf-8"))

    def test_prompt_carries_session_descriptors_and_transcript(self) -> None:
        prompt = build_summary_prompt(
            _DESCRIPTOR,
            [TranscriptLine(role="ai", text="Hello there.", timestamp=1)],
        )

        self.assertIn("- Host Style: curious", prompt)
        self.assertIn("- Interview Mode: deep-dive", prompt)
        self.assertIn("- Duration: 25 minutes", prompt)
        self.assertIn("**Transcript:**\nHost: Hello there.", prompt)

    def test_host_label_and_animation_eligibility_agree_on_role(self) -> None:
        for role in ("ai", "AI", " Ai ", "user", "USER", "narrator", "", None):
            with self.subTest(role=role):
                self.assertEqual(speaker_label(role) == "Host", is_host_role(role))


if __name__ == "__main__":
    unittest.main()
