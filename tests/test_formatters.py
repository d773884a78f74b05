"""Tests for the plain text export formatter.

WHY: The export is the artifact users take away. Its line format and
file name are exact contracts, so these tests pin them down character
for character.
"""

from __future__ import annotations

import pytest

from gemini_transcriber.core.transcript import Transcript, TranscriptSegment
from gemini_transcriber.formatters import DEFAULT_FORMAT, FORMATTERS
from gemini_transcriber.formatters.plain_text import (
    PlainTextFormatter,
    export_filename,
    format_transcript_text,
)


class TestFormatTranscriptText:

    def test_exact_output_with_partial_aliases(self, sample_segments):
        text = format_transcript_text(sample_segments, {"Speaker 1": "Alice"})
        assert text == (
            "[00:00:00 - 00:00:05] Alice: Hi\n"
            "[00:00:05 - 00:00:09] Speaker 2: Hello"
        )

    def test_identity_aliases(self, sample_segments):
        text = format_transcript_text(
            sample_segments, {"Speaker 1": "Speaker 1", "Speaker 2": "Speaker 2"}
        )
        assert text.splitlines()[0] == "[00:00:00 - 00:00:05] Speaker 1: Hi"

    def test_empty_transcript(self):
        assert format_transcript_text([], {}) == ""

    def test_preserves_order_and_repeats(self):
        segments = [
            TranscriptSegment("00:00:10", "00:00:12", "Speaker 2", "b"),
            TranscriptSegment("00:00:00", "00:00:02", "Speaker 1", "a"),
            TranscriptSegment("00:00:12", "00:00:15", "Speaker 2", "c"),
        ]
        lines = format_transcript_text(segments, {"Speaker 2": "Bob"}).split("\n")
        assert lines == [
            "[00:00:10 - 00:00:12] Bob: b",
            "[00:00:00 - 00:00:02] Speaker 1: a",
            "[00:00:12 - 00:00:15] Bob: c",
        ]

    def test_no_trailing_newline(self, sample_segments):
        assert not format_transcript_text(sample_segments, {}).endswith("\n")


class TestExportFilename:

    @pytest.mark.parametrize("source, expected", [
        ("meeting.mp3", "meeting_transcript.txt"),
        # Only the last extension is dropped, unlike a split on the first dot
        ("team.sync.m4a", "team.sync_transcript.txt"),
        ("noext", "noext_transcript.txt"),
        ("dir/sub/clip.wav", "clip_transcript.txt"),
        ("C:\\Users\\me\\clip.wav", "clip_transcript.txt"),
        ("", "transcript_transcript.txt"),
    ])
    def test_names(self, source, expected):
        assert export_filename(source) == expected


class TestPlainTextFormatter:

    def test_registered_as_default(self):
        assert FORMATTERS[DEFAULT_FORMAT] is PlainTextFormatter

    def test_single_output(self, sample_segments):
        transcript = Transcript(
            segments=tuple(sample_segments),
            aliases={"Speaker 1": "Alice", "Speaker 2": "Speaker 2"},
            source_filename="meeting.mp3",
        )
        outputs = PlainTextFormatter().format(transcript)
        assert len(outputs) == 1
        assert outputs[0].suffix == "_transcript.txt"
        assert outputs[0].media_type == "text/plain"
        assert outputs[0].content.startswith("[00:00:00 - 00:00:05] Alice: Hi")

    def test_formatter_does_not_mutate_transcript(self, completed_session):
        transcript = completed_session.transcript()
        before = (transcript.segments, dict(transcript.aliases))
        PlainTextFormatter().format(transcript)
        assert (transcript.segments, transcript.aliases) == before

    def test_name(self):
        assert PlainTextFormatter().name == "Plain Text"
