"""Plain text export: one timestamped, speaker-labeled line per segment.

WHY: The downloadable transcript is meant for pasting into notes, mail,
or documents. A line per segment with the time range and the display
name keeps it readable and still traceable back to the audio.

HOW: For each segment in original order, emits
``[<start> - <end>] <speaker>: <text>`` where the speaker is the user's
alias for the label (raw label if none). Lines are joined with "\\n".

RULES:
- Segment order is never changed
- Alias lookup falls back to the raw speaker label
- No trailing newline
- Export filename: "<source stem>_transcript.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Iterable, List, Mapping

from gemini_transcriber.config import EXPORT_FALLBACK_STEM, EXPORT_SUFFIX
from gemini_transcriber.core.speakers import resolve_speaker
from gemini_transcriber.core.transcript import Transcript, TranscriptSegment
from gemini_transcriber.formatters.base import BaseFormatter, FormatterOutput


def format_segment_line(segment: TranscriptSegment, aliases: Mapping[str, str]) -> str:
    return "[{start} - {end}] {speaker}: {text}".format(
        start=segment.start_time,
        end=segment.end_time,
        speaker=resolve_speaker(segment.speaker, aliases),
        text=segment.text,
    )


def format_transcript_text(
    segments: Iterable[TranscriptSegment],
    aliases: Mapping[str, str],
) -> str:
    """Render segments as export text using the current aliases."""
    return "\n".join(format_segment_line(segment, aliases) for segment in segments)


def export_filename(source_filename: str) -> str:
    """Build the download name from the uploaded file's name.

    Directory parts (either separator style) are dropped; the last
    extension is removed.

    >>> export_filename("meeting.mp3")
    'meeting_transcript.txt'
    """
    base = PurePath(source_filename.replace("\\", "/")).name if source_filename else ""
    stem = PurePath(base).stem if base else ""
    return "{}{}".format(stem or EXPORT_FALLBACK_STEM, EXPORT_SUFFIX)


class PlainTextFormatter(BaseFormatter):
    """Formatter for the downloadable plain text transcript."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=EXPORT_SUFFIX,
                content=format_transcript_text(transcript.segments, transcript.aliases),
                media_type="text/plain",
            )
        ]
