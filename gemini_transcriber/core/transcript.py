"""Transcript dataclasses shared by the client, session, and formatters.

WHY: The model returns a JSON array of camelCase objects. Everything
downstream (session store, renderer, exporter) needs the same typed,
immutable view of those objects, plus a container that bundles them with
the user's speaker aliases for export.

HOW: Two dataclasses:
  TranscriptSegment — one timestamped, speaker-attributed utterance
  Transcript        — segments + alias map + source filename

RULES:
- TranscriptSegment is frozen; a new transcription replaces the whole sequence
- Wire field names are camelCase (startTime, endTime, speaker, text)
- Timecodes are kept exactly as received (HH:MM:SS strings, not parsed)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class TranscriptSegment:
    """One timestamped, speaker-attributed span of transcribed speech.

    RULES:
    - start_time / end_time: "HH:MM:SS" timecodes as produced by the model
    - speaker: opaque model-assigned label, e.g. "Speaker 1"
    - text: the transcribed utterance
    """

    start_time: str
    end_time: str
    speaker: str
    text: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TranscriptSegment:
        """Parse a segment from a model response object.

        All four camelCase keys are required; a missing key raises KeyError.
        """
        return cls(
            start_time=data["startTime"],
            end_time=data["endTime"],
            speaker=data["speaker"],
            text=data["text"],
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "speaker": self.speaker,
            "text": self.text,
        }


@dataclass
class Transcript:
    """A segment sequence together with the aliases used to display it.

    WHY: Formatters need both the original segments and the user's
    renames. Bundling them keeps the formatter interface to one argument.

    RULES:
    - segments: original model order
    - aliases: original speaker label → display name
    - source_filename: uploaded file name, used for the export file name
    """

    segments: Tuple[TranscriptSegment, ...]
    aliases: Dict[str, str] = field(default_factory=dict)
    source_filename: str = ""
