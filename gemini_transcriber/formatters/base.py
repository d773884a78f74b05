"""Abstract base formatter and output container.

WHY: Exports consume the same Transcript (segments + aliases) and
produce file content. A common interface lets the web API and the CLI
save or serve any format without knowing its details.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput bundles a file suffix with its content and MIME
type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``suffix`` is appended to the source filename stem,
  e.g. ``"_transcript.txt"`` → ``"interview_transcript.txt"``
- Formatters are pure: no I/O, no network, no mutation of the transcript
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from gemini_transcriber.core.transcript import Transcript


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/plain"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all export formatters.

    To add a new export format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain Text'."""

    @abstractmethod
    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        """Convert a transcript into one or more output files."""
