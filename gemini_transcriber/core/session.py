"""Transcript session state machine and transcription orchestration.

WHY: A session moves through a small lifecycle — no file, file chosen,
transcribing, done or failed — and the user may rename speakers once a
transcript exists. Every front-end (web page, CLI) needs the same rules
for which actions are allowed when, so they live here, not in the routes.

HOW: Three pieces work together:
  SessionStatus      — enum of lifecycle states
  TranscriptSession  — dataclass holding file, segments, aliases, status
  run_transcription  — coroutine that awaits the transcriber and settles
                       the session (complete / fail / finish)

  idle ──select_file──▶ file_selected ──begin──▶ processing ──▶ complete
    ▲                        ▲                        │        └▶ failed
    └──── select_file (from any state) ───────────────┘

RULES:
- select_file() always clears segments, aliases and error
- begin_transcription() is a no-op (returns None) without a file or while processing
- Each begin_transcription() hands out a ticket tagged with a generation;
  results for a stale generation (file changed meanwhile) are discarded
- complete() re-derives the alias map as identity over the new speakers
- fail() stores the fixed user-facing message; segments stay empty
- finish() always runs after the call settles, so processing never sticks
- rename_speaker() changes exactly one existing alias and never the status
"""

from __future__ import annotations

import enum
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from gemini_transcriber.core.speakers import (
    identity_aliases,
    resolve_speaker,
    unique_speakers,
)
from gemini_transcriber.core.transcript import Transcript, TranscriptSegment

logger = logging.getLogger(__name__)

TRANSCRIPTION_FAILED_MESSAGE = (
    "Failed to transcribe audio. Please try another file or check the API key."
)

Transcriber = Callable[[bytes, str], Awaitable[Sequence[TranscriptSegment]]]
"""Async callable (audio bytes, mime type) → segments."""


class SessionStatus(str, enum.Enum):
    """Lifecycle states of a transcript session.

    HOW: Inherits from str so values serialize cleanly to JSON.
    """

    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


class UnknownSpeakerError(KeyError):
    """Raised when renaming a speaker label that is not in the alias map."""


@dataclass(frozen=True)
class AudioFile:
    """An uploaded audio file held in memory.

    RULES:
    - name: original file name (used for display and the export name)
    - content: raw bytes, may be empty (rejected later by the client)
    - mime_type: declared media type, not re-validated
    """

    name: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class TranscriptionTicket:
    """Proof that a transcription was started for a particular file selection."""

    generation: int
    file: AudioFile


@dataclass
class TranscriptSession:
    """State of one user's transcription session.

    WHY: The page, the API and the CLI all read and mutate the same few
    values; a single owned object with explicit transitions keeps the
    invariants in one place.

    RULES:
    - segments is a tuple and is only ever replaced as a whole
    - aliases keys == unique speakers of segments after complete()
    - error is only set in FAILED
    - generation increments on every file selection
    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: SessionStatus = SessionStatus.IDLE
    file: Optional[AudioFile] = None
    segments: Tuple[TranscriptSegment, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    generation: int = 0
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_processing(self) -> bool:
        return self.status == SessionStatus.PROCESSING

    @property
    def can_transcribe(self) -> bool:
        """True when a transcribe trigger would start a request."""
        return self.file is not None and not self.is_processing

    @property
    def speakers(self) -> List[str]:
        return unique_speakers(self.segments)

    def resolve_speaker(self, label: str) -> str:
        return resolve_speaker(label, self.aliases)

    def transcript(self) -> Transcript:
        """Bundle segments, aliases, and the file name for formatters."""
        return Transcript(
            segments=self.segments,
            aliases=dict(self.aliases),
            source_filename=self.file.name if self.file else "",
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select_file(self, file: Optional[AudioFile]) -> None:
        """Choose a new file (or clear it), resetting all transcript state.

        A call that is still in flight keeps the session in PROCESSING
        until it settles; its result is then discarded because the
        generation has moved on.
        """
        self.generation += 1
        self.file = file
        self.segments = ()
        self.aliases = {}
        self.error = None
        if not self.is_processing:
            self.status = SessionStatus.FILE_SELECTED if file else SessionStatus.IDLE
        self._touch()
        logger.info(
            "Session %s: selected %s",
            self.id,
            "file {!r} ({} bytes)".format(file.name, file.size) if file else "no file",
        )

    def begin_transcription(self) -> Optional[TranscriptionTicket]:
        """Enter PROCESSING and return a ticket, or None if not allowed."""
        if not self.can_transcribe:
            logger.info(
                "Session %s: transcribe ignored (status=%s, file=%s)",
                self.id,
                self.status.value,
                "yes" if self.file else "no",
            )
            return None

        self.status = SessionStatus.PROCESSING
        self.error = None
        self.segments = ()
        self.aliases = {}
        self._touch()
        return TranscriptionTicket(generation=self.generation, file=self.file)

    def complete(
        self,
        ticket: TranscriptionTicket,
        segments: Sequence[TranscriptSegment],
    ) -> bool:
        """Store a successful result. Returns False if the ticket is stale."""
        if not self._is_current(ticket):
            logger.info("Session %s: discarding result for a replaced file", self.id)
            return False
        self.segments = tuple(segments)
        self.aliases = identity_aliases(self.segments)
        self.error = None
        self.status = SessionStatus.COMPLETE
        self._touch()
        return True

    def fail(self, ticket: TranscriptionTicket, message: str) -> bool:
        """Store a failure. Returns False if the ticket is stale."""
        if not self._is_current(ticket):
            return False
        self.segments = ()
        self.aliases = {}
        self.error = message
        self.status = SessionStatus.FAILED
        self._touch()
        return True

    def finish(self, ticket: TranscriptionTicket) -> None:
        """Leave PROCESSING if the call settled without complete() or fail().

        Covers stale tickets and calls interrupted by cancellation. At most
        one ticket is outstanding, so any remaining PROCESSING belongs to it.
        """
        if not self.is_processing:
            return
        self.status = SessionStatus.FILE_SELECTED if self.file else SessionStatus.IDLE
        self._touch()
        logger.info(
            "Session %s: generation %d settled without a result", self.id, ticket.generation
        )

    def rename_speaker(self, label: str, name: str) -> None:
        """Set the display name for one existing speaker label."""
        if label not in self.aliases:
            raise UnknownSpeakerError(label)
        self.aliases[label] = name
        self._touch()
        logger.info("Session %s: %r is now shown as %r", self.id, label, name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_current(self, ticket: TranscriptionTicket) -> bool:
        return self.is_processing and ticket.generation == self.generation

    def _touch(self) -> None:
        self.updated_at = time.time()


async def run_transcription(
    session: TranscriptSession,
    ticket: TranscriptionTicket,
    transcriber: Transcriber,
) -> None:
    """Await the transcriber for a started ticket and settle the session.

    WHY: Every front-end needs the same failure funnel — one fixed
    message for the user, the real error in the log — and the same
    guarantee that PROCESSING is always left.

    RULES:
    - Any Exception from the transcriber becomes fail(TRANSCRIPTION_FAILED_MESSAGE)
    - The underlying error is logged with its traceback
    - finish() runs in a finally block
    """
    try:
        segments = await transcriber(ticket.file.content, ticket.file.mime_type)
    except Exception:
        logger.exception(
            "Transcription failed for session %s (file %r)", session.id, ticket.file.name
        )
        session.fail(ticket, TRANSCRIPTION_FAILED_MESSAGE)
    else:
        session.complete(ticket, segments)
    finally:
        session.finish(ticket)
