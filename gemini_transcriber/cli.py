"""Command-line interface for the Gemini Audio Transcriber.

WHY: Not every transcript starts in a browser. The CLI runs the same
session flow from a terminal — select file, transcribe, rename speakers,
export — so it can be scripted or run over SSH.

HOW: argparse collects the input file, optional speaker renames
(--speaker "Speaker 1=Alice"), and output options. The file is loaded
into a TranscriptSession and run_transcription() is driven with
asyncio.run(). Renames go through the same editor commit rule as the
web page. Status messages go to stderr; the transcript is saved next to
the source (or to --output-dir), or printed with --stdout.

RULES:
- Positional argument: input audio file path
- Media type: --mime-type, else guessed from the extension, else octet-stream
- --speaker is repeatable; unknown labels are an error (exit 1)
- Output naming: {stem}_transcript.txt, numeric suffix on conflict
  (_transcript-2.txt)
- Status output goes to stderr (not stdout)
- Any failure prints "Error: ..." and exits with status 1
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from gemini_transcriber.api.client import GeminiTranscriptionClient
from gemini_transcriber.config import DEFAULT_MIME_TYPE, EXPORT_SUFFIX, LOG_LEVEL
from gemini_transcriber.core.editor import apply_rename
from gemini_transcriber.core.session import (
    AudioFile,
    SessionStatus,
    TranscriptSession,
    run_transcription,
)
from gemini_transcriber.formatters.plain_text import PlainTextFormatter, export_filename


class CLIError(Exception):
    """A user-facing CLI failure; main() prints it and exits 1."""


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _parse_speaker_option(value: str) -> Tuple[str, str]:
    """Split a LABEL=NAME option value.

    RULES:
    - Splits on the first "=" so names may contain "="
    - The label is trimmed; the name is passed through (the editor trims it)
    """
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            "expected LABEL=NAME (e.g. 'Speaker 1=Alice'), got {!r}".format(value)
        )
    label, name = value.split("=", 1)
    label = label.strip()
    if not label:
        raise argparse.ArgumentTypeError("speaker label must not be empty")
    return label, name


def _guess_mime_type(path: Path, explicit: Optional[str]) -> str:
    if explicit:
        return explicit
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MIME_TYPE


def _resolve_output_path(source_name: str, output_dir: Path) -> Path:
    """Resolve the export path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}_transcript.txt
    - Conflict: {stem}_transcript-2.txt, -3, ... until free
    """
    base_path = output_dir / export_filename(source_name)
    if not base_path.exists():
        return base_path

    stem = base_path.name[: -len(".txt")]
    counter = 2
    while True:
        candidate = output_dir / "{}-{}.txt".format(stem, counter)
        if not candidate.exists():
            return candidate
        counter += 1


def _apply_speaker_renames(
    session: TranscriptSession,
    renames: List[Tuple[str, str]],
) -> None:
    for label, name in renames:
        if label not in session.aliases:
            known = ", ".join(session.speakers) or "none"
            raise CLIError(
                "Unknown speaker {!r}. Speakers in this transcript: {}".format(label, known)
            )
        committed = apply_rename(
            label, session.resolve_speaker(label), name, session.rename_speaker
        )
        if committed is None:
            _status("  {}: name unchanged".format(label))
        else:
            _status("  {} → {}".format(label, committed))


async def _run_pipeline(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file)
    if not input_path.is_file():
        raise CLIError("File not found: {}".format(input_path))

    audio = AudioFile(
        name=input_path.name,
        content=input_path.read_bytes(),
        mime_type=_guess_mime_type(input_path, args.mime_type),
    )

    session = TranscriptSession()
    session.select_file(audio)
    ticket = session.begin_transcription()
    if ticket is None:
        raise CLIError("Nothing to transcribe.")

    async def transcriber(content: bytes, mime_type: str):
        async with GeminiTranscriptionClient(model=args.model) as client:
            return await client.transcribe(content, mime_type)

    _status("Transcribing {} ({:,} bytes, {})...".format(audio.name, audio.size, audio.mime_type))
    await run_transcription(session, ticket, transcriber)

    if session.status != SessionStatus.COMPLETE:
        raise CLIError(session.error or "Transcription did not complete.")

    _status(
        "Transcription complete: {} segments, speakers: {}".format(
            len(session.segments), ", ".join(session.speakers) or "none"
        )
    )

    if args.speaker:
        _status("Renaming speakers:")
        _apply_speaker_renames(session, args.speaker)

    output = PlainTextFormatter().format(session.transcript())[0]

    if args.stdout:
        print(output.content)
        return

    output_dir = Path(args.output_dir) if args.output_dir else input_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)
    path = _resolve_output_path(audio.name, output_dir)
    path.write_text(output.content, encoding="utf-8")
    _status("Saved: {}".format(path))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser (separate from main() for testability)."""
    parser = argparse.ArgumentParser(
        prog="gemini-transcriber",
        description="Transcribe an audio file with Google Gemini into "
                    "speaker-labeled, timestamped plain text.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the audio file to transcribe.",
    )

    parser.add_argument(
        "--mime-type",
        default=None,
        help="Media type of the audio (default: guessed from the file extension).",
    )

    parser.add_argument(
        "--speaker",
        action="append",
        type=_parse_speaker_option,
        default=None,
        metavar="LABEL=NAME",
        help="Rename a speaker in the output, e.g. 'Speaker 1=Alice'. "
             "Can be specified multiple times.",
    )

    parser.add_argument(
        "--model",
        default=None,
        help="Gemini model name (default: GEMINI_MODEL from the environment).",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save the transcript (default: same as input file). "
             "Files are named <stem>{}.".format(EXPORT_SUFFIX),
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the transcript to stdout instead of saving a file.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the gemini-transcriber console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        asyncio.run(_run_pipeline(args))
    except CLIError as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
