"""Tests for the command-line interface.

HOW: GeminiTranscriptionClient is replaced in the cli module by a small
fake async context manager, so main() runs the full pipeline (file
load, session, renames, export) without a network call.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from unittest.mock import patch

import pytest

from gemini_transcriber.api.client import ResponseFormatError
from gemini_transcriber.cli import (
    _guess_mime_type,
    _parse_speaker_option,
    _resolve_output_path,
    build_parser,
    main,
)
from gemini_transcriber.core.session import TRANSCRIPTION_FAILED_MESSAGE


def _fake_client_class(result=None, error=None, calls=None):
    class FakeClient:
        def __init__(self, api_key=None, model=None):
            self.model = model

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        async def transcribe(self, content, mime_type):
            if calls is not None:
                calls.append((content, mime_type, self.model))
            if error is not None:
                raise error
            return result

    return FakeClient


@pytest.fixture
def audio_path(tmp_path) -> Path:
    path = tmp_path / "meeting.mp3"
    path.write_bytes(b"fake audio data")
    return path


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["clip.wav"])
        assert args.input_file == "clip.wav"
        assert args.speaker is None
        assert args.stdout is False
        assert args.output_dir is None

    def test_repeatable_speaker(self):
        args = build_parser().parse_args([
            "clip.wav", "--speaker", "Speaker 1=Alice", "--speaker", "Speaker 2=Bob",
        ])
        assert args.speaker == [("Speaker 1", "Alice"), ("Speaker 2", "Bob")]

    def test_bad_speaker_option_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["clip.wav", "--speaker", "Alice"])


class TestParseSpeakerOption:

    def test_splits_on_first_equals(self):
        assert _parse_speaker_option("Speaker 1=A=B") == ("Speaker 1", "A=B")

    def test_label_is_trimmed(self):
        assert _parse_speaker_option(" Speaker 1 = Alice") == ("Speaker 1", " Alice")

    @pytest.mark.parametrize("value", ["Alice", "=Alice", "  =Alice"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_speaker_option(value)


class TestHelpers:

    def test_explicit_mime_type_wins(self):
        assert _guess_mime_type(Path("a.mp3"), "audio/ogg") == "audio/ogg"

    def test_guessed_from_extension(self):
        assert _guess_mime_type(Path("a.wav"), None) in ("audio/wav", "audio/x-wav")

    def test_unknown_extension_falls_back(self):
        assert _guess_mime_type(Path("a.zzz-unknown"), None) == "application/octet-stream"

    def test_output_path_without_conflict(self, tmp_path):
        assert _resolve_output_path("meeting.mp3", tmp_path) == tmp_path / "meeting_transcript.txt"

    def test_output_path_conflicts_get_numeric_suffix(self, tmp_path):
        (tmp_path / "meeting_transcript.txt").write_text("x")
        (tmp_path / "meeting_transcript-2.txt").write_text("x")
        assert _resolve_output_path("meeting.mp3", tmp_path) == tmp_path / "meeting_transcript-3.txt"


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:

    def test_saves_transcript_next_to_input(self, audio_path, sample_segments, capsys):
        calls = []
        fake = _fake_client_class(result=sample_segments, calls=calls)
        with patch("gemini_transcriber.cli.GeminiTranscriptionClient", fake):
            main([str(audio_path), "--speaker", "Speaker 1=Alice"])

        output = audio_path.parent / "meeting_transcript.txt"
        assert output.read_text(encoding="utf-8") == (
            "[00:00:00 - 00:00:05] Alice: Hi\n"
            "[00:00:05 - 00:00:09] Speaker 2: Hello"
        )
        assert calls == [(b"fake audio data", "audio/mpeg", None)]
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Saved:" in captured.err

    def test_stdout_mode(self, audio_path, sample_segments, capsys):
        fake = _fake_client_class(result=sample_segments)
        with patch("gemini_transcriber.cli.GeminiTranscriptionClient", fake):
            main([str(audio_path), "--stdout"])

        captured = capsys.readouterr()
        assert captured.out.startswith("[00:00:00 - 00:00:05] Speaker 1: Hi")
        assert not (audio_path.parent / "meeting_transcript.txt").exists()

    def test_output_dir_and_model(self, audio_path, sample_segments, tmp_path):
        calls = []
        fake = _fake_client_class(result=sample_segments, calls=calls)
        out_dir = tmp_path / "out"
        with patch("gemini_transcriber.cli.GeminiTranscriptionClient", fake):
            main([str(audio_path), "--output-dir", str(out_dir), "--model", "gemini-test",
                  "--mime-type", "audio/ogg"])

        assert (out_dir / "meeting_transcript.txt").exists()
        assert calls == [(b"fake audio data", "audio/ogg", "gemini-test")]

    def test_failure_exits_with_fixed_message(self, audio_path, capsys):
        fake = _fake_client_class(error=ResponseFormatError("bad json"))
        with patch("gemini_transcriber.cli.GeminiTranscriptionClient", fake):
            with pytest.raises(SystemExit) as excinfo:
                main([str(audio_path)])

        assert excinfo.value.code == 1
        assert TRANSCRIPTION_FAILED_MESSAGE in capsys.readouterr().err
        assert not (audio_path.parent / "meeting_transcript.txt").exists()

    def test_missing_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "nope.mp3")])
        assert excinfo.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_unknown_speaker_exits(self, audio_path, sample_segments, capsys):
        fake = _fake_client_class(result=sample_segments)
        with patch("gemini_transcriber.cli.GeminiTranscriptionClient", fake):
            with pytest.raises(SystemExit) as excinfo:
                main([str(audio_path), "--speaker", "Speaker 9=Zed"])

        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert "Unknown speaker 'Speaker 9'" in err
        assert "Speaker 1, Speaker 2" in err
