"""Shared test fixtures for the gemini_transcriber test suite.

WHY: Most test modules need the same small transcript — two speakers,
two segments — and the same JSON text the model would return for it.
Centralizing them keeps every test on one known sample.

HOW: Plain module-level data plus pytest fixtures that return fresh
copies, an AudioFile for uploads, and a session already holding the
sample transcript.

RULES:
- SAMPLE_SEGMENTS matches the two-segment export example exactly
- No fixture touches the network
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from gemini_transcriber.core.session import AudioFile, TranscriptSession
from gemini_transcriber.core.transcript import TranscriptSegment

SAMPLE_RESPONSE_ITEMS: List[Dict[str, Any]] = [
    {"startTime": "00:00:00", "endTime": "00:00:05", "speaker": "Speaker 1", "text": "Hi"},
    {"startTime": "00:00:05", "endTime": "00:00:09", "speaker": "Speaker 2", "text": "Hello"},
]

SAMPLE_SEGMENTS = [TranscriptSegment.from_dict(item) for item in SAMPLE_RESPONSE_ITEMS]


@pytest.fixture
def sample_segments() -> List[TranscriptSegment]:
    return list(SAMPLE_SEGMENTS)


@pytest.fixture
def sample_response_text() -> str:
    """The model's JSON answer for the sample transcript."""
    return json.dumps(SAMPLE_RESPONSE_ITEMS)


@pytest.fixture
def fake_response():
    """Factory for objects shaped like a GenerateContentResponse."""
    def _make(text):
        return SimpleNamespace(text=text)
    return _make


@pytest.fixture
def audio_file() -> AudioFile:
    return AudioFile(name="meeting.mp3", content=b"fake audio data", mime_type="audio/mpeg")


@pytest.fixture
def completed_session(audio_file, sample_segments) -> TranscriptSession:
    """A session that has transcribed the sample successfully."""
    session = TranscriptSession()
    session.select_file(audio_file)
    ticket = session.begin_transcription()
    session.complete(ticket, sample_segments)
    session.finish(ticket)
    return session


@pytest.fixture
def api_key_env(monkeypatch):
    """Provide a dummy Gemini key in the environment."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("API_KEY", raising=False)
    return "test-key"


@pytest.fixture
def no_api_key_env(monkeypatch):
    """Remove every variable the credential loader looks at."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
