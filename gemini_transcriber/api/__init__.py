"""Gemini API client package — the one outbound call of the transcriber.

WHY: Audio goes to a hosted model and a JSON transcript comes back. This
package owns that boundary: request building, the awaited call, and
strict parsing of the answer.

HOW: Uses the google-genai SDK's async surface (client.aio). The
GeminiTranscriptionClient class sends one request per transcription;
models.py holds the instruction and the response schema.

RULES:
- All model calls go through GeminiTranscriptionClient
- Authentication is via API key from config, read at call time
"""

from gemini_transcriber.api.client import (
    EmptyAudioError,
    GeminiTranscriptionClient,
    ResponseFormatError,
    TranscriptionAPIError,
    parse_segments,
    transcribe_audio,
)

__all__ = [
    "EmptyAudioError",
    "GeminiTranscriptionClient",
    "ResponseFormatError",
    "TranscriptionAPIError",
    "parse_segments",
    "transcribe_audio",
]
