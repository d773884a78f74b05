"""Async client for Gemini audio transcription with a fixed JSON schema.

WHY: The session store needs one operation — "turn these audio bytes
into transcript segments" — without knowing about SDK objects, prompts,
schemas, or HTTP. This module hides all of that behind a single client
class and a convenience coroutine.

HOW: GeminiTranscriptionClient wraps google.genai.Client. It is an async
context manager — enter it to get a client bound to the API key, exit to
close the SDK's connection pool. transcribe() validates its input, sends
one generate_content request (inline audio + system instruction +
response schema), then parses and validates the JSON text of the answer.

RULES:
- Always use the async context manager (async with GeminiTranscriptionClient() as c:)
- The API key is loaded when the client is constructed (call time, not import)
- Empty audio and a missing key both fail before any network activity
- Exactly one request per transcribe() call — no retries, no polling
- SDK/HTTP failures are wrapped in TranscriptionAPIError
- Unparseable or off-schema answers raise ResponseFormatError, never partial data
- User-facing wording is the caller's job; errors here carry diagnostics
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

import httpx
import jsonschema
from google import genai
from google.genai import errors as genai_errors

from gemini_transcriber.api.models import (
    SEGMENTS_JSON_SCHEMA,
    build_audio_part,
    build_generation_config,
)
from gemini_transcriber.config import GEMINI_MODEL, load_api_key
from gemini_transcriber.core.transcript import TranscriptSegment

logger = logging.getLogger(__name__)

_LOGGED_RESPONSE_CHARS = 500


class TranscriptionAPIError(Exception):
    """Raised when the Gemini service call itself fails.

    WHY: Callers need a typed exception to tell service/network failures
    apart from malformed answers, even though both end in the same
    user-facing message.

    HOW: Wraps the SDK's APIError (HTTP status + message) or an httpx
    transport error (no status, reported as 0).

    RULES:
    - Always include status_code and message
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Gemini API error {status_code}: {message}")


class ResponseFormatError(ValueError):
    """Raised when the model's answer is not a valid segment array.

    RULES:
    - Covers empty text, invalid JSON, and JSON that does not match the schema
    - Raised instead of returning partial data
    """


class EmptyAudioError(ValueError):
    """Raised when transcribe() is given no audio bytes."""


def parse_segments(text: Optional[str]) -> List[TranscriptSegment]:
    """Parse the model's JSON text into TranscriptSegment objects.

    HOW: Strips the text, decodes it with json.loads(), validates it
    against SEGMENTS_JSON_SCHEMA, then builds one segment per item.

    RULES:
    - None/blank text raises ResponseFormatError
    - Invalid JSON raises ResponseFormatError (chained from JSONDecodeError)
    - Schema mismatch raises ResponseFormatError (chained from ValidationError)
    - An empty array is valid and yields an empty list
    """
    if text is None or not text.strip():
        raise ResponseFormatError("The API returned an empty response.")

    json_string = text.strip()
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as exc:
        logger.error(
            "Failed to parse JSON response: %s", json_string[:_LOGGED_RESPONSE_CHARS]
        )
        raise ResponseFormatError("The API returned an invalid JSON format.") from exc

    try:
        jsonschema.validate(instance=data, schema=SEGMENTS_JSON_SCHEMA)
    except jsonschema.ValidationError as exc:
        logger.error("JSON response does not match the segment schema: %s", exc.message)
        raise ResponseFormatError(
            f"The API returned JSON that does not match the transcript schema: {exc.message}"
        ) from exc

    return [TranscriptSegment.from_dict(item) for item in data]


class GeminiTranscriptionClient:
    """Async client for one-shot Gemini audio transcription.

    RULES:
    - Use as: async with GeminiTranscriptionClient() as client: ...
    - api_key defaults to load_api_key() (raises MissingAPIKeyError)
    - model defaults to GEMINI_MODEL from config
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._model = model or GEMINI_MODEL
        self._client: Optional[genai.Client] = None

    @property
    def model(self) -> str:
        return self._model

    async def __aenter__(self) -> GeminiTranscriptionClient:
        self._client = genai.Client(api_key=self._api_key)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            # close() only shuts the sync pool; requests go through client.aio
            await self._client.aio.aclose()
            self._client = None

    def _ensure_client(self) -> genai.Client:
        """Return the active SDK client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiTranscriptionClient must be used as an async context manager: "
                "async with GeminiTranscriptionClient() as client: ..."
            )
        return self._client

    async def transcribe(
        self,
        audio_content: bytes,
        mime_type: str,
    ) -> List[TranscriptSegment]:
        """Transcribe audio into an ordered list of segments.

        WHY: This is the only call the rest of the package makes to the
        model.

        HOW: Sends the audio inline with the fixed instruction and
        response schema, awaits the single response, and hands its text
        to parse_segments().

        RULES:
        - Raises EmptyAudioError for empty content (no request sent)
        - Raises TranscriptionAPIError on SDK or transport failure
        - Raises ResponseFormatError on an unusable answer

        Args:
            audio_content: Raw bytes of the audio file.
            mime_type: Declared media type, e.g. "audio/mpeg".

        Returns:
            Segments in the order the model returned them.
        """
        if not audio_content:
            raise EmptyAudioError("Audio content is empty; nothing to transcribe.")

        client = self._ensure_client()
        logger.info(
            "Requesting transcription of %d bytes (%s) with model %s",
            len(audio_content),
            mime_type,
            self._model,
        )

        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=[build_audio_part(audio_content, mime_type)],
                config=build_generation_config(),
            )
        except genai_errors.APIError as exc:
            raise TranscriptionAPIError(exc.code or 0, exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise TranscriptionAPIError(0, str(exc)) from exc

        segments = parse_segments(response.text)
        logger.info("Received %d transcript segments", len(segments))
        return segments


async def transcribe_audio(audio_content: bytes, mime_type: str) -> List[TranscriptSegment]:
    """Open a client, transcribe once, and close the client.

    The client (and so the API key lookup) is created on every call;
    empty audio is rejected before the key is even looked up.
    """
    if not audio_content:
        raise EmptyAudioError("Audio content is empty; nothing to transcribe.")
    async with GeminiTranscriptionClient() as client:
        return await client.transcribe(audio_content, mime_type)
