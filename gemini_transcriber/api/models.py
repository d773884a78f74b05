"""Request configuration and response schema for the Gemini transcription call.

WHY: The model is asked to answer in a fixed JSON shape. The same shape
is needed twice — once as a Gemini response_schema (so the model is
constrained to it) and once as a JSON Schema (so the answer is checked
before anything downstream trusts it). Keeping both here, side by side,
makes it obvious when one drifts from the other.

HOW: SEGMENTS_RESPONSE_SCHEMA is a google.genai types.Schema.
SEGMENTS_JSON_SCHEMA is the equivalent plain-dict JSON Schema for
jsonschema.validate(). SYSTEM_INSTRUCTION is the fixed prompt.

RULES:
- Both schemas: array of objects with required string fields
  startTime, endTime, speaker, text
- Field names are camelCase to match TranscriptSegment.from_dict()
- Any change to one schema must be mirrored in the other
"""

from __future__ import annotations

from typing import Any, Dict

from google.genai import types

SEGMENT_FIELDS = ("startTime", "endTime", "speaker", "text")

SYSTEM_INSTRUCTION = """You are an expert audio transcription service.
Your task is to transcribe the provided audio file accurately.
Identify different speakers and label them as 'Speaker 1', 'Speaker 2', and so on.
Provide timestamps in HH:MM:SS format for each segment of speech.
Segments should be around 5 seconds long but should end at natural sentence breaks.
The output must be a valid JSON array adhering to the provided schema."""

_FIELD_DESCRIPTIONS: Dict[str, str] = {
    "startTime": "Start time of the segment in HH:MM:SS format.",
    "endTime": "End time of the segment in HH:MM:SS format.",
    "speaker": "The identified speaker label, e.g., 'Speaker 1'.",
    "text": "The transcribed text for this segment.",
}

SEGMENTS_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            name: types.Schema(type=types.Type.STRING, description=description)
            for name, description in _FIELD_DESCRIPTIONS.items()
        },
        required=list(SEGMENT_FIELDS),
    ),
)

SEGMENTS_JSON_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            name: {"type": "string", "description": description}
            for name, description in _FIELD_DESCRIPTIONS.items()
        },
        "required": list(SEGMENT_FIELDS),
        "additionalProperties": False,
    },
}


def build_generation_config() -> types.GenerateContentConfig:
    """Build the fixed generation config: instruction + JSON output schema."""
    return types.GenerateContentConfig(
        system_instruction=SYSTEM_INSTRUCTION,
        response_mime_type="application/json",
        response_schema=SEGMENTS_RESPONSE_SCHEMA,
    )


def build_audio_part(audio_content: bytes, mime_type: str) -> types.Part:
    """Wrap raw audio bytes as an inline request part.

    The SDK serializes inline bytes as base64 on the wire.
    """
    return types.Part.from_bytes(data=audio_content, mime_type=mime_type)
