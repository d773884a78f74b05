"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Session state is exposed through SessionResponse; segments are
serialized with the same camelCase field names the model produces, plus
the resolved display name. All models include Field descriptions for
the /docs UI.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose audio bytes
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from gemini_transcriber.core.session import TranscriptSession


class SegmentModel(BaseModel):
    """One transcript segment as returned by the API."""

    startTime: str = Field(description="Start time in HH:MM:SS format.")
    endTime: str = Field(description="End time in HH:MM:SS format.")
    speaker: str = Field(description="Original speaker label assigned by the model.")
    displayName: str = Field(description="Speaker name after applying the alias map.")
    text: str = Field(description="Transcribed text for this segment.")


class FileModel(BaseModel):
    """Metadata for the selected audio file."""

    name: str = Field(description="Original uploaded filename.")
    mime_type: str = Field(description="Declared media type of the upload.")
    size: int = Field(description="File size in bytes.")


class SessionResponse(BaseModel):
    """Full state of a transcript session.

    RULES:
    - aliases keys are exactly the distinct speakers of segments once complete
    - error is only present when status is 'failed'
    """

    id: str = Field(description="Unique session identifier.")
    status: str = Field(description="Current session status.")
    file: Optional[FileModel] = Field(default=None, description="Selected audio file, if any.")
    is_processing: bool = Field(description="True while a transcription call is in flight.")
    can_transcribe: bool = Field(description="True when a transcribe request would start a call.")
    error: Optional[str] = Field(default=None, description="User-facing error message.")
    speakers: List[str] = Field(description="Distinct speaker labels, in order of appearance.")
    aliases: Dict[str, str] = Field(description="Speaker label → display name.")
    segments: List[SegmentModel] = Field(description="Transcript segments in order.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "status": "complete",
                "file": {"name": "meeting.mp3", "mime_type": "audio/mpeg", "size": 48213},
                "is_processing": False,
                "can_transcribe": True,
                "error": None,
                "speakers": ["Speaker 1"],
                "aliases": {"Speaker 1": "Alice"},
                "segments": [
                    {
                        "startTime": "00:00:00",
                        "endTime": "00:00:05",
                        "speaker": "Speaker 1",
                        "displayName": "Alice",
                        "text": "Hi",
                    }
                ],
            }
        ]
    }}

    @classmethod
    def from_session(cls, session: TranscriptSession) -> SessionResponse:
        file = None
        if session.file is not None:
            file = FileModel(
                name=session.file.name,
                mime_type=session.file.mime_type,
                size=session.file.size,
            )
        return cls(
            id=session.id,
            status=session.status.value,
            file=file,
            is_processing=session.is_processing,
            can_transcribe=session.can_transcribe,
            error=session.error,
            speakers=session.speakers,
            aliases=dict(session.aliases),
            segments=[
                SegmentModel(
                    startTime=segment.start_time,
                    endTime=segment.end_time,
                    speaker=segment.speaker,
                    displayName=session.resolve_speaker(segment.speaker),
                    text=segment.text,
                )
                for segment in session.segments
            ],
        )


class TranscribeResponse(BaseModel):
    """Result of a transcribe trigger."""

    started: bool = Field(
        description="True if a transcription call was started; False if the trigger was a no-op."
    )
    session: SessionResponse = Field(description="Session state after the trigger.")


class RenameRequest(BaseModel):
    """New display name for a speaker."""

    name: str = Field(description="Requested display name; trimmed before use.")


class RenameResponse(BaseModel):
    """Result of a rename request."""

    committed: bool = Field(
        description="False when the trimmed name was empty or unchanged (no-op)."
    )
    session: SessionResponse = Field(description="Session state after the rename.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
