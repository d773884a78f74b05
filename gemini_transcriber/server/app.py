"""FastAPI application: browser page plus JSON API for transcript sessions.

WHY: The transcriber is used from a browser — pick a file, transcribe,
rename speakers, download. The page needs an API to drive the session,
and scripts (curl, n8n, tests) benefit from the same API with OpenAPI
docs.

HOW: One FastAPI app exposes session endpoints grouped by tags. The
transcribe endpoint moves the session to PROCESSING synchronously and
schedules the awaited Gemini call as an async background task on the
server's event loop, so a second trigger for the same session sees
PROCESSING and is a no-op. The page at /app/{id} is rendered from the
session by server.render.

RULES:
- Every endpoint has OpenAPI descriptions on parameters and responses
- Error responses use a consistent ErrorResponse schema
- The session store is a module-level singleton
- The transcriber callable is looked up at call time (patchable in tests)
- Renames go through core.editor.apply_rename (same rule as the page)
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import PurePath
from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import BackgroundTasks, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from gemini_transcriber import __version__
from gemini_transcriber.api import client as transcription_client
from gemini_transcriber.config import (
    DEFAULT_MIME_TYPE,
    LOG_LEVEL,
    MAX_AUDIO_BYTES,
    SERVER_HOST,
    SERVER_PORT,
)
from gemini_transcriber.core.editor import apply_rename
from gemini_transcriber.core.session import (
    AudioFile,
    SessionStatus,
    TranscriptionTicket,
    TranscriptSession,
    run_transcription,
)
from gemini_transcriber.formatters import DEFAULT_FORMAT, FORMATTERS
from gemini_transcriber.formatters.plain_text import export_filename
from gemini_transcriber.server.models import (
    ErrorResponse,
    HealthResponse,
    RenameRequest,
    RenameResponse,
    SessionResponse,
    TranscribeResponse,
)
from gemini_transcriber.server.render import render_page
from gemini_transcriber.server.sessions import SessionLimitError, SessionStore

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 300

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every 5 minutes."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Gemini Audio Transcriber API",
    description=(
        "Upload an audio file, transcribe it with Google Gemini into "
        "speaker-labeled, timestamped segments, rename speakers, and "
        "download the transcript as plain text."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session_or_404(session_id: str) -> TranscriptSession:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return session


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("?", "_").replace('"', "_")
    return "attachment; filename=\"{}\"; filename*=UTF-8''{}".format(
        fallback, quote(filename)
    )


async def _transcribe(audio_content: bytes, mime_type: str):
    """Indirection so tests can patch the outbound call in one place."""
    return await transcription_client.transcribe_audio(audio_content, mime_type)


async def _run_transcription_task(session: TranscriptSession, ticket: TranscriptionTicket) -> None:
    """Background task: await the model call and settle the session."""
    await run_transcription(session, ticket, _transcribe)
    logger.info("Session %s: transcription settled as %s", session.id, session.status.value)


# ---------------------------------------------------------------------------
# Endpoints: Page
# ---------------------------------------------------------------------------


@app.get("/", include_in_schema=False)
async def index() -> RedirectResponse:
    try:
        session = session_store.create_session()
    except SessionLimitError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return RedirectResponse(url="/app/{}".format(session.id), status_code=303)


@app.get(
    "/app/{session_id}",
    response_class=HTMLResponse,
    tags=["page"],
    summary="Render the transcriber page for a session",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def session_page(session_id: str) -> HTMLResponse:
    session = _get_session_or_404(session_id)
    return HTMLResponse(render_page(session))


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Create a session",
    description="Creates an empty (idle) transcript session.",
    responses={429: {"model": ErrorResponse, "description": "Too many sessions"}},
)
async def create_session() -> SessionResponse:
    try:
        session = session_store.create_session()
    except SessionLimitError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return SessionResponse.from_session(session)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session state",
    description="Poll this endpoint to follow a transcription in progress.",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session(session_id: str) -> SessionResponse:
    return SessionResponse.from_session(_get_session_or_404(session_id))


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Delete a session",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


@app.put(
    "/sessions/{session_id}/file",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Select the audio file",
    description=(
        "Upload the audio file for this session. Any previous transcript, "
        "speaker names and error are cleared. Sending no file clears the "
        "selection."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        413: {"model": ErrorResponse, "description": "File too large"},
    },
)
async def select_file(
    session_id: str,
    file: Annotated[
        Optional[UploadFile],
        File(description="Audio file to transcribe."),
    ] = None,
) -> SessionResponse:
    session = _get_session_or_404(session_id)

    if file is None:
        session.select_file(None)
        return SessionResponse.from_session(session)

    content = await file.read()
    if len(content) > MAX_AUDIO_BYTES:
        raise HTTPException(
            status_code=413,
            detail="File is {:,} bytes; the limit is {:,} bytes.".format(
                len(content), MAX_AUDIO_BYTES
            ),
        )

    # Sanitize filename; it is only used for display and the export name
    filename = PurePath((file.filename or "audio").replace("\\", "/")).name
    audio = AudioFile(
        name=filename,
        content=content,
        mime_type=file.content_type or DEFAULT_MIME_TYPE,
    )
    session.select_file(audio)
    return SessionResponse.from_session(session)


@app.post(
    "/sessions/{session_id}/transcribe",
    response_model=TranscribeResponse,
    status_code=202,
    tags=["sessions"],
    summary="Transcribe the selected file",
    description=(
        "Starts the transcription in the background and returns 202. "
        "Without a selected file, or while a transcription is already in "
        "flight, nothing is started and the current state is returned with 200."
    ),
    responses={
        200: {"model": TranscribeResponse, "description": "No-op: nothing was started"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def transcribe(
    session_id: str,
    background_tasks: BackgroundTasks,
    response: Response,
) -> TranscribeResponse:
    session = _get_session_or_404(session_id)
    ticket = session.begin_transcription()
    if ticket is None:
        response.status_code = 200
        return TranscribeResponse(started=False, session=SessionResponse.from_session(session))

    background_tasks.add_task(_run_transcription_task, session, ticket)
    return TranscribeResponse(started=True, session=SessionResponse.from_session(session))


@app.put(
    "/sessions/{session_id}/speakers/{speaker}",
    response_model=RenameResponse,
    tags=["sessions"],
    summary="Rename a speaker",
    description=(
        "Sets the display name for an original speaker label. The name is "
        "trimmed; an empty or unchanged name leaves the alias as it was."
    ),
    responses={404: {"model": ErrorResponse, "description": "Session or speaker not found"}},
)
async def rename_speaker(
    session_id: str,
    speaker: str,
    body: RenameRequest,
) -> RenameResponse:
    session = _get_session_or_404(session_id)
    if speaker not in session.aliases:
        raise HTTPException(status_code=404, detail="Speaker not found: {}".format(speaker))

    committed = apply_rename(
        speaker,
        session.resolve_speaker(speaker),
        body.name,
        session.rename_speaker,
    )
    return RenameResponse(
        committed=committed is not None,
        session=SessionResponse.from_session(session),
    )


@app.get(
    "/sessions/{session_id}/export",
    tags=["sessions"],
    summary="Download the transcript",
    description=(
        "Returns the transcript as a file download, one line per segment: "
        "'[start - end] speaker: text', using the current speaker names."
    ),
    responses={
        200: {"content": {"text/plain": {}}, "description": "Transcript file"},
        400: {"model": ErrorResponse, "description": "Unknown export format"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "No transcript to export"},
    },
)
async def export_transcript(
    session_id: str,
    export_format: Annotated[
        str,
        Query(alias="format", description="Export format key."),
    ] = DEFAULT_FORMAT,
) -> Response:
    session = _get_session_or_404(session_id)
    if export_format not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=400,
            detail="Unknown export format '{}'. Available: {}".format(export_format, available),
        )
    if session.status != SessionStatus.COMPLETE or not session.segments:
        raise HTTPException(
            status_code=409,
            detail="No transcript to export (current status: {}).".format(session.status.value),
        )

    transcript = session.transcript()
    output = FORMATTERS[export_format]().format(transcript)[0]
    filename = export_filename(transcript.source_filename)
    return Response(
        content=output.content.encode("utf-8"),
        media_type="{}; charset=utf-8".format(output.media_type),
        headers={"Content-Disposition": _content_disposition(filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the gemini-transcriber-api console script."""
    import uvicorn
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT, log_level=LOG_LEVEL)
