"""Configuration constants and .env loading.

WHY: Centralizes the few configurable values (model name, upload limit,
session lifetime, server address) so they are easy to find and override
without touching logic.

HOW: python-dotenv loads the .env file on import. Constants are
module-level values read from the environment with defaults. The API key
is NOT read at import time — load_api_key() reads it on every call so a
key added to the environment later is picked up by the next attempt.

RULES:
- The API key is read from the environment at call time, never hardcoded
- GEMINI_API_KEY wins; API_KEY is accepted as a fallback
- Missing key raises MissingAPIKeyError before any network activity
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the app is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")
"""Environment variables checked for the credential, in priority order."""

MAX_AUDIO_BYTES = int(os.getenv("MAX_AUDIO_BYTES", str(20 * 1024 * 1024)))
"""Largest upload accepted; inline Gemini requests are capped at 20 MB."""

DEFAULT_MIME_TYPE = "application/octet-stream"

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

EXPORT_SUFFIX = "_transcript.txt"
EXPORT_FALLBACK_STEM = "transcript"

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "100"))
SERVER_HOST = os.getenv("SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()


class MissingAPIKeyError(ValueError):
    """Raised when no Gemini API key is configured.

    WHY: A transcription attempt without a credential can never succeed.
    Failing before any request gives an immediate, specific error.

    RULES:
    - Raised by load_api_key(), never by import
    - Message names the environment variable to set
    """


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    HOW: Checks GEMINI_API_KEY, then API_KEY. Blank values count as
    missing.

    RULES:
    - Raises MissingAPIKeyError if no variable holds a non-blank value
    - Never returns a default/placeholder value
    """
    for name in API_KEY_ENV_VARS:
        key = os.getenv(name, "").strip()
        if key:
            return key
    raise MissingAPIKeyError(
        "Gemini API key not configured. "
        "Add GEMINI_API_KEY to the environment or the .env file."
    )
