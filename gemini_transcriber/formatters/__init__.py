"""Export formatter registry.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["plain_text"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and query parameters)
- Values are BaseFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from gemini_transcriber.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from gemini_transcriber.formatters.base import BaseFormatter

DEFAULT_FORMAT = "plain_text"

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "plain_text": PlainTextFormatter,
}
