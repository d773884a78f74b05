"""Inline speaker alias editor.

WHY: Renaming "Speaker 1" to "Alice" happens in place: click the name,
type, press Enter (or click away). The interaction has a few sharp edges
— blank input, unchanged input, Escape, the name changing underneath —
that must behave identically in the browser and when the same rename is
requested through the API or the CLI.

HOW: SpeakerAliasEditor is a small two-mode state object. The page's
script mirrors it for the live interaction; the server and CLI drive an
instance directly so the commit rule is enforced on their side too.
propose_alias() is the commit rule on its own, as a pure function.

RULES:
- Display mode shows the current name; clicking enters edit mode
- Entering edit mode focuses the input with the whole draft selected
- Enter or blur commits; Escape cancels
- Commit: trimmed draft, only if non-empty and different from the current name
- Otherwise the draft reverts to the current name; no callback
- Either way the editor returns to display mode
- sync() reflects external name changes unless the user is mid-edit
"""

from __future__ import annotations

import enum
from typing import Callable, Optional, Tuple

COMMIT_KEY = "Enter"
CANCEL_KEY = "Escape"


class EditorMode(str, enum.Enum):
    DISPLAY = "display"
    EDITING = "editing"


def propose_alias(draft: str, current_name: str) -> Optional[str]:
    """Return the alias to commit for a draft, or None to revert.

    >>> propose_alias("  Alice ", "Speaker 1")
    'Alice'
    >>> propose_alias("   ", "Speaker 1") is None
    True
    """
    trimmed = draft.strip()
    if trimmed and trimmed != current_name:
        return trimmed
    return None


class SpeakerAliasEditor:
    """Two-mode inline editor for one speaker's display name.

    Args:
        original_speaker: The model-assigned label this editor renames.
        current_name: The name currently shown for that label.
        on_commit: Called as on_commit(original_speaker, new_name).
    """

    def __init__(
        self,
        original_speaker: str,
        current_name: str,
        on_commit: Callable[[str, str], None],
    ) -> None:
        self.original_speaker = original_speaker
        self.current_name = current_name
        self.draft = current_name
        self.mode = EditorMode.DISPLAY
        self.focused = False
        self.selection: Tuple[int, int] = (0, 0)
        self._on_commit = on_commit

    @property
    def is_editing(self) -> bool:
        return self.mode == EditorMode.EDITING

    def sync(self, current_name: str) -> None:
        """Accept a new externally supplied name."""
        self.current_name = current_name
        if not self.is_editing:
            self.draft = current_name

    def begin_edit(self) -> None:
        self.mode = EditorMode.EDITING
        self.draft = self.current_name
        self.focused = True
        self.selection = (0, len(self.draft))

    def set_draft(self, text: str) -> None:
        if not self.is_editing:
            raise RuntimeError("set_draft() called outside edit mode")
        self.draft = text
        self.selection = (len(text), len(text))

    def handle_key(self, key: str) -> Optional[str]:
        """Route a key press; returns the committed alias, if any."""
        if not self.is_editing:
            return None
        if key == COMMIT_KEY:
            return self.commit()
        if key == CANCEL_KEY:
            self.cancel()
        return None

    def blur(self) -> Optional[str]:
        if not self.is_editing:
            return None
        return self.commit()

    def commit(self) -> Optional[str]:
        """Apply the commit rule and return to display mode."""
        alias = propose_alias(self.draft, self.current_name)
        if alias is None:
            self.draft = self.current_name
        else:
            self._on_commit(self.original_speaker, alias)
            self.current_name = alias
            self.draft = alias
        self._leave_edit()
        return alias

    def cancel(self) -> None:
        self.draft = self.current_name
        self._leave_edit()

    def _leave_edit(self) -> None:
        self.mode = EditorMode.DISPLAY
        self.focused = False
        self.selection = (0, 0)


def apply_rename(
    original_speaker: str,
    current_name: str,
    requested_name: str,
    on_commit: Callable[[str, str], None],
) -> Optional[str]:
    """Run one full edit (open, type, Enter) and return the committed alias.

    Used by the HTTP API and the CLI, which receive a finished draft
    rather than individual key presses.
    """
    editor = SpeakerAliasEditor(original_speaker, current_name, on_commit)
    editor.begin_edit()
    editor.set_draft(requested_name)
    return editor.handle_key(COMMIT_KEY)
