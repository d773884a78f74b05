"""Speaker set derivation and alias resolution.

WHY: The page lists one editor per speaker and every segment shows the
speaker's display name. Both depend only on the current segment sequence
and the alias map, so they are pure functions rather than state that has
to be kept in sync.

HOW: unique_speakers() walks segments in order and keeps first
appearances. identity_aliases() builds the initial label → label map.
resolve_speaker() looks a label up with a fallback to the raw label.

RULES:
- Speaker order is order of first appearance in the transcript
- The alias map is recomputed from scratch for every new transcript
- A missing or empty alias resolves to the raw label
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from gemini_transcriber.core.transcript import TranscriptSegment


def unique_speakers(segments: Iterable[TranscriptSegment]) -> List[str]:
    """Return the distinct speaker labels, in order of first appearance."""
    seen: Dict[str, None] = {}
    for segment in segments:
        seen.setdefault(segment.speaker, None)
    return list(seen)


def identity_aliases(segments: Iterable[TranscriptSegment]) -> Dict[str, str]:
    """Build the initial alias map: every speaker label maps to itself."""
    return {speaker: speaker for speaker in unique_speakers(segments)}


def resolve_speaker(label: str, aliases: Mapping[str, str]) -> str:
    """Return the display name for a speaker label.

    Absent labels fall back to the label itself. This is a lookup
    convenience, not an invariant check: after population every label
    has an entry.
    """
    return aliases.get(label) or label
