"""Core transcript model, speaker derivation, session state, and editor.

WHY: The core package holds everything that is independent of how the
transcript is obtained (the Gemini client) or shown (web page, CLI):
the segment dataclasses, the speaker/alias derivation, the session state
machine, and the inline alias editor.

HOW: transcript.py defines the data structures, speakers.py derives the
speaker set and alias map, session.py drives the transcription lifecycle,
editor.py implements the rename interaction.

RULES:
- No network or file I/O in this package
- Segments are immutable; aliases live next to them, never inside them
"""
