"""Gemini Audio Transcriber — speaker-labeled transcripts from audio files.

WHY: Reading a recording is slow; reading a transcript is fast. Hosted
generative models already do diarization and speech-to-text well, so this
package only has to get audio to the model and turn the structured answer
into something a person can review, correct, and take away.

HOW: Three layers — a transcription client (Gemini request/response),
a session state machine (file selection, processing, speaker aliases),
and front-ends (FastAPI web page + JSON API, CLI) that drive the session
and export plain text.

RULES:
- The model does the transcription; this package never touches audio content
- TranscriptSegment is the stable contract between client and front-ends
- Speaker aliases never mutate the segments they rename
"""

__version__ = "0.1.0"
