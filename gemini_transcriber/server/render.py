"""HTML rendering of a transcript session.

WHY: The browser front-end is a single page: pick a file, transcribe,
read the result, rename speakers, download. Rendering it server-side from
the session keeps the page a plain function of the state — no client
framework, nothing to get out of sync.

HOW: render_page() assembles the page from small section renderers
(uploader, status, error, speakers, segments). A short inline script
wires the controls to the JSON API and reloads the page after each
action; while a transcription is in flight the page polls by reloading.
The speaker editor script follows the same rules as
core.editor.SpeakerAliasEditor.

RULES:
- Every piece of user or model text goes through html.escape()
- Transcribe button is disabled without a file or while processing
- The transcript section is hidden while processing
- Speaker chips and segment headers show the resolved display name
"""

from __future__ import annotations

import json
from html import escape
from typing import List

from gemini_transcriber import __version__
from gemini_transcriber.core.session import TranscriptSession
from gemini_transcriber.core.transcript import TranscriptSegment

PAGE_TITLE = "Gemini Audio Transcriber"
PROCESSING_NOTICE = "Processing audio... this may take a few moments."
POLL_INTERVAL_MS = 2000

_STYLE = """
body { font-family: system-ui, sans-serif; background: #111827; color: #f3f4f6;
       max-width: 56rem; margin: 0 auto; padding: 2rem 1rem; }
header { text-align: center; margin-bottom: 2rem; }
h1 { color: #c084fc; margin-bottom: .25rem; }
.muted { color: #9ca3af; }
.panel { background: #1f2937; border: 1px solid #374151; border-radius: 1rem; padding: 1.5rem; }
.uploader { display: flex; gap: 1rem; align-items: center; }
.uploader label { flex-grow: 1; border: 2px dashed #4b5563; border-radius: .5rem;
                  padding: .75rem; text-align: center; cursor: pointer; }
.uploader input[type=file] { display: none; }
button, .button { background: #9333ea; color: #fff; border: 0; border-radius: .5rem;
                  padding: .75rem 2rem; font-weight: bold; cursor: pointer; text-decoration: none; }
button:disabled { background: #4b5563; cursor: not-allowed; }
.notice { text-align: center; color: #d8b4fe; margin: 2rem 0; }
.error { background: #7f1d1d80; border: 1px solid #b91c1c; color: #fca5a5;
         border-radius: .5rem; padding: 1rem; margin: 1.5rem 0; text-align: center; }
.transcript-head { display: flex; justify-content: space-between; align-items: center; margin-top: 2rem; }
.speakers { display: flex; flex-wrap: wrap; gap: 1rem; padding-bottom: 1rem;
            margin-bottom: 1.5rem; border-bottom: 1px solid #374151; }
.speaker { background: #374151; padding: .5rem; border-radius: .375rem; cursor: pointer; font-weight: 600; }
.speaker input { background: #374151; color: #fff; border: 1px solid #a855f7; border-radius: .375rem; padding: .5rem; }
.segments { max-height: 60vh; overflow-y: auto; }
.segment { display: flex; gap: 1rem; margin-bottom: 1.5rem; }
.times { font-family: monospace; font-size: .75rem; color: #c084fc; background: #111827;
         padding: .25rem .5rem; border-radius: .25rem; flex-shrink: 0; }
.times p, .body p { margin: 0; }
.who { font-weight: bold; }
footer { text-align: center; margin-top: 3rem; font-size: .875rem; }
"""

_SCRIPT = """
const base = "/sessions/" + encodeURIComponent(SESSION_ID);

async function send(method, path, body, headers) {
  const resp = await fetch(base + path, {method: method, body: body, headers: headers || {}});
  if (!resp.ok) {
    const data = await resp.json().catch(() => ({detail: resp.statusText}));
    alert(data.detail || resp.statusText);
  }
  window.location.reload();
}

const picker = document.getElementById("file-input");
if (picker) {
  picker.addEventListener("change", () => {
    const form = new FormData();
    if (picker.files.length) { form.append("file", picker.files[0]); }
    send("PUT", "/file", form);
  });
}

const trigger = document.getElementById("transcribe");
if (trigger) {
  trigger.addEventListener("click", () => {
    trigger.disabled = true;
    send("POST", "/transcribe");
  });
}

document.querySelectorAll(".speaker").forEach((chip) => {
  chip.addEventListener("click", () => {
    if (chip.querySelector("input")) { return; }
    const label = chip.dataset.speaker;
    const current = chip.dataset.current;
    const input = document.createElement("input");
    input.type = "text";
    input.value = current;
    let done = false;
    const close = () => { done = true; chip.textContent = current; };
    const commit = () => {
      if (done) { return; }
      const name = input.value.trim();
      if (name && name !== current) {
        done = true;
        send("PUT", "/speakers/" + encodeURIComponent(label),
             JSON.stringify({name: name}), {"Content-Type": "application/json"});
      } else {
        close();
      }
    };
    input.addEventListener("blur", commit);
    input.addEventListener("keydown", (event) => {
      if (event.key === "Enter") { commit(); }
      else if (event.key === "Escape") { close(); }
    });
    chip.textContent = "";
    chip.appendChild(input);
    input.focus();
    input.select();
  });
});

if (IS_PROCESSING) {
  setTimeout(() => window.location.reload(), POLL_INTERVAL_MS);
}
"""


def _render_uploader(session: TranscriptSession) -> str:
    file_label = escape(session.file.name) if session.file else "Select an audio file"
    disabled = "" if session.can_transcribe else " disabled"
    button_label = "Processing..." if session.is_processing else "Transcribe"
    return (
        '<section class="panel uploader">'
        '<label for="file-input">{file_label}</label>'
        '<input id="file-input" type="file" accept="audio/*">'
        '<button id="transcribe" type="button"{disabled}>{button_label}</button>'
        "</section>"
    ).format(file_label=file_label, disabled=disabled, button_label=button_label)


def _render_status(session: TranscriptSession) -> str:
    if not session.is_processing:
        return ""
    return '<div class="notice">{}</div>'.format(escape(PROCESSING_NOTICE))


def _render_error(session: TranscriptSession) -> str:
    if not session.error:
        return ""
    return '<div class="error" role="alert"><strong>Error:</strong> {}</div>'.format(
        escape(session.error)
    )


def _render_speakers(session: TranscriptSession) -> str:
    chips: List[str] = []
    for label in session.speakers:
        name = session.resolve_speaker(label)
        chips.append(
            '<span class="speaker" data-speaker="{label}" data-current="{name}" '
            'title="Click to rename">{text}</span>'.format(
                label=escape(label, quote=True),
                name=escape(name, quote=True),
                text=escape(name),
            )
        )
    return '<div class="speakers"><h3>Speakers</h3>{}</div>'.format("".join(chips))


def _render_segment(segment: TranscriptSegment, display_name: str) -> str:
    return (
        '<div class="segment">'
        '<div class="times"><p>{start}</p><p>{end}</p></div>'
        '<div class="body"><p class="who">{who}</p><p>{text}</p></div>'
        "</div>"
    ).format(
        start=escape(segment.start_time),
        end=escape(segment.end_time),
        who=escape(display_name),
        text=escape(segment.text),
    )


def _render_transcript(session: TranscriptSession) -> str:
    if not session.segments or session.is_processing:
        return ""
    segments = "".join(
        _render_segment(segment, session.resolve_speaker(segment.speaker))
        for segment in session.segments
    )
    return (
        '<section class="transcript">'
        '<div class="transcript-head"><h2>Transcript</h2>'
        '<a class="button" id="download" href="/sessions/{session_id}/export">Download</a></div>'
        '<div class="panel">{speakers}<div class="segments">{segments}</div></div>'
        "</section>"
    ).format(
        session_id=escape(session.id, quote=True),
        speakers=_render_speakers(session),
        segments=segments,
    )


def render_page(session: TranscriptSession) -> str:
    """Render the full HTML page for a session."""
    script = (
        "const SESSION_ID = {session_id};\n"
        "const IS_PROCESSING = {processing};\n"
        "const POLL_INTERVAL_MS = {interval};\n"
        "{body}"
    ).format(
        session_id=json.dumps(session.id),
        processing=json.dumps(session.is_processing),
        interval=POLL_INTERVAL_MS,
        body=_SCRIPT,
    )
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        "<title>{title}</title><style>{style}</style></head>"
        "<body><main>"
        "<header><h1>{title}</h1>"
        '<p class="muted">Upload an audio file to get a timestamped, '
        "speaker-separated transcript.</p></header>"
        "{uploader}{status}{error}{transcript}"
        "</main>"
        '<footer class="muted">Powered by Google Gemini. v{version}</footer>'
        "<script>{script}</script>"
        "</body></html>"
    ).format(
        title=escape(PAGE_TITLE),
        style=_STYLE,
        uploader=_render_uploader(session),
        status=_render_status(session),
        error=_render_error(session),
        transcript=_render_transcript(session),
        version=__version__,
        script=script,
    )
