"""HTML rendering of the notebook."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .models import AppState, Note, Segment
from .selection import SegmentLayout, TextRun

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(value: Optional[str]) -> str:
    text = value or ""
    for raw, escaped in _HTML_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def format_date(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone()
    return stamp.strftime("%Y-%m-%d %H:%M")


def segment_runs(segment: Segment, note: Optional[Note] = None) -> List[TextRun]:
    text = segment.text
    if not note:
        return [TextRun(text)]
    start = min(max(note.start_offset, 0), len(text))
    end = min(max(note.end_offset, start), len(text))
    if start == end:
        return [TextRun(text)]
    runs = []
    if start:
        runs.append(TextRun(text[:start]))
    runs.append(TextRun(text[start:end], marked=True))
    if end < len(text):
        runs.append(TextRun(text[end:]))
    return runs


def build_layout(state: AppState) -> SegmentLayout:
    return {seg.id: segment_runs(seg, state.note_for(seg.id)) for seg in state.segments}


def _render_runs(runs: Iterable[TextRun]) -> str:
    parts = []
    for run in runs:
        if run.marked:
            parts.append(f'<mark class="note-range">{escape_html(run.text)}</mark>')
        else:
            parts.append(escape_html(run.text))
    return "".join(parts)


def render_control_panel(state: AppState, read_only: bool = False) -> str:
    locked = " readonly" if read_only else ""
    body = "\n".join(seg.text for seg in state.segments)
    lines: List[str] = []
    lines.append('<section class="control-panel">')
    lines.append("  <h1>Study Notes</h1>")
    lines.append('  <div class="field">')
    lines.append('    <label for="title-input">Title</label>')
    lines.append(
        f'    <input id="title-input" name="title" value="{escape_html(state.title)}"'
        f' placeholder="Enter a study topic title"{locked} />'
    )
    lines.append("  </div>")
    lines.append('  <div class="field">')
    lines.append(
        '    <label for="body-input">Body (each line becomes a segment you can annotate)</label>'
    )
    lines.append(
        f'    <textarea id="body-input" name="body"{locked}'
        f' placeholder="Enter the body text, one segment per line">{escape_html(body)}</textarea>'
    )
    lines.append("  </div>")
    if not read_only:
        lines.append('  <div class="actions">')
        lines.append('    <button class="primary" data-action="apply-body">Update body</button>')
        lines.append('    <button class="secondary" data-action="restore-default">Restore sample</button>')
        lines.append("  </div>")
    lines.append("</section>")
    return "\n".join(lines)


def render_note_section(
    state: AppState, segment: Segment, is_active: bool, read_only: bool = False
) -> str:
    editor = state.editor
    active_cls = " active" if is_active else ""
    seg_id = escape_html(segment.id)
    if editor.is_open_for(segment.id) and not read_only:
        save_label = "Save changes" if editor.mode == "edit" else "Save note"
        lines = [
            f'<div class="note-row note-editor{active_cls}" data-segment-id="{seg_id}">',
            f'  <label for="note-{seg_id}">Note</label>',
            f'  <textarea id="note-{seg_id}" data-role="note-input" autofocus'
            f' data-caret="{editor.caret}">{escape_html(editor.draft)}</textarea>',
            '  <div class="note-actions">',
            f'    <button class="primary" data-action="save-note" data-segment-id="{seg_id}">'
            f"{save_label}</button>",
            f'    <button class="secondary" data-action="cancel-edit" data-segment-id="{seg_id}">'
            "Cancel</button>",
            "  </div>",
            '  <p class="note-hint">Press Enter to save, Shift+Enter for a new line</p>',
            "</div>",
        ]
        return "\n".join(lines)

    note = state.note_for(segment.id)
    if not note:
        return ""
    lines = [
        f'<div class="note-row{active_cls}" data-segment-id="{seg_id}">',
        f'  <div class="note-content">{escape_html(note.content)}</div>',
        f'  <div class="note-meta">Updated {escape_html(format_date(note.updated_at))}</div>',
    ]
    if read_only:
        lines.append("</div>")
        return "\n".join(lines)
    lines += [
        '  <div class="note-actions">',
        f'    <button class="secondary" data-action="edit-note" data-segment-id="{seg_id}">'
        "Edit</button>",
        f'    <button class="danger" data-action="delete-note" data-segment-id="{seg_id}">'
        "Delete</button>",
        "  </div>",
        "</div>",
    ]
    return "\n".join(lines)


def render_segment(state: AppState, segment: Segment, read_only: bool = False) -> str:
    note = state.note_for(segment.id)
    is_active = state.active_segment_id == segment.id
    classes = ["segment"]
    if note:
        classes.append("has-note")
    if is_active:
        classes.append("active")
    seg_id = escape_html(segment.id)
    lines = [f'<article class="{" ".join(classes)}" data-segment-id="{seg_id}">']
    lines.append(
        f'  <div class="segment-text" data-segment-id="{seg_id}">'
        f"{_render_runs(segment_runs(segment, note))}</div>"
    )
    section = render_note_section(state, segment, is_active, read_only)
    if section:
        lines.append(section)
    lines.append("</article>")
    return "\n".join(lines)


def render_segment_list(state: AppState, read_only: bool = False) -> str:
    if not state.segments:
        return '<p class="empty">No body text yet. Enter the body above first.</p>'
    lines = ['<section class="segment-list">']
    lines.extend(render_segment(state, seg, read_only) for seg in state.segments)
    lines.append("</section>")
    return "\n".join(lines)


def render_app(state: AppState, read_only: bool = False) -> str:
    """Markup for the control panel and the segment list.

    With read_only the page is a snapshot: inputs are readonly and no
    action buttons or note editor are drawn.
    """
    panel = render_control_panel(state, read_only)
    return f"{panel}\n{render_segment_list(state, read_only)}"


def render_toasts(toasts: Iterable) -> str:
    items = [
        f'<div class="toast {escape_html(toast.kind)}">{escape_html(toast.message)}</div>'
        for toast in toasts
    ]
    return "".join(items[:1])


def render_document(
    state: AppState,
    stylesheet: str = "style.css",
    toasts: Iterable = (),
    read_only: bool = False,
) -> str:
    lines: List[str] = []
    lines.append("<!DOCTYPE html>")
    lines.append('<html lang="en">')
    lines.append("<head>")
    lines.append('  <meta charset="utf-8" />')
    lines.append('  <meta name="viewport" content="width=device-width, initial-scale=1" />')
    lines.append(f"  <title>{escape_html(state.title or 'Study Notes')}</title>")
    lines.append(f'  <link rel="stylesheet" href="{escape_html(stylesheet)}" />')
    lines.append("</head>")
    lines.append("<body>")
    lines.append('<main id="app">')
    lines.append(render_app(state, read_only))
    lines.append("</main>")
    lines.append(f'<div id="toast-container">{render_toasts(toasts)}</div>')
    if not read_only:
        lines.append('<div id="selection-toolbar" class="hidden"></div>')
    lines.append("</body>")
    lines.append("</html>")
    lines.append("")
    return "\n".join(lines)
