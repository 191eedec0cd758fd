"""Notebook state owner.

All reads and writes of the application state go through ``Notebook``.
Each mutation persists the state and re-renders the markup before it
returns; there is no deferred or batched write.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

from .models import AppState, Note, SelectionInfo
from .renderer import build_layout, render_app
from .segments import DEFAULT_TITLE, build_segments, default_segments, generate_id, split_body
from .selection import CrossSegmentSelection, SelectionRange, map_selection
from .session_io import STATE_KEY, load_state, save_state

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"

ADD = "add"
VIEW = "view"

MESSAGES = {
    "note_added": "Note added",
    "note_updated": "Note updated",
    "note_deleted": "Note deleted",
    "body_updated": "Body updated, existing notes were cleared",
    "body_empty": "Body cannot be empty",
    "body_no_lines": "Body needs at least one non-blank line",
    "default_restored": "Sample body restored",
    "note_empty": "Note content cannot be empty",
    "cross_segment": "Please select text within a single line",
}


def utc_timestamp(now: Optional[datetime] = None) -> str:
    stamp = now or datetime.now(timezone.utc)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    stamp = stamp.astimezone(timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Toast:
    id: str
    message: str
    kind: str = SUCCESS


@dataclass(frozen=True)
class ToolbarAction:
    type: str
    label: str


class Notifier:
    """FIFO queue of transient user-facing messages."""

    def __init__(self) -> None:
        self._queue: Deque[Toast] = deque()

    def push(self, message: str, kind: str = SUCCESS) -> Toast:
        toast = Toast(id=generate_id("toast"), message=message, kind=kind)
        self._queue.append(toast)
        if kind == ERROR:
            logger.info("User error: %s", message)
        return toast

    def pending(self) -> List[Toast]:
        return list(self._queue)

    def drain(self) -> List[Toast]:
        items = list(self._queue)
        self._queue.clear()
        return items


class Notebook:
    def __init__(
        self,
        store,
        key: str = STATE_KEY,
        notifier: Optional[Notifier] = None,
        on_render: Optional[Callable[[str], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_title: str = DEFAULT_TITLE,
    ) -> None:
        self.store = store
        self.key = key
        self.notifier = notifier or Notifier()
        self.on_render = on_render
        self.clock = clock
        self.default_title = default_title
        self.state = AppState(title=default_title)
        self.last_markup = ""

    def _now(self) -> str:
        return utc_timestamp(self.clock() if self.clock else None)

    def _persist(self) -> bool:
        return save_state(self.store, self.state, self.key)

    def render(self) -> str:
        self.last_markup = render_app(self.state)
        if self.on_render:
            self.on_render(self.last_markup)
        return self.last_markup

    def _commit(self) -> None:
        self._persist()
        self.render()

    def _reset_to_default(self) -> None:
        self.state.title = self.default_title
        self.state.segments = default_segments()
        self.state.notes = {}

    def load(self) -> AppState:
        loaded = load_state(self.store, self.key)
        if loaded is None:
            self._reset_to_default()
        else:
            if loaded.title:
                self.state.title = loaded.title
            if loaded.segments is not None:
                self.state.segments = loaded.segments
            if loaded.notes is not None:
                self.state.notes = loaded.notes
        if not self.state.segments:
            self._reset_to_default()
        self.render()
        return self.state

    def set_title(self, title: str) -> None:
        self.state.title = title
        self._persist()

    def apply_body(self, raw_body: str, title: Optional[str] = None) -> bool:
        if not (raw_body or "").strip():
            self.notifier.push(MESSAGES["body_empty"], ERROR)
            return False
        lines = split_body(raw_body)
        if not lines:
            self.notifier.push(MESSAGES["body_no_lines"], ERROR)
            return False

        self.state.segments = build_segments(lines)
        self.state.notes = {}
        self.state.editor.close()
        self.state.selection = None
        self.state.active_segment_id = None
        if title is not None:
            self.state.title = title
        logger.info("Body replaced with %s segments", len(lines))
        self._commit()
        self.notifier.push(MESSAGES["body_updated"])
        return True

    def restore_default(self) -> None:
        self._reset_to_default()
        self.state.editor.close()
        self.state.selection = None
        self.state.active_segment_id = None
        self._commit()
        self.notifier.push(MESSAGES["default_restored"])

    def create_note(
        self, segment_id: str, content: str, selection: Optional[SelectionInfo] = None
    ) -> Optional[Note]:
        if not content:
            return None
        if self.state.find_segment(segment_id) is None:
            logger.warning("Ignoring note for unknown segment %s", segment_id)
            return None
        if self.state.note_for(segment_id):
            return self.update_note(segment_id, content)

        timestamp = self._now()
        note = Note(
            id=generate_id("note"),
            segment_id=segment_id,
            start_offset=selection.start_offset if selection else 0,
            end_offset=selection.end_offset if selection else 0,
            content=content,
            created_at=timestamp,
            updated_at=timestamp,
        )
        self.state.notes[segment_id] = note
        self.state.editor.close()
        self.state.active_segment_id = segment_id
        logger.debug("Note %s created on %s", note.id, segment_id)
        self._commit()
        self.notifier.push(MESSAGES["note_added"])
        return note

    def update_note(self, segment_id: str, content: str) -> Optional[Note]:
        note = self.state.note_for(segment_id)
        if not note:
            return None
        note.content = content
        note.updated_at = self._now()
        self.state.editor.close()
        self.state.active_segment_id = segment_id
        logger.debug("Note %s updated", note.id)
        self._commit()
        self.notifier.push(MESSAGES["note_updated"])
        return note

    def delete_note(self, segment_id: str) -> bool:
        note = self.state.notes.pop(segment_id, None)
        if note is None:
            return False
        if self.state.active_segment_id == segment_id:
            self.state.active_segment_id = None
        self.state.editor.close()
        logger.debug("Note %s deleted", note.id)
        self._commit()
        self.notifier.push(MESSAGES["note_deleted"])
        return True

    def save_note(self, segment_id: str, value: str) -> bool:
        content = (value or "").strip()
        if not content:
            self.notifier.push(MESSAGES["note_empty"], ERROR)
            return False
        if self.state.note_for(segment_id):
            return self.update_note(segment_id, content) is not None
        selection = None
        if self.state.editor.is_open_for(segment_id):
            selection = self.state.editor.selection
        if selection is None:
            selection = self.state.selection
        return self.create_note(segment_id, content, selection) is not None

    def save_draft(self) -> bool:
        segment_id = self.state.editor.segment_id
        if segment_id is None:
            return False
        return self.save_note(segment_id, self.state.editor.draft)

    def begin_create(self, segment_id: str, selection: Optional[SelectionInfo] = None) -> bool:
        if self.state.find_segment(segment_id) is None:
            return False
        if self.state.note_for(segment_id):
            return self.begin_edit(segment_id)
        self.state.editor.begin_create(segment_id, selection)
        self.render()
        return True

    def begin_edit(self, segment_id: str) -> bool:
        note = self.state.note_for(segment_id)
        if not note:
            return False
        self.state.editor.begin_edit(segment_id, note.content)
        self.render()
        return True

    def update_draft(self, text: str) -> bool:
        return self.state.editor.update_draft(text)

    def cancel_editor(self) -> bool:
        if not self.state.editor.close():
            return False
        self.render()
        return True

    def clear_selection(self) -> None:
        self.state.selection = None

    def handle_selection(self, rng: Optional[SelectionRange]) -> List[ToolbarAction]:
        if rng is None:
            self.clear_selection()
            return []
        try:
            info = map_selection(build_layout(self.state), rng)
        except CrossSegmentSelection as exc:
            self.clear_selection()
            if exc.text.strip():
                self.notifier.push(MESSAGES["cross_segment"], ERROR)
            return []
        if info is None:
            self.clear_selection()
            return []

        self.state.selection = info
        if self.state.note_for(info.segment_id):
            return [ToolbarAction(VIEW, "View/edit note")]
        return [ToolbarAction(ADD, "Add note")]

    def toolbar_action(self, action: str) -> bool:
        info = self.state.selection
        if info is None or action not in (ADD, VIEW):
            return False
        segment_id = info.segment_id
        if action == ADD:
            handled = self.begin_create(segment_id, info)
        else:
            self.state.active_segment_id = segment_id
            handled = self.begin_edit(segment_id)
            if not handled:
                self.render()
        self.clear_selection()
        return handled

    def set_active(self, segment_id: str) -> None:
        self.state.active_segment_id = segment_id
        self.render()

    def clear_active(self) -> None:
        if self.state.active_segment_id is None:
            return
        self.state.active_segment_id = None
        self.render()

    def click_segment(self, segment_id: str) -> None:
        if self.state.note_for(segment_id):
            self.set_active(segment_id)
        else:
            self.clear_active()

    def press_escape(self) -> None:
        self.clear_selection()
        self.cancel_editor()
