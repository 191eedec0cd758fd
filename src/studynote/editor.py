"""Single note editor state machine.

At most one segment can have an open editor at a time. The editor is either
idle, creating a new note from a selection, or editing an existing note.
Opening a new editor silently discards whatever draft was open before.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SelectionInfo


CREATE = "create"
EDIT = "edit"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass
class Creating:
    segment_id: str
    selection: Optional["SelectionInfo"] = None
    draft: str = ""


@dataclass
class Editing:
    segment_id: str
    draft: str = ""


EditorState = Union[Idle, Creating, Editing]

IDLE = Idle()


class NoteEditor:
    def __init__(self) -> None:
        self._state: EditorState = IDLE

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def pending(self) -> Optional[Union[Creating, Editing]]:
        state = self._state
        if isinstance(state, Idle):
            return None
        if isinstance(state, (Creating, Editing)):
            return state
        raise TypeError(f"Unknown editor state: {state!r}")

    @property
    def is_open(self) -> bool:
        return self.pending is not None

    @property
    def segment_id(self) -> Optional[str]:
        pending = self.pending
        return pending.segment_id if pending else None

    @property
    def mode(self) -> Optional[str]:
        state = self._state
        if isinstance(state, Idle):
            return None
        if isinstance(state, Creating):
            return CREATE
        if isinstance(state, Editing):
            return EDIT
        raise TypeError(f"Unknown editor state: {state!r}")

    @property
    def draft(self) -> str:
        pending = self.pending
        return pending.draft if pending else ""

    @property
    def caret(self) -> int:
        # Focus always lands at the end of the draft.
        return len(self.draft)

    @property
    def selection(self) -> Optional["SelectionInfo"]:
        state = self._state
        if isinstance(state, Creating):
            return state.selection
        return None

    def is_open_for(self, segment_id: str) -> bool:
        return self.segment_id == segment_id

    def begin_create(
        self, segment_id: str, selection: Optional["SelectionInfo"] = None
    ) -> Creating:
        self._state = Creating(segment_id=segment_id, selection=selection)
        return self._state

    def begin_edit(self, segment_id: str, content: str) -> Editing:
        self._state = Editing(segment_id=segment_id, draft=content)
        return self._state

    def update_draft(self, text: str) -> bool:
        pending = self.pending
        if pending is None:
            return False
        pending.draft = text
        return True

    def close(self) -> bool:
        was_open = self.is_open
        self._state = IDLE
        return was_open
