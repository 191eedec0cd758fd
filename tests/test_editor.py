import pytest

from studynote.editor import CREATE, EDIT, Creating, Editing, Idle, NoteEditor
from studynote.models import SelectionInfo


def test_editor_starts_idle():
    editor = NoteEditor()
    assert isinstance(editor.state, Idle)
    assert editor.pending is None
    assert editor.mode is None
    assert editor.draft == ""


def test_begin_create_carries_selection():
    editor = NoteEditor()
    info = SelectionInfo("seg-1", 0, 4, "Line")
    editor.begin_create("seg-1", info)
    assert isinstance(editor.state, Creating)
    assert editor.mode == CREATE
    assert editor.selection is info
    assert editor.is_open_for("seg-1")
    assert not editor.is_open_for("seg-2")


def test_begin_edit_uses_note_content_and_caret_at_end():
    editor = NoteEditor()
    editor.begin_edit("seg-1", "remember this")
    assert isinstance(editor.state, Editing)
    assert editor.mode == EDIT
    assert editor.draft == "remember this"
    assert editor.caret == len("remember this")
    assert editor.selection is None


def test_new_editor_discards_previous_draft():
    editor = NoteEditor()
    editor.begin_create("seg-1")
    editor.update_draft("unsaved words")
    editor.begin_edit("seg-2", "existing")
    assert editor.segment_id == "seg-2"
    assert editor.draft == "existing"


def test_update_draft_requires_open_editor():
    editor = NoteEditor()
    assert editor.update_draft("text") is False
    editor.begin_create("seg-1")
    assert editor.update_draft("text") is True
    assert editor.draft == "text"


def test_close_returns_to_idle():
    editor = NoteEditor()
    assert editor.close() is False
    editor.begin_create("seg-1")
    assert editor.close() is True
    assert isinstance(editor.state, Idle)


def test_unknown_state_is_rejected():
    editor = NoteEditor()
    editor._state = object()
    with pytest.raises(TypeError):
        editor.mode
