import json

import pytest

from studynote.cli import main
from studynote.config import Config, save_config


def _config(tmp_path):
    path = tmp_path / "studynote_config.yml"
    save_config(str(path), Config(base_dir=str(tmp_path)))
    return str(path)


def _state(tmp_path):
    data = json.loads((tmp_path / "Data" / "state.json").read_text(encoding="utf-8"))
    return json.loads(data["study-note-app-state-v1"])


def test_body_then_note_add_edit_delete(tmp_path, capsys):
    config = _config(tmp_path)
    body = tmp_path / "body.txt"
    body.write_text("Line A\n\nLine B\n", encoding="utf-8")

    assert main(["--config", config, "body", str(body), "--title", "Chem"]) == 0
    state = _state(tmp_path)
    assert state["title"] == "Chem"
    assert [seg["text"] for seg in state["segments"]] == ["Line A", "Line B"]

    assert main(["--config", config, "note", "add", "1", "remember this", "--match", "A"]) == 0
    state = _state(tmp_path)
    seg0, seg1 = state["segments"]
    note = state["notes"][seg0["id"]]
    assert note["content"] == "remember this"
    assert (note["startOffset"], note["endOffset"]) == (5, 6)
    assert seg1["id"] not in state["notes"]

    assert main(["--config", config, "note", "add", "1", "second", "--match", "Line"]) == 0
    assert _state(tmp_path)["notes"][seg0["id"]]["content"] == "second"

    assert main(["--config", config, "note", "edit", "1", "edited"]) == 0
    assert _state(tmp_path)["notes"][seg0["id"]]["content"] == "edited"

    assert main(["--config", config, "note", "delete", "1"]) == 0
    assert _state(tmp_path)["notes"] == {}
    assert main(["--config", config, "note", "delete", "1"]) == 0
    assert "has no note" in capsys.readouterr().out


def test_note_add_rejects_blank_content_and_missing_text(tmp_path, capsys):
    config = _config(tmp_path)
    assert main(["--config", config, "note", "add", "1", "   "]) == 1
    assert main(["--config", config, "note", "add", "1", "x", "--match", "zzz"]) == 1
    assert main(["--config", config, "note", "add", "9", "x"]) == 1
    assert not (tmp_path / "Data" / "state.json").exists()
    out = capsys.readouterr().out
    assert "[error]" in out
    assert "Text not found" in out
    assert "No segment 9" in out


def test_blank_body_is_rejected(tmp_path):
    config = _config(tmp_path)
    body = tmp_path / "empty.txt"
    body.write_text("  \n\n", encoding="utf-8")
    assert main(["--config", config, "body", str(body)]) == 1


def test_show_and_export(tmp_path, capsys):
    config = _config(tmp_path)
    assert main(["--config", config, "show"]) == 0
    out = capsys.readouterr().out
    assert "Segments: 5" in out

    assert main(["--config", config, "export"]) == 0
    site = tmp_path / "Site"
    page = (site / "index.html").read_text(encoding="utf-8")
    assert page.startswith("<!DOCTYPE html>")
    assert "data-action" not in page
    assert "<button" not in page
    assert 'name="title" ' in page and " readonly" in page
    assert (site / "style.css").exists()


def test_reset_and_title(tmp_path):
    config = _config(tmp_path)
    assert main(["--config", config, "title", "Physics"]) == 0
    assert _state(tmp_path)["title"] == "Physics"
    assert main(["--config", config, "reset"]) == 0
    assert len(_state(tmp_path)["segments"]) == 5


def test_config_command_writes_file(tmp_path):
    path = tmp_path / "new_config.yml"
    assert main(["--config", str(path), "config"]) == 0
    assert path.exists()


def test_export_help_points_to_note_commands(capsys):
    with pytest.raises(SystemExit):
        main(["export", "--help"])
    out = capsys.readouterr().out
    assert "read-only" in out
    assert "studynote note" in out
