"""CLI entry point."""

from __future__ import annotations

import argparse
import os
import shutil
import sys
from typing import Optional, Tuple

from .config import Config, DEFAULT_CONFIG_PATH, load_config_or_default, resolve_port, save_config
from .logging_utils import setup_logging
from .models import Segment
from .notebook import ERROR, Notebook
from .renderer import build_layout, render_document
from .selection import range_for
from .server import serve
from .storage import LocalStore, ensure_dir, ensure_structure

STYLESHEET_PATH = os.path.join(os.path.dirname(__file__), "static", "style.css")


def _open_notebook(config: Config) -> Notebook:
    ensure_structure(config.root)
    setup_logging(config)
    store = LocalStore(config.state_path)
    notebook = Notebook(
        store,
        key=config.storage.key,
        default_title=config.notes.default_title,
    )
    notebook.load()
    return notebook


def _flush_toasts(notebook: Notebook) -> int:
    status = 0
    for toast in notebook.notifier.drain():
        print(f"[{toast.kind}] {toast.message}")
        if toast.kind == ERROR:
            status = 1
    return status


def _segment_at(notebook: Notebook, number: int) -> Optional[Segment]:
    segments = notebook.state.segments
    if number < 1 or number > len(segments):
        print(f"No segment {number} (the body has {len(segments)} segments)")
        return None
    return segments[number - 1]


def _selection_bounds(args: argparse.Namespace, segment: Segment) -> Optional[Tuple[int, int]]:
    if args.match is not None:
        start = segment.text.find(args.match)
        if start < 0:
            print(f"Text not found in segment {args.number}: {args.match!r}")
            return None
        return start, start + len(args.match)
    if args.start is None or args.end is None:
        return 0, len(segment.text)
    return args.start, args.end


def export_site(notebook: Notebook, out_dir: str) -> str:
    ensure_dir(out_dir)
    index_path = os.path.join(out_dir, "index.html")
    with open(index_path, "w", encoding="utf-8") as handle:
        handle.write(render_document(notebook.state, stylesheet="style.css", read_only=True))
    shutil.copyfile(STYLESHEET_PATH, os.path.join(out_dir, "style.css"))
    return index_path


def _print_notebook(notebook: Notebook) -> None:
    state = notebook.state
    print(f"Title: {state.title}")
    print(f"Segments: {len(state.segments)}")
    for number, segment in enumerate(state.segments, start=1):
        print(f"{number:>3}  {segment.text}")
        note = state.note_for(segment.id)
        if note:
            quoted = segment.text[note.start_offset : note.end_offset]
            print(f"     note [{note.start_offset}:{note.end_offset}] {quoted!r}: {note.content}")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(prog="studynote")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Config file.")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("show", help="Print the title, segments and notes.")

    title_cmd = sub.add_parser("title", help="Set the title.")
    title_cmd.add_argument("text", help="New title.")

    body_cmd = sub.add_parser("body", help="Replace the body text (clears all notes).")
    body_cmd.add_argument("path", help="Text file, or - for stdin.")
    body_cmd.add_argument("--title", help="Title to set along with the body.")

    sub.add_parser("reset", help="Restore the sample body.")

    note_cmd = sub.add_parser("note", help="Add, edit or delete a note.")
    note_sub = note_cmd.add_subparsers(dest="note_command")
    add_cmd = note_sub.add_parser("add")
    add_cmd.add_argument("number", type=int, help="Segment number (1-based).")
    add_cmd.add_argument("content", help="Note text.")
    add_cmd.add_argument("--match", help="Select the first occurrence of this text.")
    add_cmd.add_argument("--start", type=int, help="Selection start offset.")
    add_cmd.add_argument("--end", type=int, help="Selection end offset.")
    edit_cmd = note_sub.add_parser("edit")
    edit_cmd.add_argument("number", type=int, help="Segment number (1-based).")
    edit_cmd.add_argument("content", help="New note text.")
    delete_cmd = note_sub.add_parser("delete")
    delete_cmd.add_argument("number", type=int, help="Segment number (1-based).")

    export_cmd = sub.add_parser(
        "export",
        help="Write a read-only index.html and style.css (change notes with `studynote note`).",
    )
    export_cmd.add_argument("--out", help="Output directory (defaults to the asset dir).")

    serve_cmd = sub.add_parser(
        "serve",
        help="Serve the exported read-only page over HTTP (change notes with `studynote note`).",
    )
    serve_cmd.add_argument("--host", help="Bind address.")
    serve_cmd.add_argument("--port", type=int, help="Port (PORT env var also works).")
    serve_cmd.add_argument("--root", help="Asset directory to serve.")

    sub.add_parser("config", help="Write a default config file if none exists.")

    args = parser.parse_args(argv)

    if args.command == "config":
        if os.path.exists(args.config):
            print(f"Config already exists: {args.config}")
            return 0
        save_config(args.config, Config())
        print(f"Wrote {args.config}")
        return 0

    config = load_config_or_default(args.config)

    if args.command == "serve":
        root = args.root or config.asset_root
        if not os.path.isfile(os.path.join(root, "index.html")):
            print(f"No index.html in {root}; run `studynote export` first.")
        setup_logging(config)
        port = args.port if args.port is not None else resolve_port(config)
        serve(root, host=args.host or config.server.host, port=port)
        return 0

    if args.command is None or (args.command == "note" and args.note_command is None):
        parser.print_help()
        return 0

    notebook = _open_notebook(config)

    if args.command == "show":
        _print_notebook(notebook)
        return 0

    if args.command == "title":
        notebook.set_title(args.text)
        print(f"Title: {notebook.state.title}")
        return 0

    if args.command == "body":
        if args.path == "-":
            raw = sys.stdin.read()
        else:
            with open(args.path, "r", encoding="utf-8") as handle:
                raw = handle.read()
        notebook.apply_body(raw, title=args.title)
        return _flush_toasts(notebook)

    if args.command == "reset":
        notebook.restore_default()
        return _flush_toasts(notebook)

    if args.command == "export":
        index_path = export_site(notebook, args.out or config.asset_root)
        print(f"Wrote {index_path}")
        return 0

    segment = _segment_at(notebook, args.number)
    if segment is None:
        return 1

    if args.note_command == "add":
        bounds = _selection_bounds(args, segment)
        if bounds is None:
            return 1
        rng = range_for(build_layout(notebook.state), segment.id, *bounds)
        actions = notebook.handle_selection(rng)
        if not actions:
            if not notebook.notifier.pending():
                print("Nothing selected.")
            _flush_toasts(notebook)
            return 1
        notebook.toolbar_action(actions[0].type)
        notebook.update_draft(args.content)
        notebook.save_draft()
        return _flush_toasts(notebook)

    if args.note_command == "edit":
        if not notebook.begin_edit(segment.id):
            print(f"Segment {args.number} has no note.")
            return 1
        notebook.update_draft(args.content)
        notebook.save_draft()
        return _flush_toasts(notebook)

    if args.note_command == "delete":
        if not notebook.delete_note(segment.id):
            print(f"Segment {args.number} has no note.")
            return 0
        return _flush_toasts(notebook)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
