"""Map a text selection back to character offsets inside one segment.

A rendered segment is a flat sequence of text runs (plain text and marked
note ranges). A selection boundary names the segment container, the run it
falls in and the offset inside that run. Offsets are computed by walking the
runs in order and accumulating their lengths.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .models import SelectionInfo


@dataclass(frozen=True)
class TextRun:
    text: str
    marked: bool = False


SegmentLayout = Dict[str, List[TextRun]]


@dataclass(frozen=True)
class SelectionBoundary:
    segment_id: Optional[str]
    run_index: int = 0
    offset: int = 0


@dataclass(frozen=True)
class SelectionRange:
    start: SelectionBoundary
    end: SelectionBoundary

    @property
    def collapsed(self) -> bool:
        return self.start == self.end


class CrossSegmentSelection(ValueError):
    """Selection starts and ends in different segment containers."""

    def __init__(self, text: str) -> None:
        super().__init__("Selection must stay within one segment")
        self.text = text


def calculate_offset(runs: Sequence[TextRun], run_index: int, local_offset: int) -> int:
    offset = 0
    for index, run in enumerate(runs):
        if index == run_index:
            return offset + min(max(local_offset, 0), len(run.text))
        offset += len(run.text)
    return offset


def segment_text(runs: Sequence[TextRun]) -> str:
    return "".join(run.text for run in runs)


def boundary_at(
    layout: SegmentLayout, segment_id: str, char_offset: int
) -> SelectionBoundary:
    """Locate the run containing a character offset of a segment."""
    runs = layout.get(segment_id, [])
    remaining = max(0, char_offset)
    for index, run in enumerate(runs):
        if remaining <= len(run.text):
            return SelectionBoundary(segment_id, index, remaining)
        remaining -= len(run.text)
    if runs:
        return SelectionBoundary(segment_id, len(runs) - 1, len(runs[-1].text))
    return SelectionBoundary(segment_id, 0, 0)


def range_for(
    layout: SegmentLayout, segment_id: str, start: int, end: int
) -> SelectionRange:
    if end < start:
        start, end = end, start
    return SelectionRange(
        boundary_at(layout, segment_id, start), boundary_at(layout, segment_id, end)
    )


def _absolute(layout: SegmentLayout, boundary: SelectionBoundary) -> int:
    runs = layout.get(boundary.segment_id or "", [])
    return calculate_offset(runs, boundary.run_index, boundary.offset)


def _position(layout: SegmentLayout, boundary: SelectionBoundary) -> tuple:
    order = list(layout.keys())
    return order.index(boundary.segment_id), _absolute(layout, boundary)


def in_document_order(layout: SegmentLayout, rng: SelectionRange) -> SelectionRange:
    """Return the range with its start before its end."""
    if rng.start.segment_id not in layout or rng.end.segment_id not in layout:
        return rng
    if _position(layout, rng.end) < _position(layout, rng.start):
        return SelectionRange(rng.end, rng.start)
    return rng


def selected_text(layout: SegmentLayout, rng: SelectionRange) -> str:
    rng = in_document_order(layout, rng)
    start_id = rng.start.segment_id
    end_id = rng.end.segment_id
    if start_id is not None and start_id == end_id:
        text = segment_text(layout.get(start_id, []))
        return text[_absolute(layout, rng.start) : _absolute(layout, rng.end)]

    # Spans several containers: join the covered pieces in layout order.
    order = list(layout.keys())
    first = order.index(start_id) if start_id in layout else 0
    last = order.index(end_id) if end_id in layout else len(order) - 1
    pieces = []
    for position in range(first, last + 1):
        segment_id = order[position]
        text = segment_text(layout[segment_id])
        lo = _absolute(layout, rng.start) if segment_id == start_id else 0
        hi = _absolute(layout, rng.end) if segment_id == end_id else len(text)
        pieces.append(text[lo:hi])
    return "\n".join(pieces)


def map_selection(layout: SegmentLayout, rng: SelectionRange) -> Optional[SelectionInfo]:
    if rng.collapsed:
        return None
    rng = in_document_order(layout, rng)

    start_id = rng.start.segment_id
    end_id = rng.end.segment_id
    if start_id is None or end_id is None or start_id != end_id or start_id not in layout:
        raise CrossSegmentSelection(selected_text(layout, rng))

    text = selected_text(layout, rng)
    if not text.strip():
        return None

    runs = layout[start_id]
    return SelectionInfo(
        segment_id=start_id,
        start_offset=calculate_offset(runs, rng.start.run_index, rng.start.offset),
        end_offset=calculate_offset(runs, rng.end.run_index, rng.end.offset),
        text=text,
        range=rng,
    )
