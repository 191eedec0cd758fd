import pytest

from studynote.selection import (
    CrossSegmentSelection,
    SelectionBoundary,
    SelectionRange,
    TextRun,
    boundary_at,
    calculate_offset,
    map_selection,
    range_for,
    selected_text,
)


def _layout():
    return {
        "seg-1": [TextRun("Hello "), TextRun("brave", marked=True), TextRun(" world")],
        "seg-2": [TextRun("Second line")],
    }


def test_offset_within_single_run():
    runs = [TextRun("Line A")]
    assert calculate_offset(runs, 0, 5) == 5


def test_offset_in_later_run_adds_preceding_lengths():
    runs = _layout()["seg-1"]
    assert calculate_offset(runs, 2, 3) == len("Hello ") + len("brave") + 3


def test_offset_for_missing_run_is_total_length():
    runs = [TextRun("abc"), TextRun("de")]
    assert calculate_offset(runs, 7, 1) == 5


def test_selection_spanning_two_runs():
    layout = _layout()
    rng = SelectionRange(
        SelectionBoundary("seg-1", 0, 2),
        SelectionBoundary("seg-1", 1, 3),
    )
    info = map_selection(layout, rng)
    assert info.segment_id == "seg-1"
    assert info.start_offset == 2
    assert info.end_offset == len("Hello ") + 3
    assert info.text == "llo bra"
    assert info.range is rng


def test_collapsed_selection_is_no_selection():
    point = SelectionBoundary("seg-1", 0, 3)
    assert map_selection(_layout(), SelectionRange(point, point)) is None


def test_whitespace_selection_is_no_selection():
    layout = {"seg-1": [TextRun("a   b")]}
    rng = SelectionRange(SelectionBoundary("seg-1", 0, 1), SelectionBoundary("seg-1", 0, 4))
    assert map_selection(layout, rng) is None


def test_cross_segment_selection_is_rejected():
    layout = _layout()
    rng = SelectionRange(SelectionBoundary("seg-1", 2, 1), SelectionBoundary("seg-2", 0, 6))
    with pytest.raises(CrossSegmentSelection) as excinfo:
        map_selection(layout, rng)
    assert excinfo.value.text == "world\nSecond"


def test_boundary_outside_any_segment_is_rejected():
    rng = SelectionRange(SelectionBoundary(None), SelectionBoundary("seg-2", 0, 3))
    with pytest.raises(CrossSegmentSelection):
        map_selection(_layout(), rng)


def test_boundary_at_locates_run():
    layout = _layout()
    assert boundary_at(layout, "seg-1", 0) == SelectionBoundary("seg-1", 0, 0)
    assert boundary_at(layout, "seg-1", 8) == SelectionBoundary("seg-1", 1, 2)
    assert boundary_at(layout, "seg-1", 99) == SelectionBoundary("seg-1", 2, 6)


def test_range_for_round_trips_to_offsets():
    layout = _layout()
    rng = range_for(layout, "seg-1", 12, 4)
    info = map_selection(layout, rng)
    assert (info.start_offset, info.end_offset) == (4, 12)
    assert info.text == selected_text(layout, rng) == "o brave "


def test_backward_range_inside_segment_is_reordered():
    layout = {"seg-1": [TextRun("Line A")]}
    rng = SelectionRange(SelectionBoundary("seg-1", 0, 6), SelectionBoundary("seg-1", 0, 5))
    info = map_selection(layout, rng)
    assert (info.start_offset, info.end_offset) == (5, 6)
    assert info.text == "A"


def test_backward_cross_segment_range_keeps_covered_text():
    layout = {"seg-0": [TextRun("Line A")], "seg-1": [TextRun("Line B")]}
    rng = SelectionRange(SelectionBoundary("seg-1", 0, 4), SelectionBoundary("seg-0", 0, 2))
    with pytest.raises(CrossSegmentSelection) as excinfo:
        map_selection(layout, rng)
    assert excinfo.value.text == "ne A\nLine"


def test_local_offset_is_clamped_to_run_length():
    runs = [TextRun("Line A")]
    assert calculate_offset(runs, 0, 100) == 6
    assert calculate_offset(runs, 0, -3) == 0
