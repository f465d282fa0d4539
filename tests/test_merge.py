"""
Merge engine tests:
- Rectangular merge shape (anchor spans, hidden members, shared group id)
- Non-rectangular selections rejected
- Re-merging over existing groups, unmerge, propagation
"""
import pytest

from core.cell_edits import set_cell_value, toggle_checkbox
from core.merge import anchor_of, create_merge_id, group_bounds, merge_cells, unmerge_cells
from core.types import MergeSelectionError
from utils.cell_ids import rectangle_ids


def test_merge_two_by_two(grid):
    result = merge_cells(grid, rectangle_ids(1, 1, 2, 2))
    merged = result.grid
    assert result.anchor_id == "cell_1_1"

    anchor = merged.get(1, 1)
    assert anchor.is_merged and not anchor.is_hidden
    assert (anchor.row_span, anchor.col_span) == (2, 2)

    group_id = anchor.merge_group_id
    assert group_id == create_merge_id(1, 1, 2, 2)
    for pos in [(1, 2), (2, 1), (2, 2)]:
        member = merged.get(*pos)
        assert member.is_hidden and member.is_merged
        assert member.merge_group_id == group_id
        assert (member.row_span, member.col_span) == (1, 1)

    assert group_bounds(merged, group_id) == (1, 1, 2, 2)
    assert not merged.get(3, 3).is_merged


def test_merge_copies_top_left_content(grid):
    grid = set_cell_value(grid, 1, 1, "A")
    grid = toggle_checkbox(grid, 1, 1)
    merged = merge_cells(grid, ["cell_1_2", "cell_1_1"]).grid
    for pos in [(1, 1), (1, 2)]:
        cell = merged.get(*pos)
        assert cell.sequence_number == "A"
        assert cell.checked and cell.is_blocked


def test_l_shape_rejected(grid):
    with pytest.raises(MergeSelectionError, match="rectangular"):
        merge_cells(grid, ["cell_1_1", "cell_1_2", "cell_2_2"])


def test_duplicate_ids_do_not_fake_a_rectangle(grid):
    with pytest.raises(MergeSelectionError):
        merge_cells(grid, ["cell_1_1", "cell_1_1", "cell_1_1", "cell_2_2"])


def test_fewer_than_two_cells_is_noop(grid):
    result = merge_cells(grid, ["cell_1_1"])
    assert result.grid is grid
    assert result.anchor_id is None


def test_invalid_ids_are_noop(grid):
    assert merge_cells(grid, ["cell_1_1", "cell_9_9"]).anchor_id is None
    assert merge_cells(grid, ["bogus", "cell_1_1"]).anchor_id is None


def test_merge_over_existing_group_dissolves_it(grid):
    first = merge_cells(grid, rectangle_ids(1, 1, 1, 2)).grid
    second = merge_cells(first, rectangle_ids(1, 2, 2, 3)).grid

    # The old group lost its anchor side; (1,1) is back to a plain cell
    assert not second.get(1, 1).is_merged
    assert second.get(1, 2).merge_group_id == create_merge_id(1, 2, 2, 3)
    assert len(second.group_ids()) == 1


def test_unmerge_restores_plain_cells(grid):
    merged = merge_cells(grid, rectangle_ids(1, 1, 2, 3)).grid
    restored = unmerge_cells(merged, "cell_2_2")
    for cell in restored.iter_cells():
        assert not cell.is_merged and not cell.is_hidden
        assert cell.merge_group_id == ""
        assert (cell.row_span, cell.col_span) == (1, 1)


def test_unmerge_unmerged_cell_is_noop(grid):
    assert unmerge_cells(grid, "cell_1_1") is grid
    assert unmerge_cells(grid, None) is grid


def test_anchor_of_hidden_member(grid):
    merged = merge_cells(grid, rectangle_ids(2, 2, 3, 3)).grid
    assert anchor_of(merged, 3, 3).position == (2, 2)
    assert anchor_of(merged, 1, 1).position == (1, 1)
    assert anchor_of(merged, 0, 0) is None


def test_value_edit_propagates_to_group(grid):
    merged = merge_cells(grid, rectangle_ids(1, 1, 2, 2)).grid
    edited = set_cell_value(merged, 1, 1, "X")
    assert {edited.get(r, c).sequence_number for r in (1, 2) for c in (1, 2)} == {"X"}
    assert edited.get(3, 3).sequence_number == "-"


def test_merge_then_unmerge_restores_shape(grid):
    region = rectangle_ids(2, 1, 3, 3)
    before = [grid.get(r, c) for r in (2, 3) for c in (1, 2, 3)]
    merged = merge_cells(grid, region).grid
    restored = unmerge_cells(merged, "cell_2_1")
    after = [restored.get(r, c) for r in (2, 3) for c in (1, 2, 3)]
    assert after == before
