"""
Cell edit tests: value edits never touch the blocked flag; the checkbox
drives checked, isBlocked and isSelected together across a merge group.
"""
from core.cell_edits import set_cell_value, toggle_checkbox
from core.merge import merge_cells


def test_set_value(grid):
    edited = set_cell_value(grid, 2, 2, "42")
    assert edited.get(2, 2).sequence_number == "42"
    assert grid.get(2, 2).sequence_number == "-"


def test_value_edit_leaves_blocked_flag_alone(grid):
    blocked = toggle_checkbox(grid, 1, 1)
    edited = set_cell_value(blocked, 1, 1, "new")
    assert edited.get(1, 1).is_blocked
    assert edited.get(1, 1).checked


def test_same_value_is_noop(grid):
    assert set_cell_value(grid, 1, 1, "-") is grid


def test_out_of_bounds_edit_is_noop(grid):
    assert set_cell_value(grid, 7, 7, "x") is grid
    assert toggle_checkbox(grid, 0, 1) is grid


def test_toggle_checkbox_twice(grid):
    once = toggle_checkbox(grid, 3, 1)
    cell = once.get(3, 1)
    assert cell.checked and cell.is_blocked and cell.is_selected

    twice = toggle_checkbox(once, 3, 1)
    cell = twice.get(3, 1)
    assert not cell.checked and not cell.is_blocked and not cell.is_selected


def test_toggle_checkbox_on_group(grid):
    merged = merge_cells(grid, ["cell_1_1", "cell_1_2", "cell_1_3"]).grid
    toggled = toggle_checkbox(merged, 1, 1)
    for c in (1, 2, 3):
        assert toggled.get(1, c).is_blocked
    assert not toggled.get(2, 1).is_blocked
