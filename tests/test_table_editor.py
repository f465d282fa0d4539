"""
TableEditor tests:
- Startup from snapshot / host dimensions / defaults
- Every mutation recomputes statistics and saves the committed grid
- Inbound snapshot and dimension echoes are suppressed
- Capability switches, rejected edits and undo/redo
"""
import json

import pytest

from core.grid_model import TableGrid
from core.merge import merge_cells
from core.snapshot import decode_snapshot, dumps_snapshot
from core.table_editor import (
    ACTION_BLANK, ACTION_GENERATE, ACTION_MERGE, ACTION_REDO, ACTION_UNDO, ACTION_UNMERGE,
)
from utils.cell_ids import rectangle_ids


def _saved(host):
    return decode_snapshot(host.snapshot)


def _select(editor, *positions):
    for row, col in positions:
        editor.click_cell(row, col)


# =============================================================================
# STARTUP
# =============================================================================

def test_start_uses_host_dimensions(editor_factory):
    editor, host = editor_factory(rows=4, cols=5)
    assert (editor.grid.rows, editor.grid.cols) == (4, 5)
    assert (_saved(host).rows, _saved(host).cols) == (4, 5)
    assert host.statistics.total == 20


def test_start_falls_back_to_config_defaults(editor_factory):
    editor, host = editor_factory(rows=None, cols=0, default_rows=2, default_columns=6)
    assert (editor.grid.rows, editor.grid.cols) == (2, 6)
    assert (host.rows, host.cols) == (2, 6)


def test_start_prefers_snapshot(editor_factory):
    stored = merge_cells(TableGrid.create(2, 2), rectangle_ids(1, 1, 1, 2)).grid
    editor, host = editor_factory(rows=9, cols=9, snapshot=dumps_snapshot(stored))
    assert (editor.grid.rows, editor.grid.cols) == (2, 2)
    assert editor.grid.get(1, 1).col_span == 2
    # Host counts follow the loaded grid
    assert (host.rows, host.cols) == (2, 2)
    assert host.statistics.merged == 1


def test_start_with_malformed_snapshot_creates_default(editor_factory):
    editor, host = editor_factory(rows=2, cols=2, snapshot="{broken")
    assert (editor.grid.rows, editor.grid.cols) == (2, 2)
    assert _saved(host) is not None


# =============================================================================
# MUTATION PIPELINE
# =============================================================================

def test_edit_value_saves_and_notifies(editor, host):
    changes = host.table_changes
    assert editor.edit_value(2, 2, "hello")
    assert _saved(host).get(2, 2).sequence_number == "hello"
    assert host.table_changes == changes + 1
    assert host.cell_interactions == 1


def test_statistics_match_committed_grid(editor, host):
    _select(editor, (1, 1), (1, 2))
    editor.merge_selected()
    assert host.statistics.merged == 1
    assert _saved(host).get(1, 1).col_span == 2

    editor.toggle_checkbox(3, 3)
    assert host.statistics.blocked == 1
    assert _saved(host).get(3, 3).is_blocked


def test_noop_edit_does_not_save(editor, host):
    changes = host.table_changes
    assert not editor.edit_value(1, 1, "-")
    assert host.table_changes == changes


def test_add_row_and_column(editor, host):
    assert editor.add_row()
    assert editor.add_column()
    assert (editor.grid.rows, editor.grid.cols) == (4, 4)
    assert (host.rows, host.cols) == (4, 4)
    assert host.statistics.total == 16


def test_add_row_past_limit_shows_notice(editor_factory):
    editor, host = editor_factory(rows=100, cols=1)
    assert not editor.add_row()
    assert host.notices[-1].severity == "error"
    assert "Maximum 100 rows" in host.notices[-1].message
    assert editor.grid.rows == 100


@pytest.mark.parametrize("rows,cols", [(101, 3), (0, 3), (3, -1)])
def test_generate_with_bad_dimensions_rejected(editor, host, rows, cols):
    assert not editor.generate_table(rows, cols)
    assert (editor.grid.rows, editor.grid.cols) == (3, 3)
    assert len(host.notices) == 1


def test_generate_table_resizes(editor, host):
    editor.edit_value(1, 1, "kept")
    assert editor.generate_table(5, 2)
    assert (editor.grid.rows, editor.grid.cols) == (5, 2)
    assert editor.grid.get(1, 1).sequence_number == "kept"
    assert (host.rows, host.cols) == (5, 2)


def test_generate_same_size_keeps_selection(editor, host):
    _select(editor, (1, 1), (2, 2))
    changes = host.table_changes
    assert not editor.generate_table(3, 3)
    assert editor.selection.selected_cells == {"cell_1_1", "cell_2_2"}
    assert host.table_changes == changes


def test_generate_new_size_clears_selection(editor):
    _select(editor, (1, 1))
    assert editor.generate_table(4, 4)
    assert editor.selection.count == 0


# =============================================================================
# SELECTION ACTIONS
# =============================================================================

def test_drag_then_merge(editor, host):
    editor.press_cell(2, 2)
    editor.enter_cell(3, 3)
    editor.release_pointer()
    assert editor.selection.count == 4

    assert editor.merge_selected()
    anchor = editor.grid.get(2, 2)
    assert (anchor.row_span, anchor.col_span) == (2, 2)
    assert editor.selection.selected_cells == {"cell_2_2"}


def test_non_rectangular_merge_rejected(editor, host):
    _select(editor, (1, 1), (1, 2), (2, 2))
    before = editor.grid
    assert not editor.merge_selected()
    assert editor.grid is before
    assert host.notices[-1].message == "Please select a rectangular area to merge"
    assert editor.selection.selected_cells == {"cell_1_1", "cell_1_2", "cell_2_2"}


def test_merge_single_cell_is_silent(editor, host):
    _select(editor, (1, 1))
    assert not editor.merge_selected()
    assert host.notices == []


def test_unmerge_first_selected(editor):
    _select(editor, (1, 1), (1, 2), (1, 3))
    editor.merge_selected()
    assert editor.unmerge_selected()
    assert not editor.grid.group_ids()


def test_blank_clears_selection(editor, host):
    _select(editor, (1, 1), (2, 2))
    assert editor.blank_selected()
    assert editor.selection.count == 0
    assert host.statistics.blank == 2

    _select(editor, (1, 1))
    assert editor.unblank_selected()
    assert host.statistics.blank == 1


def test_blank_without_selection_is_noop(editor, host):
    changes = host.table_changes
    assert not editor.blank_selected()
    assert host.table_changes == changes


def test_select_all_and_label(editor):
    editor.select_all()
    assert editor.selection_label() == "9 cell(s) selected"
    editor.clear_selection()
    assert editor.selection_label() == "0 cell(s) selected"


def test_click_notifies_host(editor, host):
    editor.click_cell(1, 1)
    assert host.cell_interactions == 1
    assert editor.selection.count == 1


def test_click_out_of_bounds_ignored(editor, host):
    assert not editor.click_cell(4, 1)
    assert host.cell_interactions == 0


# =============================================================================
# CAPABILITY SWITCHES
# =============================================================================

def test_selection_disabled_still_notifies(editor_factory):
    editor, host = editor_factory(enable_cell_merging=False, enable_cell_blanking=False)
    assert not editor.click_cell(1, 1)
    assert host.cell_interactions == 1
    assert editor.selection.count == 0


def test_disabled_capabilities_are_noops(editor_factory):
    editor, host = editor_factory(enable_checkbox=False, enable_cell_editing=False,
                                  enable_cell_merging=False, show_add_row_button=False,
                                  show_add_column_button=False, show_generate_button=False)
    before = editor.grid
    _select(editor, (1, 1), (1, 2))
    assert not editor.toggle_checkbox(1, 1)
    assert not editor.edit_value(1, 1, "x")
    assert not editor.merge_selected()
    assert not editor.add_row()
    assert not editor.add_column()
    assert not editor.generate_table(4, 4)
    assert editor.grid is before


def test_available_actions(editor_factory):
    editor, _ = editor_factory()
    assert ACTION_MERGE not in editor.available_actions()
    assert ACTION_GENERATE in editor.available_actions()

    _select(editor, (1, 1))
    actions = editor.available_actions()
    assert ACTION_UNMERGE in actions and ACTION_BLANK in actions
    assert ACTION_MERGE not in actions

    _select(editor, (1, 2))
    assert ACTION_MERGE in editor.available_actions()

    editor, _ = editor_factory(enable_cell_blanking=False, show_generate_button=False)
    _select(editor, (1, 1))
    actions = editor.available_actions()
    assert ACTION_BLANK not in actions
    assert ACTION_GENERATE not in actions


# =============================================================================
# HOST SYNC
# =============================================================================

def test_own_snapshot_echo_ignored(editor, host):
    editor.edit_value(1, 1, "A")
    host.run_timers()
    current = editor.grid
    assert not editor.on_snapshot_changed()
    assert editor.grid is current


def test_inbound_snapshot_ignored_while_saving(editor, host):
    editor.edit_value(1, 1, "A")
    host.snapshot = dumps_snapshot(TableGrid.create(1, 1))
    assert not editor.on_snapshot_changed()
    assert editor.grid.rows == 3


def test_external_snapshot_replaces_grid(editor, host):
    editor.edit_value(1, 1, "A")
    host.run_timers()
    host.snapshot = dumps_snapshot(TableGrid.create(2, 4))
    assert editor.on_snapshot_changed()
    assert (editor.grid.rows, editor.grid.cols) == (2, 4)
    assert not editor.command_history.can_undo()
    assert host.statistics.total == 8


def test_invalid_external_snapshot_keeps_grid(editor, host):
    host.snapshot = json.dumps({"rows": 500, "columns": 2, "tableRows": []})
    current = editor.grid
    assert not editor.on_snapshot_changed()
    assert editor.grid is current


def test_dimension_echo_ignored_once(editor, host):
    editor.add_row()
    host.run_timers()
    # First inbound update is the echo of our own write
    assert editor.echo_guard.armed
    assert not editor.on_dimensions_changed()

    host.rows, host.cols = 2, 2
    assert editor.on_dimensions_changed()
    assert (editor.grid.rows, editor.grid.cols) == (2, 2)


def test_external_dimension_change_resizes(editor, host):
    host.rows = 5
    assert editor.on_dimensions_changed()
    assert (editor.grid.rows, editor.grid.cols) == (5, 3)
    assert _saved(host).rows == 5
    assert not editor.echo_guard.armed


def test_invalid_external_dimensions_ignored(editor, host):
    host.rows, host.cols = 0, 200
    assert not editor.on_dimensions_changed()
    assert (editor.grid.rows, editor.grid.cols) == (3, 3)


# =============================================================================
# UNDO/REDO
# =============================================================================

def test_undo_redo_restores_and_saves(editor, host):
    editor.edit_value(1, 1, "A")
    editor.click_cell(2, 2)

    assert editor.undo()
    assert editor.grid.get(1, 1).sequence_number == "-"
    assert _saved(host).get(1, 1).sequence_number == "-"
    assert editor.selection.count == 0
    assert ACTION_REDO in editor.available_actions()

    assert editor.redo()
    assert _saved(host).get(1, 1).sequence_number == "A"
    assert ACTION_UNDO in editor.available_actions()


def test_undo_with_empty_history(editor):
    assert not editor.undo()
    assert not editor.redo()


def test_undo_restores_previous_version_object(editor):
    before = editor.grid
    editor.toggle_checkbox(1, 1)
    editor.undo()
    assert editor.grid is before
