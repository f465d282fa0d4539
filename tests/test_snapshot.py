"""
Snapshot codec tests:
- Encoded structure (ids, indices, field names, metadata)
- Decode rejects unusable payloads
- Decode defaults and repairs per cell
- Encode/decode keeps the observable grid
"""
import json

import pytest

from core.blank import blank_cells
from core.cell_edits import set_cell_value, toggle_checkbox
from core.grid_model import TableGrid
from core.merge import merge_cells
from core.snapshot import (
    decode_snapshot, dumps_snapshot, encode_snapshot, load_snapshot_file, save_snapshot_file,
)
from utils.cell_ids import rectangle_ids


def _grids_equal(a, b):
    return (a.rows, a.cols) == (b.rows, b.cols) and list(a.iter_cells()) == list(b.iter_cells())


def test_encode_structure():
    data = encode_snapshot(TableGrid.create(2, 3), updated_at="2024-01-01T00:00:00.000Z")
    assert data["rows"] == 2
    assert data["columns"] == 3
    assert data["metadata"] == {"updatedAt": "2024-01-01T00:00:00.000Z"}
    assert [row["id"] for row in data["tableRows"]] == ["row_1", "row_2"]

    cell = data["tableRows"][1]["cells"][2]
    assert cell["id"] == "cell_2_3"
    assert (cell["rowIndex"], cell["columnIndex"]) == (2, 3)
    assert cell["sequenceNumber"] == "-"
    assert set(cell) == {
        "id", "sequenceNumber", "isBlocked", "isMerged", "mergeId", "isBlank", "rowIndex",
        "columnIndex", "checked", "isSelected", "rowSpan", "colSpan", "isHidden",
    }


def test_timestamp_format():
    stamp = encode_snapshot(TableGrid.create(1, 1))["metadata"]["updatedAt"]
    assert stamp.endswith("Z")
    assert len(stamp.split(".")[-1]) == 4  # three digits of milliseconds + Z


@pytest.mark.parametrize("raw", [
    None,
    "",
    "not json",
    "[1, 2]",
    json.dumps({"rows": 2, "columns": 2}),
    json.dumps({"rows": 0, "columns": 2, "tableRows": []}),
    json.dumps({"rows": 101, "columns": 2, "tableRows": []}),
    json.dumps({"rows": "3", "columns": 2, "tableRows": []}),
    json.dumps({"rows": True, "columns": 2, "tableRows": []}),
    '{"rows":1,"columns":1,"tableRows":' + '[' * 100000 + ']' * 100000 + '}',
])
def test_unusable_payloads_decode_to_none(raw):
    assert decode_snapshot(raw) is None


def test_missing_fields_get_defaults():
    payload = {"rows": 1, "columns": 2, "tableRows": [{"cells": [{}, {"checked": True}]}]}
    grid = decode_snapshot(payload)
    first, second = grid.get(1, 1), grid.get(1, 2)
    assert first.sequence_number == "-"
    assert (first.row_span, first.col_span) == (1, 1)
    assert not first.is_blank and not first.is_hidden
    # isBlocked falls back to checked when absent
    assert second.is_blocked


def test_present_is_blocked_is_trusted():
    payload = {"rows": 1, "columns": 1,
               "tableRows": [{"cells": [{"checked": True, "isBlocked": False}]}]}
    assert not decode_snapshot(payload).get(1, 1).is_blocked


def test_empty_sequence_number_kept():
    payload = {"rows": 1, "columns": 1, "tableRows": [{"cells": [{"sequenceNumber": ""}]}]}
    assert decode_snapshot(payload).get(1, 1).sequence_number == ""


def test_ids_and_selection_not_read_back():
    payload = {"rows": 1, "columns": 1, "tableRows": [{"cells": [
        {"id": "cell_9_9", "rowIndex": 9, "columnIndex": 9, "isSelected": True},
    ]}]}
    cell = decode_snapshot(payload).get(1, 1)
    assert cell.cell_id == "cell_1_1"
    assert not cell.is_selected


def test_legacy_merge_group_id_accepted():
    payload = {"rows": 1, "columns": 1,
               "tableRows": [{"cells": [{"isMerged": True, "mergeGroupId": "merge_old"}]}]}
    assert decode_snapshot(payload).get(1, 1).merge_group_id == "merge_old"


@pytest.mark.parametrize("span", [0, -2, "wide", None, float("inf")])
def test_bad_spans_become_one(span):
    payload = {"rows": 1, "columns": 1, "tableRows": [{"cells": [{"rowSpan": span, "colSpan": span}]}]}
    cell = decode_snapshot(payload).get(1, 1)
    assert (cell.row_span, cell.col_span) == (1, 1)


def test_short_rows_are_padded():
    payload = {"rows": 2, "columns": 2, "tableRows": [{"cells": [{"sequenceNumber": "a"}]}]}
    grid = decode_snapshot(payload)
    assert (grid.rows, grid.cols) == (2, 2)
    assert grid.get(1, 1).sequence_number == "a"
    assert grid.get(2, 2).sequence_number == "-"


def test_extra_rows_are_truncated():
    data = encode_snapshot(TableGrid.create(3, 3))
    data["rows"] = 2
    grid = decode_snapshot(data)
    assert (grid.rows, grid.cols) == (2, 3)


def test_round_trip_keeps_observable_grid(grid):
    grid = set_cell_value(grid, 1, 1, "A")
    grid = toggle_checkbox(grid, 3, 3)
    grid = merge_cells(grid, rectangle_ids(1, 1, 2, 2)).grid
    grid = blank_cells(grid, ["cell_3_1"])

    decoded = decode_snapshot(dumps_snapshot(grid))
    assert _grids_equal(grid, decoded)


def test_dumps_is_compact(grid):
    assert ", " not in dumps_snapshot(grid, updated_at="x")


def test_file_round_trip(tmp_path, grid):
    path = tmp_path / "table.json"
    grid = set_cell_value(grid, 2, 2, "file")
    save_snapshot_file(grid, str(path))
    assert _grids_equal(grid, load_snapshot_file(str(path)))
