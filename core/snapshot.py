"""
Snapshot codec: the serialized form of a whole grid.

Wire format (JSON object):
    rows, columns: grid size
    tableRows: [{id, rowIndex, cells: [{id, rowIndex, columnIndex,
                sequenceNumber, isBlocked, isMerged, mergeId, isBlank,
                checked, isSelected, rowSpan, colSpan, isHidden}]}]
    metadata: {updatedAt}

Loader rules:
- A payload that does not parse, is not an object, has no ``tableRows`` list
  or has rows/columns outside 1..100 decodes to None ("no data").
- Every cell field is defaulted individually when absent.
- ``isBlocked`` falls back to the decoded ``checked`` only when it is absent;
  a present value is trusted as-is for older snapshots.
- Ids and indices are recomputed from position, never read back.
- Selection state (``isSelected``) is always reset.
"""
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from core.grid_model import TableGrid
from core.types import Cell, DEFAULT_SEQUENCE_NUMBER, MAX_DIMENSION
from utils.cell_ids import cell_id, row_id

logger = logging.getLogger(__name__)

RawSnapshot = Union[str, bytes, Dict[str, Any], None]


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# EXPORT
# =============================================================================

def _encode_cell(cell: Cell) -> Dict[str, Any]:
    return {
        "id": cell_id(cell.row, cell.col),
        "sequenceNumber": cell.sequence_number,
        "isBlocked": cell.is_blocked,
        "isMerged": cell.is_merged,
        "mergeId": cell.merge_group_id,
        "isBlank": cell.is_blank,
        "rowIndex": cell.row,
        "columnIndex": cell.col,
        "checked": cell.checked,
        "isSelected": cell.is_selected,
        "rowSpan": cell.row_span,
        "colSpan": cell.col_span,
        "isHidden": cell.is_hidden,
    }


def encode_snapshot(grid: TableGrid, updated_at: Optional[str] = None) -> Dict[str, Any]:
    """
    Export a grid to the snapshot structure.

    Args:
        grid: Grid version to export
        updated_at: Timestamp to record; defaults to the current UTC time

    Returns:
        JSON-serializable dict
    """
    table_rows = []
    for r, row in enumerate(grid.cells, start=1):
        table_rows.append({
            "id": row_id(r),
            "rowIndex": r,
            # Indices come from position, not from whatever the cell carries
            "cells": [_encode_cell(cell.at(r, c)) for c, cell in enumerate(row, start=1)],
        })
    return {
        "rows": grid.rows,
        "columns": grid.cols,
        "tableRows": table_rows,
        "metadata": {"updatedAt": updated_at or _utc_timestamp()},
    }


def dumps_snapshot(grid: TableGrid, updated_at: Optional[str] = None) -> str:
    """Export a grid as the compact JSON string handed to the host."""
    return json.dumps(encode_snapshot(grid, updated_at), separators=(",", ":"))


# =============================================================================
# IMPORT
# =============================================================================

def _as_dimension(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not (1 <= value <= MAX_DIMENSION):
        return None
    return value


def repair_span(value: Any) -> int:
    """Span as stored in a snapshot, repaired to a positive int (1 when unusable)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 1
    if isinstance(value, float) and not math.isfinite(value):
        return 1
    value = int(value)
    return value if value >= 1 else 1


def _decode_cell(raw: Any, row: int, col: int) -> Cell:
    if not isinstance(raw, dict):
        return Cell.default(row, col)

    sequence_number = raw.get("sequenceNumber")
    checked = bool(raw.get("checked", False))
    is_blocked = raw.get("isBlocked")
    merge_id = raw.get("mergeId", raw.get("mergeGroupId"))

    return Cell(
        row=row,
        col=col,
        sequence_number=DEFAULT_SEQUENCE_NUMBER if sequence_number is None else str(sequence_number),
        checked=checked,
        is_blocked=checked if is_blocked is None else bool(is_blocked),
        is_merged=bool(raw.get("isMerged", False)),
        merge_group_id=str(merge_id) if merge_id else "",
        is_blank=bool(raw.get("isBlank", False)),
        row_span=repair_span(raw.get("rowSpan")),
        col_span=repair_span(raw.get("colSpan")),
        is_hidden=bool(raw.get("isHidden", False)),
        is_selected=False,
    )


def decode_snapshot(raw: RawSnapshot) -> Optional[TableGrid]:
    """
    Import a snapshot.

    Args:
        raw: JSON text, bytes, an already-parsed dict, or None

    Returns:
        The decoded TableGrid, or None when there is no usable data
    """
    if raw is None or raw == "" or raw == b"":
        return None

    data = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            logger.warning(f"Error loading table snapshot: {e}")
            return None

    if not isinstance(data, dict):
        logger.warning("Error loading table snapshot: payload is not an object")
        return None

    rows = _as_dimension(data.get("rows"))
    cols = _as_dimension(data.get("columns"))
    table_rows = data.get("tableRows")
    if rows is None or cols is None or not isinstance(table_rows, list):
        logger.warning(
            f"Ignoring table snapshot with rows={data.get('rows')!r}, "
            f"columns={data.get('columns')!r}, tableRows present={isinstance(table_rows, list)}"
        )
        return None

    matrix: List[List[Cell]] = []
    for r in range(1, rows + 1):
        raw_row = table_rows[r - 1] if r <= len(table_rows) else None
        raw_cells = raw_row.get("cells") if isinstance(raw_row, dict) else None
        if not isinstance(raw_cells, list):
            raw_cells = []
        matrix.append([
            _decode_cell(raw_cells[c - 1] if c <= len(raw_cells) else None, r, c)
            for c in range(1, cols + 1)
        ])

    if len(table_rows) != rows or any(
        not isinstance(row, dict) or not isinstance(row.get("cells"), list) or len(row["cells"]) != cols
        for row in table_rows
    ):
        logger.info(f"Snapshot shape repaired to {rows}x{cols}")

    return TableGrid.from_rows(matrix)


def load_snapshot_file(filename: str) -> Optional[TableGrid]:
    """Load a grid from a snapshot JSON file."""
    with open(filename, 'r', encoding='utf-8') as f:
        return decode_snapshot(f.read())


def save_snapshot_file(grid: TableGrid, filename: str) -> None:
    """Save a grid to a snapshot JSON file."""
    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(encode_snapshot(grid), f, indent=2)
