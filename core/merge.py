"""
Rectangular cell merging.

A merge group is identified by an id derived from its bounds and found by
scanning for that id. The anchor (top-left member) is the only visible cell
and carries the group's spans; every other member is hidden with spans 1.

The group propagation helpers here are shared with blanking and with value /
checkbox edits: any write to one member is mirrored to the whole group.
"""
import logging
from dataclasses import replace
from typing import Any, Iterable, NamedTuple, Optional, Tuple

from core.grid_model import TableGrid
from core.types import Cell, MergeSelectionError
from utils.cell_ids import bounding_box, cell_id, parse_cell_id

logger = logging.getLogger(__name__)


class MergeResult(NamedTuple):
    grid: TableGrid
    anchor_id: Optional[str]  # None when nothing was merged


def create_merge_id(min_row: int, min_col: int, max_row: int, max_col: int) -> str:
    """Deterministic group id for a rectangle."""
    return f"merge_{min_row}_{min_col}_{max_row}_{max_col}"


def dissolve_group(grid: TableGrid, group_id: str) -> TableGrid:
    """Reset every member of a group to the un-merged shape."""
    if not group_id:
        return grid
    return grid.transform(lambda cell: cell.unmerged() if cell.merge_group_id == group_id else cell)


def propagate_to_group(grid: TableGrid, row: int, col: int, **changes: Any) -> TableGrid:
    """
    Apply field changes to a cell and to every member of its merge group.

    Returns the grid unchanged when the position is out of bounds.
    """
    target = grid.get(row, col)
    if target is None:
        return grid
    group_id = target.merge_group_id

    def _apply(cell: Cell) -> Cell:
        if cell.position == target.position or (group_id and cell.merge_group_id == group_id):
            updated = replace(cell, **changes)
            return cell if updated == cell and updated.is_selected == cell.is_selected else updated
        return cell

    return grid.transform(_apply)


def anchor_of(grid: TableGrid, row: int, col: int) -> Optional[Cell]:
    """The visible cell covering a position (its group anchor when hidden)."""
    cell = grid.get(row, col)
    if cell is None or not cell.is_hidden:
        return cell
    for candidate in grid.iter_cells():
        if candidate.merge_group_id == cell.merge_group_id and not candidate.is_hidden:
            return candidate
    return cell


def _selected_positions(grid: TableGrid, selection: Iterable[str]) -> Optional[set]:
    positions = set()
    for cid in selection:
        pos = parse_cell_id(cid)
        if pos is None or not grid.in_bounds(*pos):
            return None
        positions.add(pos)
    return positions


def merge_cells(grid: TableGrid, selection: Iterable[str]) -> MergeResult:
    """
    Merge a rectangular selection into one group.

    Args:
        grid: Current grid version
        selection: Selected cell ids; must be exactly a filled rectangle

    Returns:
        MergeResult with the new grid and the anchor id, or the unchanged
        grid and None when fewer than two valid cells are selected

    Raises:
        MergeSelectionError: If the selection is not exactly its bounding rectangle
    """
    positions = _selected_positions(grid, selection)
    if positions is None or len(positions) < 2:
        return MergeResult(grid, None)

    min_row, min_col, max_row, max_col = bounding_box(positions)
    height = max_row - min_row + 1
    width = max_col - min_col + 1
    if len(positions) != height * width:
        raise MergeSelectionError("Please select a rectangular area to merge")

    def inside(cell: Cell) -> bool:
        return min_row <= cell.row <= max_row and min_col <= cell.col <= max_col

    # Dissolve any existing group touching the rectangle first
    touched = {cell.merge_group_id for cell in grid.iter_cells() if inside(cell) and cell.merge_group_id}
    for group_id in touched:
        grid = dissolve_group(grid, group_id)

    top_left = grid.get(min_row, min_col)
    group_id = create_merge_id(min_row, min_col, max_row, max_col)

    def _merge(cell: Cell) -> Cell:
        if not inside(cell):
            return cell
        is_anchor = (cell.row, cell.col) == (min_row, min_col)
        return replace(
            cell,
            sequence_number=top_left.sequence_number,
            checked=top_left.checked,
            is_blocked=top_left.is_blocked,
            is_selected=top_left.is_blocked,
            is_blank=top_left.is_blank,
            is_merged=True,
            merge_group_id=group_id,
            row_span=height if is_anchor else 1,
            col_span=width if is_anchor else 1,
            is_hidden=not is_anchor,
        )

    merged = grid.transform(_merge)
    logger.debug(f"Merged {height}x{width} cells into {group_id}")
    return MergeResult(merged, cell_id(min_row, min_col))


def unmerge_cells(grid: TableGrid, first_selected: Optional[str]) -> TableGrid:
    """
    Dissolve the merge group containing the given cell.

    Value, checked and blank state stay as each member records them. Returns
    the grid unchanged when the cell is unknown or not merged.
    """
    pos = parse_cell_id(first_selected) if first_selected else None
    target = grid.get(*pos) if pos else None
    if target is None or not target.is_merged:
        return grid
    return dissolve_group(grid, target.merge_group_id)


def group_bounds(grid: TableGrid, group_id: str) -> Optional[Tuple[int, int, int, int]]:
    """Bounding rectangle (min_row, min_col, max_row, max_col) of a group."""
    return bounding_box(grid.group_positions(group_id))
