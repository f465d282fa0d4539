"""
Blanking: hide a cell's value visually while keeping it stored.
"""
from dataclasses import replace
from typing import Iterable

from core.grid_model import TableGrid
from core.types import Cell
from utils.cell_ids import parse_cell_id


def _set_blank(grid: TableGrid, selection: Iterable[str], blank: bool) -> TableGrid:
    targets = set()
    groups = set()
    for cid in selection:
        pos = parse_cell_id(cid)
        cell = grid.get(*pos) if pos else None
        # Hidden members are reached through their anchor only
        if cell is None or cell.is_hidden:
            continue
        targets.add(cell.position)
        if cell.merge_group_id:
            groups.add(cell.merge_group_id)

    def _apply(cell: Cell) -> Cell:
        if cell.is_blank == blank:
            return cell
        if cell.position in targets or cell.merge_group_id in groups:
            return replace(cell, is_blank=blank)
        return cell

    return grid.transform(_apply)


def blank_cells(grid: TableGrid, selection: Iterable[str]) -> TableGrid:
    """Set the blank flag on every selected visible cell and its merge group."""
    return _set_blank(grid, selection, True)


def unblank_cells(grid: TableGrid, selection: Iterable[str]) -> TableGrid:
    """Clear the blank flag on every selected visible cell and its merge group."""
    return _set_blank(grid, selection, False)
