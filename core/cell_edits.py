"""
Single-cell edits: text value and checkbox.

The blocked flag follows the checkbox only. Editing the text value never
touches ``is_blocked`` on the cell or on any member of its merge group.
"""
from core.grid_model import TableGrid
from core.merge import propagate_to_group


def set_cell_value(grid: TableGrid, row: int, col: int, value: str) -> TableGrid:
    """Set the text value of a cell and of every member of its merge group."""
    return propagate_to_group(grid, row, col, sequence_number=value)


def toggle_checkbox(grid: TableGrid, row: int, col: int) -> TableGrid:
    """
    Flip a cell's checkbox.

    ``checked``, ``is_blocked`` and ``is_selected`` all take the new value, on
    the cell and across its merge group.
    """
    cell = grid.get(row, col)
    if cell is None:
        return grid
    new_checked = not cell.checked
    return propagate_to_group(grid, row, col,
                              checked=new_checked, is_blocked=new_checked, is_selected=new_checked)
