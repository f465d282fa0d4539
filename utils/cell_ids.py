"""
Cell and row identifier helpers.

Ids are the stable strings used by the selection engine and the snapshot
format: rows are ``row_{r}`` and cells ``cell_{r}_{c}`` with 1-based indices.
"""
from typing import Iterable, List, Optional, Tuple

CELL_PREFIX = "cell_"
ROW_PREFIX = "row_"


def cell_id(row: int, col: int) -> str:
    """Convert a 1-based (row, col) position to its cell id."""
    return f"{CELL_PREFIX}{row}_{col}"


def row_id(row: int) -> str:
    """Convert a 1-based row index to its row id."""
    return f"{ROW_PREFIX}{row}"


def parse_cell_id(value: str) -> Optional[Tuple[int, int]]:
    """Convert a cell id back to (row, col). Returns None for malformed ids."""
    if not isinstance(value, str) or not value.startswith(CELL_PREFIX):
        return None
    parts = value[len(CELL_PREFIX):].split("_")
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def bounding_box(positions: Iterable[Tuple[int, int]]) -> Optional[Tuple[int, int, int, int]]:
    """
    Smallest rectangle containing every position.

    Returns:
        (min_row, min_col, max_row, max_col), or None for no positions
    """
    positions = list(positions)
    if not positions:
        return None
    rows = [r for r, _ in positions]
    cols = [c for _, c in positions]
    return min(rows), min(cols), max(rows), max(cols)


def rectangle_ids(start_row: int, start_col: int, end_row: int, end_col: int) -> List[str]:
    """
    All cell ids of the inclusive rectangle spanned by two corners.

    The corners may be given in any order; hidden or merged cells are not
    filtered out here.
    """
    min_row, max_row = min(start_row, end_row), max(start_row, end_row)
    min_col, max_col = min(start_col, end_col), max(start_col, end_col)
    return [
        cell_id(r, c)
        for r in range(min_row, max_row + 1)
        for c in range(min_col, max_col + 1)
    ]
