"""
TableGrid - immutable grid state for the Tableview editor.

This module provides the core rows x columns matrix of cells using 1-based
(row, col) positions. Every mutation returns a new TableGrid; the previous
version stays valid for whoever still holds it (undo history, tests, the
save pipeline).

Merge groups are not stored as a separate structure: members share a
``merge_group_id`` and are found again by scanning the grid.
"""
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

from core.types import Cell, DimensionError, MAX_DIMENSION

CellRows = Tuple[Tuple[Cell, ...], ...]


def validate_dimensions(rows: int, cols: int) -> None:
    """
    Check a requested grid size.

    Raises:
        DimensionError: If either axis is outside [1, MAX_DIMENSION]
    """
    if rows <= 0 or cols <= 0:
        raise DimensionError("Rows and columns must be positive numbers")
    if rows > MAX_DIMENSION or cols > MAX_DIMENSION:
        raise DimensionError(f"Maximum {MAX_DIMENSION} rows and {MAX_DIMENSION} columns")


def _default_row(row: int, cols: int) -> Tuple[Cell, ...]:
    return tuple(Cell.default(row, col) for col in range(1, cols + 1))


@dataclass(frozen=True)
class TableGrid:
    """
    Grid state for the table editor.

    Responsibilities:
        - Store the cells of a rectangular grid (1-based positions)
        - Provide bounds-checked reads and copy-on-write writes
        - Grow/shrink while keeping merge groups rectangular

    Attributes:
        rows: Number of rows (1..100)
        cols: Number of columns (1..100)
        cells: Row tuples of Cell, cells[r-1][c-1] is position (r, c)
    """
    rows: int
    cols: int
    cells: CellRows

    def __post_init__(self):
        validate_dimensions(self.rows, self.cols)
        if len(self.cells) != self.rows or any(len(r) != self.cols for r in self.cells):
            raise ValueError(f"Cell matrix does not match {self.rows}x{self.cols}")

    @classmethod
    def create(cls, rows: int, cols: int) -> 'TableGrid':
        """Create a grid of default cells."""
        validate_dimensions(rows, cols)
        return cls(rows, cols, tuple(_default_row(r, cols) for r in range(1, rows + 1)))

    @classmethod
    def from_rows(cls, rows: List[List[Cell]]) -> 'TableGrid':
        """Build a grid from nested lists, re-indexing every cell to its position."""
        matrix = tuple(
            tuple(cell.at(r, c) for c, cell in enumerate(row, start=1))
            for r, row in enumerate(rows, start=1)
        )
        cols = len(matrix[0]) if matrix else 0
        return cls(len(matrix), cols, matrix)

    # =============================================================================
    # CELL QUERIES
    # =============================================================================

    def in_bounds(self, row: int, col: int) -> bool:
        return 1 <= row <= self.rows and 1 <= col <= self.cols

    def get(self, row: int, col: int) -> Optional[Cell]:
        """
        Get the cell at a position.

        Returns:
            The Cell, or None for out-of-bounds positions
        """
        if not self.in_bounds(row, col):
            return None
        return self.cells[row - 1][col - 1]

    def iter_cells(self) -> Iterator[Cell]:
        """Iterate every cell in row-major order."""
        for row in self.cells:
            yield from row

    def visible_cell_ids(self) -> List[str]:
        """Ids of every cell that is not hidden inside a merge group."""
        return [cell.cell_id for cell in self.iter_cells() if not cell.is_hidden]

    def group_positions(self, group_id: str) -> Set[Tuple[int, int]]:
        """Positions of every cell sharing a merge group id."""
        if not group_id:
            return set()
        return {cell.position for cell in self.iter_cells() if cell.merge_group_id == group_id}

    def group_ids(self) -> Set[str]:
        return {cell.merge_group_id for cell in self.iter_cells() if cell.merge_group_id}

    # =============================================================================
    # COPY-ON-WRITE MUTATIONS
    # =============================================================================

    def set(self, row: int, col: int, cell: Cell) -> 'TableGrid':
        """
        Return a grid with one cell replaced.

        The cell is re-indexed to (row, col). Out-of-bounds writes return
        this grid unchanged.
        """
        if not self.in_bounds(row, col):
            return self
        cell = cell.at(row, col)
        if self.cells[row - 1][col - 1] == cell:
            return self
        target = self.cells[row - 1]
        new_row = target[:col - 1] + (cell,) + target[col:]
        return replace(self, cells=self.cells[:row - 1] + (new_row,) + self.cells[row:])

    def transform(self, fn: Callable[[Cell], Cell]) -> 'TableGrid':
        """
        Apply ``fn`` to every cell in one pass.

        Returns this grid itself when ``fn`` returned every cell unchanged, so
        callers can detect no-op edits with ``is``.
        """
        changed = False
        new_rows = []
        for row in self.cells:
            new_row = tuple(fn(cell) for cell in row)
            if any(a is not b for a, b in zip(new_row, row)):
                changed = True
            new_rows.append(new_row)
        if not changed:
            return self
        return replace(self, cells=tuple(new_rows))

    def add_row(self) -> 'TableGrid':
        """Append one row of default cells."""
        if self.rows + 1 > MAX_DIMENSION:
            raise DimensionError(f"Maximum {MAX_DIMENSION} rows")
        new_index = self.rows + 1
        return TableGrid(new_index, self.cols, self.cells + (_default_row(new_index, self.cols),))

    def add_column(self) -> 'TableGrid':
        """Append one column of default cells."""
        if self.cols + 1 > MAX_DIMENSION:
            raise DimensionError(f"Maximum {MAX_DIMENSION} columns")
        new_index = self.cols + 1
        new_rows = tuple(row + (Cell.default(r, new_index),) for r, row in enumerate(self.cells, start=1))
        return TableGrid(self.rows, new_index, new_rows)

    def resize(self, rows: int, cols: int) -> 'TableGrid':
        """
        Return a grid of the requested size.

        Cells inside both the old and new bounds are kept, new positions are
        default cells. A merge group that loses members to a shrink is
        dissolved, so no partial group survives.

        Raises:
            DimensionError: If rows or cols is outside [1, 100]
        """
        validate_dimensions(rows, cols)
        if (rows, cols) == (self.rows, self.cols):
            return self

        new_rows: List[Tuple[Cell, ...]] = []
        for r in range(1, rows + 1):
            if r <= self.rows:
                kept = self.cells[r - 1][:cols]
                extra = tuple(Cell.default(r, c) for c in range(len(kept) + 1, cols + 1))
                new_rows.append(kept + extra)
            else:
                new_rows.append(_default_row(r, cols))
        resized = TableGrid(rows, cols, tuple(new_rows))

        # Groups whose member count dropped were cut by the new bounds
        before: Dict[str, int] = {}
        for cell in self.iter_cells():
            if cell.merge_group_id:
                before[cell.merge_group_id] = before.get(cell.merge_group_id, 0) + 1
        after: Dict[str, int] = {}
        for cell in resized.iter_cells():
            if cell.merge_group_id:
                after[cell.merge_group_id] = after.get(cell.merge_group_id, 0) + 1
        cut = {gid for gid, count in after.items() if count != before.get(gid, 0)}
        if not cut:
            return resized
        return resized.transform(lambda cell: cell.unmerged() if cell.merge_group_id in cut else cell)
