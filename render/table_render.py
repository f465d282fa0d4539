"""
Rectangular cell rendering utilities for Tkinter Canvas.
Merged anchors are drawn across their full span; hidden cells are not drawn.
"""
from typing import Optional, Tuple
import tkinter as tk

from core.grid_model import TableGrid
from core.types import Cell

BLANK_FILL = "#2c2c2c"
SELECTED_FILL = "#cfe2ff"
MERGED_FILL = "#e3f2fd"
DEFAULT_FILL = "white"
BLOCKED_OUTLINE = "#fdd835"
DEFAULT_OUTLINE = "#9e9e9e"


class TableRenderer:
    """Handles cell geometry and drawing for the table canvas."""

    def __init__(self, cell_width: float = 60.0, cell_height: float = 36.0,
                 offset_x: float = 20, offset_y: float = 20):
        """
        Initialize table renderer.

        Args:
            cell_width, cell_height: Size of one unmerged cell in pixels
            offset_x, offset_y: Canvas offset of the top-left cell
        """
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.offset_x = offset_x
        self.offset_y = offset_y

    def cell_rect(self, cell: Cell) -> Tuple[float, float, float, float]:
        """
        Pixel rectangle covered by a cell, spans included.

        Returns:
            (x1, y1, x2, y2) canvas coordinates
        """
        x1 = self.offset_x + (cell.col - 1) * self.cell_width
        y1 = self.offset_y + (cell.row - 1) * self.cell_height
        return x1, y1, x1 + cell.col_span * self.cell_width, y1 + cell.row_span * self.cell_height

    def pixel_to_cell(self, pixel_x: float, pixel_y: float) -> Tuple[int, int]:
        """
        Convert pixel coordinates to a 1-based (row, col) grid position.
        May be out of bounds; callers check against the grid.
        """
        col = int((pixel_x - self.offset_x) // self.cell_width) + 1
        row = int((pixel_y - self.offset_y) // self.cell_height) + 1
        return row, col

    def canvas_size(self, grid: TableGrid) -> Tuple[float, float]:
        return (2 * self.offset_x + grid.cols * self.cell_width,
                2 * self.offset_y + grid.rows * self.cell_height)

    @staticmethod
    def cell_colors(cell: Cell, selected: bool = False) -> Tuple[str, str]:
        """(fill, outline) for a cell given its flags and selection."""
        if cell.is_blank:
            fill = BLANK_FILL
        elif selected:
            fill = SELECTED_FILL
        elif cell.is_merged:
            fill = MERGED_FILL
        else:
            fill = DEFAULT_FILL
        outline = BLOCKED_OUTLINE if cell.is_blocked else DEFAULT_OUTLINE
        return fill, outline

    def draw_cell(self, canvas: tk.Canvas, cell: Cell, selected: bool = False) -> Optional[int]:
        """
        Draw one cell rectangle with its value.

        Returns:
            Canvas item ID of the rectangle, or None for hidden cells
        """
        if cell.is_hidden:
            return None
        fill, outline = self.cell_colors(cell, selected)
        x1, y1, x2, y2 = self.cell_rect(cell)
        item = canvas.create_rectangle(x1, y1, x2, y2, fill=fill, outline=outline,
                                       width=3 if cell.is_blocked else 1)
        if not cell.is_blank:
            canvas.create_text((x1 + x2) / 2, (y1 + y2) / 2, text=cell.sequence_number,
                               font=("Arial", 11, "bold"), fill="black")
            if cell.checked:
                canvas.create_text(x1 + 8, y1 + 8, text="✓", font=("Arial", 9), fill="#2e7d32")
        return item

    def draw_grid(self, canvas: tk.Canvas, grid: TableGrid, selected_ids=frozenset()) -> int:
        """Draw every visible cell; returns how many were drawn."""
        drawn = 0
        for cell in grid.iter_cells():
            if self.draw_cell(canvas, cell, cell.cell_id in selected_ids) is not None:
                drawn += 1
        return drawn
