"""
TableCanvas - interactive Tkinter canvas driving a TableEditor.

Pointer events are translated to grid positions and forwarded to the
editor; the canvas itself holds no table state besides what it draws.
"""
import logging
import tkinter as tk
from tkinter import simpledialog
from typing import Callable, Optional, Tuple

from core.merge import anchor_of
from core.table_editor import TableEditor
from render.table_render import TableRenderer

logger = logging.getLogger(__name__)

# Tk event.state bits
SHIFT_MASK = 0x0001
CONTROL_MASK = 0x0004
COMMAND_MASK = 0x0008


class TableCanvas:
    """Interactive canvas for selecting and editing table cells."""

    def __init__(self, parent: tk.Widget, editor: TableEditor, width: int = 800, height: int = 600):
        self.canvas = tk.Canvas(parent, width=width, height=height, bg="lightgray")
        self.canvas.pack(fill=tk.BOTH, expand=True)

        self.editor = editor
        self.renderer = TableRenderer()

        # Cell the current press started on, for click detection on release
        self.pressed_cell: Optional[Tuple[int, int]] = None

        # Callbacks
        self.on_grid_change: Optional[Callable] = None
        self.position_callback: Optional[Callable] = None

        self._setup_event_bindings()

    def _setup_event_bindings(self):
        """Set up mouse event handlers."""
        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_drag)
        # Release is bound on the whole application so a drag always ends
        self.canvas.bind_all("<ButtonRelease-1>", self._on_release, add="+")
        self.canvas.bind("<Double-Button-1>", self._on_double_click)
        self.canvas.bind("<Button-3>", self._on_right_click)
        self.canvas.bind("<Motion>", self._on_mouse_motion)

    def set_change_callback(self, callback: Callable):
        """Set callback function to be called when grid or selection changes."""
        self.on_grid_change = callback

    def set_position_callback(self, callback: Callable):
        """Set position update callback for status bar."""
        self.position_callback = callback

    def _notify_grid_change(self):
        if self.on_grid_change:
            self.on_grid_change()

    def _event_cell(self, event) -> Optional[Tuple[int, int]]:
        """Grid position under the pointer, resolved to the merge anchor."""
        grid = self.editor.grid
        if grid is None:
            return None
        row, col = self.renderer.pixel_to_cell(event.x, event.y)
        anchor = anchor_of(grid, row, col)
        return anchor.position if anchor is not None else None

    def _on_press(self, event):
        self.canvas.focus_set()
        cell = self._event_cell(event)
        self.pressed_cell = cell
        # Ctrl/Cmd presses are plain toggle clicks, handled on release
        if cell is None or event.state & (CONTROL_MASK | COMMAND_MASK):
            return
        shift = bool(event.state & SHIFT_MASK)
        if self.editor.press_cell(cell[0], cell[1], shift=shift):
            self.redraw_grid()

    def _on_drag(self, event):
        cell = self._event_cell(event)
        if cell is None:
            return
        if self.editor.enter_cell(*cell):
            self.redraw_grid()

    def _on_release(self, event):
        was_dragging = self.editor.release_pointer()
        pressed, self.pressed_cell = self.pressed_cell, None
        if event.widget is self.canvas and pressed is not None and self._event_cell(event) == pressed:
            # Press and release on the same cell counts as a click
            modifier = bool(event.state & (CONTROL_MASK | COMMAND_MASK))
            self.editor.click_cell(pressed[0], pressed[1], modifier=modifier)
        if was_dragging or pressed is not None:
            self.redraw_grid()
            self._notify_grid_change()

    def _on_double_click(self, event):
        """Prompt for a new cell value."""
        cell = self._event_cell(event)
        if cell is None or not self.editor.config.enable_cell_editing:
            return
        current = self.editor.grid.get(*cell)
        value = simpledialog.askstring("Cell Value", f"Value for cell {cell}:",
                                       initialvalue=current.sequence_number)
        if value is not None and self.editor.edit_value(cell[0], cell[1], value):
            self.redraw_grid()
            self._notify_grid_change()

    def _on_right_click(self, event):
        """Right click toggles the cell checkbox."""
        cell = self._event_cell(event)
        if cell is None:
            return
        if self.editor.toggle_checkbox(*cell):
            self.redraw_grid()
            self._notify_grid_change()

    def _on_mouse_motion(self, event):
        if not self.position_callback:
            return
        cell = self._event_cell(event)
        if cell is not None:
            self.position_callback(*cell)
        else:
            self.position_callback()

    def redraw_grid(self):
        """Completely redraw the table on the canvas."""
        grid = self.editor.grid
        if grid is None:
            return
        self.canvas.delete("all")
        width, height = self.renderer.canvas_size(grid)
        self.canvas.configure(scrollregion=(0, 0, width, height))
        drawn = self.renderer.draw_grid(self.canvas, grid, self.editor.selection.selected_cells)
        logger.debug(f"Redrew {drawn} cells")
