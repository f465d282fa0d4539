"""
Tableview grid editor - Tkinter application.
Wires a TableEditor to a canvas, a control panel and a JSON-file host.
"""
import argparse
import logging
import tkinter as tk
from tkinter import ttk, messagebox
import sys
import os
from typing import Callable, Optional

# Add project root to path first
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Then import project modules
from core.config import TableConfig, load_config
from core.host import JsonFileHost
from core.statistics import TableStatistics
from core.table_editor import (
    ACTION_ADD_COLUMN, ACTION_ADD_ROW, ACTION_BLANK, ACTION_CLEAR_SELECTION, ACTION_GENERATE,
    ACTION_MERGE, ACTION_REDO, ACTION_SELECT_ALL, ACTION_UNBLANK, ACTION_UNDO, ACTION_UNMERGE,
    TableEditor,
)
from core.types import EditNotice
from guis.status_bar import EnhancedStatusBar
from guis.table_canvas import TableCanvas

logger = logging.getLogger(__name__)


class TkHost(JsonFileHost):
    """JSON-file host that reports notices, timers and counters through Tk."""

    def __init__(self, root: tk.Tk, filename: str, status_bar: EnhancedStatusBar):
        super().__init__(filename)
        self.root = root
        self.status_bar = status_bar

    def write_statistics(self, stats: TableStatistics) -> None:
        super().write_statistics(stats)
        self.status_bar.update_statistics(stats)

    def show_notice(self, notice: EditNotice) -> None:
        super().show_notice(notice)
        if notice.severity == "error":
            messagebox.showerror("Table", notice.message)
        else:
            messagebox.showinfo("Table", notice.message)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.root.after(delay_ms, callback)


class TableviewApp:
    """Tableview grid editor with undo/redo and snapshot persistence."""

    def __init__(self, config: TableConfig, snapshot_file: str):
        """Initialize the application."""
        self.root = tk.Tk()
        self.root.title("Tableview Grid Editor")
        self.root.geometry("1200x800")

        self.config = config
        self.enhanced_status_bar = EnhancedStatusBar(self.root)
        self.host = TkHost(self.root, snapshot_file, self.enhanced_status_bar)
        self.editor = TableEditor(self.host, config)

        self.canvas: Optional[TableCanvas] = None
        self.action_buttons = {}
        self.rows_var = tk.StringVar(value=str(config.default_rows))
        self.cols_var = tk.StringVar(value=str(config.default_columns))
        self.selection_var = tk.StringVar(value="")

        self._create_ui()
        self.editor.start()
        self._sync_dimension_fields()
        self._update_all_status()

    def _create_ui(self):
        """Create the user interface."""
        main_frame = ttk.Frame(self.root)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

        left_panel = ttk.Frame(main_frame, width=260)
        left_panel.pack(side=tk.LEFT, fill=tk.Y, padx=(0, 5))
        left_panel.pack_propagate(False)

        right_panel = ttk.Frame(main_frame)
        right_panel.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True)

        self._create_control_panel(left_panel)
        self._create_canvas_area(right_panel)

    def _add_button(self, parent, action: str, text: str, command: Callable):
        button = ttk.Button(parent, text=text, command=command)
        button.pack(fill=tk.X, pady=2)
        self.action_buttons[action] = button

    def _create_control_panel(self, parent):
        """Create the left control panel."""
        dims_frame = ttk.LabelFrame(parent, text="Table Dimensions", padding=5)
        dims_frame.pack(fill=tk.X, pady=(0, 10))

        ttk.Label(dims_frame, text="Rows:").pack(anchor=tk.W)
        ttk.Entry(dims_frame, textvariable=self.rows_var, width=8).pack(anchor=tk.W, pady=(0, 5))
        ttk.Label(dims_frame, text="Columns:").pack(anchor=tk.W)
        ttk.Entry(dims_frame, textvariable=self.cols_var, width=8).pack(anchor=tk.W, pady=(0, 5))

        self._add_button(dims_frame, ACTION_GENERATE, "Generate Table", self._generate_table)
        self._add_button(dims_frame, ACTION_ADD_ROW, "Add Row", lambda: self._run(self.editor.add_row))
        self._add_button(dims_frame, ACTION_ADD_COLUMN, "Add Column", lambda: self._run(self.editor.add_column))

        history_frame = ttk.LabelFrame(parent, text="Undo/Redo", padding=5)
        history_frame.pack(fill=tk.X, pady=(0, 10))
        self._add_button(history_frame, ACTION_UNDO, "↶ Undo", lambda: self._run(self.editor.undo))
        self._add_button(history_frame, ACTION_REDO, "↷ Redo", lambda: self._run(self.editor.redo))

        selection_frame = ttk.LabelFrame(parent, text="Selection", padding=5)
        selection_frame.pack(fill=tk.X, pady=(0, 10))
        ttk.Label(selection_frame, textvariable=self.selection_var).pack(anchor=tk.W)
        self._add_button(selection_frame, ACTION_SELECT_ALL, "Select All", lambda: self._run(self.editor.select_all))
        self._add_button(selection_frame, ACTION_MERGE, "Merge Cells", lambda: self._run(self.editor.merge_selected))
        self._add_button(selection_frame, ACTION_UNMERGE, "Unmerge Cells",
                         lambda: self._run(self.editor.unmerge_selected))
        self._add_button(selection_frame, ACTION_BLANK, "Blank Cells", lambda: self._run(self.editor.blank_selected))
        self._add_button(selection_frame, ACTION_UNBLANK, "Unblank Cells",
                         lambda: self._run(self.editor.unblank_selected))
        self._add_button(selection_frame, ACTION_CLEAR_SELECTION, "Clear Selection",
                         lambda: self._run(self.editor.clear_selection))

    def _create_canvas_area(self, parent):
        """Create the canvas area."""
        canvas_frame = ttk.Frame(parent)
        canvas_frame.pack(fill=tk.BOTH, expand=True)

        self.canvas = TableCanvas(canvas_frame, self.editor, width=900, height=700)
        self.canvas.set_change_callback(self._update_all_status)
        self.canvas.set_position_callback(self.enhanced_status_bar.update_position)

    def _generate_table(self):
        try:
            rows = int(self.rows_var.get())
            cols = int(self.cols_var.get())
        except ValueError:
            messagebox.showerror("Invalid Input", "Please enter valid integer dimensions.")
            return
        self._run(lambda: self.editor.generate_table(rows, cols))

    def _run(self, action: Callable):
        """Run an editor action and refresh the view."""
        action()
        self._sync_dimension_fields()
        self.canvas.redraw_grid()
        self._update_all_status()

    def _sync_dimension_fields(self):
        grid = self.editor.grid
        if grid is not None:
            self.rows_var.set(str(grid.rows))
            self.cols_var.set(str(grid.cols))

    def _update_all_status(self):
        """Centralized status update method."""
        actions = self.editor.available_actions()
        for action, button in self.action_buttons.items():
            button.config(state="normal" if action in actions else "disabled")
        self.selection_var.set(self.editor.selection_label())

        undo_desc = self.editor.command_history.get_undo_description()
        self.enhanced_status_bar.update_main_status(f"Undo: {undo_desc}" if undo_desc else "Ready")

    def run(self):
        """Start the application."""
        self.canvas.redraw_grid()
        self.root.mainloop()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Tableview grid editor")
    parser.add_argument("--config", help="JSON file with capability switches")
    parser.add_argument("--snapshot", default="table_snapshot.json", help="Snapshot file to load and save")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = load_config(args.config) if args.config else TableConfig()
        app = TableviewApp(config, args.snapshot)
        app.run()
    except Exception:
        logger.exception("Error starting application")
        raise


if __name__ == "__main__":
    main()
