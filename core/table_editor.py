"""
TableEditor - event entry points and the mutation pipeline.

Every user action goes through one of the public methods below. A method
asks the owning engine for a new grid version, commits it through the
command history, then recomputes statistics and saves a snapshot to the
host. Statistics and the snapshot are always computed from the committed
grid, never from an intermediate version.

Inbound host updates (snapshot or dimension changes) are filtered through
the SaveGate and EchoGuard so the editor does not re-import its own output.
"""
import logging
from typing import Optional, Set

from core.blank import blank_cells, unblank_cells
from core.cell_edits import set_cell_value, toggle_checkbox
from core.commands import CommandHistory, ReplaceGridCommand
from core.config import TableConfig
from core.grid_model import TableGrid
from core.host import HostBindings
from core.merge import merge_cells, unmerge_cells
from core.selection import SelectionEngine
from core.snapshot import decode_snapshot, dumps_snapshot
from core.statistics import TableStatistics, compute_statistics
from core.sync import EchoGuard, SaveGate
from core.types import DimensionError, EditNotice, GridEditError, MAX_DIMENSION, MergeSelectionError

logger = logging.getLogger(__name__)

ACTION_GENERATE = "generate"
ACTION_ADD_ROW = "add_row"
ACTION_ADD_COLUMN = "add_column"
ACTION_SELECT_ALL = "select_all"
ACTION_MERGE = "merge"
ACTION_UNMERGE = "unmerge"
ACTION_BLANK = "blank"
ACTION_UNBLANK = "unblank"
ACTION_CLEAR_SELECTION = "clear_selection"
ACTION_UNDO = "undo"
ACTION_REDO = "redo"


class TableEditor:
    """
    Single logical editor over one grid.

    Attributes:
        host: External collaborator receiving snapshots, counters and notices
        config: Capability switches
        grid: Current grid version (None until start())
        selection: Click/drag selection state
        command_history: Undo/redo stack of grid versions
        statistics: Counters from the last recomputation
    """

    def __init__(self, host: HostBindings, config: Optional[TableConfig] = None):
        self.host = host
        self.config = config or TableConfig()
        self.grid: Optional[TableGrid] = None
        self.selection = SelectionEngine(allowed=self.config.selection_allowed)
        self.command_history = CommandHistory(max_history=100)
        self.statistics = TableStatistics()
        self.echo_guard = EchoGuard()
        self.save_gate = SaveGate()

    # =============================================================================
    # STARTUP AND INBOUND HOST UPDATES
    # =============================================================================

    def start(self) -> TableGrid:
        """
        Build the initial grid.

        A valid persisted snapshot wins; otherwise a default grid is created
        at the host-supplied size (or the configured default) and saved.
        """
        if not self._load_snapshot(self.host.read_snapshot()):
            rows, cols = self._initial_dimensions()
            logger.info(f"No usable snapshot, creating a {rows}x{cols} table")
            self.grid = TableGrid.create(rows, cols)
            self.command_history.clear_history()
            self._after_mutation()
        return self.grid

    def _initial_dimensions(self):
        rows, cols = self.host.read_dimensions()
        if not self._valid_dimension(rows):
            rows = self.config.default_rows
        if not self._valid_dimension(cols):
            cols = self.config.default_columns
        return rows, cols

    @staticmethod
    def _valid_dimension(value) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= MAX_DIMENSION

    def _load_snapshot(self, payload: str) -> bool:
        grid = decode_snapshot(payload)
        if grid is None:
            return False
        self.grid = grid
        self.command_history.clear_history()
        self.selection.clear()
        self.save_gate.remember(payload)
        self._push_dimensions()
        self._publish_statistics()
        logger.info(f"Loaded {grid.rows}x{grid.cols} table from snapshot")
        return True

    def on_snapshot_changed(self) -> bool:
        """
        The host's snapshot value changed.

        Ignored while a save is in flight or when the payload is the echo of
        the last save. Returns True if the grid was replaced.
        """
        incoming = self.host.read_snapshot()
        if self.save_gate.should_ignore(incoming):
            return False
        return self._load_snapshot(incoming)

    def on_dimensions_changed(self) -> bool:
        """
        The host's row/column counts changed.

        The first update after the editor pushed its own counts is skipped.
        Out-of-range values are ignored per axis. Returns True if the grid
        was resized.
        """
        if self.echo_guard.consume():
            return False
        if self.grid is None:
            return False
        rows, cols = self.host.read_dimensions()
        if not self._valid_dimension(rows):
            rows = self.grid.rows
        if not self._valid_dimension(cols):
            cols = self.grid.cols
        if (rows, cols) == (self.grid.rows, self.grid.cols):
            return False
        resized = self.grid.resize(rows, cols)
        if not self._commit(resized, f"Resize to {rows}x{cols}", push_dimensions=False):
            return False
        self.selection.prune(self.grid)
        return True

    # =============================================================================
    # MUTATION PIPELINE
    # =============================================================================

    def _commit(self, new_grid: TableGrid, description: str, push_dimensions: bool = True) -> bool:
        command = ReplaceGridCommand(new_grid, description)
        if not self.command_history.execute_command(command, self):
            return False
        self._after_mutation(push_dimensions)
        return True

    def _after_mutation(self, push_dimensions: bool = True) -> None:
        self._publish_statistics()
        self._save(push_dimensions)

    def _publish_statistics(self) -> None:
        self.statistics = compute_statistics(self.grid)
        self.host.write_statistics(self.statistics)

    def _save(self, push_dimensions: bool = True) -> None:
        payload = dumps_snapshot(self.grid)
        self.save_gate.begin(payload)
        self.host.write_snapshot(payload)
        if push_dimensions:
            self._push_dimensions()
        self.host.notify_table_change()
        self.host.schedule(self.config.save_settle_ms, self.save_gate.settle)

    def _push_dimensions(self) -> None:
        if self.host.read_dimensions() == (self.grid.rows, self.grid.cols):
            return
        self.echo_guard.arm()
        self.host.write_dimensions(self.grid.rows, self.grid.cols)

    def _reject(self, error: GridEditError) -> None:
        logger.warning(f"Edit rejected: {error}")
        self.host.show_notice(EditNotice("error", str(error)))

    def _ready(self) -> bool:
        return self.grid is not None

    # =============================================================================
    # POINTER EVENTS
    # =============================================================================

    def click_cell(self, row: int, col: int, modifier: bool = False) -> bool:
        """Click on a cell (modifier = Ctrl/Cmd held). Returns True if selection changed."""
        if not self._ready() or not self.grid.in_bounds(row, col):
            return False
        if not self.selection.allowed:
            self.host.notify_cell_interaction()
            return False
        if self.selection.dragging:
            return False
        self.host.notify_cell_interaction()
        return self.selection.click(row, col, modifier)

    def press_cell(self, row: int, col: int, shift: bool = False, on_input: bool = False) -> bool:
        if not self._ready() or not self.grid.in_bounds(row, col):
            return False
        return self.selection.mouse_down(row, col, shift=shift, on_input=on_input)

    def enter_cell(self, row: int, col: int) -> bool:
        if not self._ready() or not self.grid.in_bounds(row, col):
            return False
        return self.selection.mouse_enter(row, col)

    def release_pointer(self) -> bool:
        """Pointer released anywhere; ends the drag gesture."""
        return self.selection.mouse_up()

    # =============================================================================
    # CELL EDITS
    # =============================================================================

    def toggle_checkbox(self, row: int, col: int) -> bool:
        if not self._ready() or not self.config.enable_checkbox:
            return False
        changed = self._commit(toggle_checkbox(self.grid, row, col), f"Toggle checkbox ({row}, {col})")
        if changed:
            self.host.notify_cell_interaction()
        return changed

    def edit_value(self, row: int, col: int, value: str) -> bool:
        if not self._ready() or not self.config.enable_cell_editing:
            return False
        changed = self._commit(set_cell_value(self.grid, row, col, value), f"Set value at ({row}, {col})")
        if changed:
            self.host.notify_cell_interaction()
        return changed

    # =============================================================================
    # DIMENSIONS
    # =============================================================================

    def generate_table(self, rows: int, cols: int) -> bool:
        """Apply a requested size to the table (the "Generate Table" action)."""
        if not self._ready() or not self.config.show_generate_button:
            return False
        try:
            resized = self.grid.resize(rows, cols)
        except DimensionError as e:
            self._reject(e)
            return False
        if not self._commit(resized, f"Resize to {rows}x{cols}"):
            return False
        self.selection.clear()
        return True

    def add_row(self) -> bool:
        if not self._ready() or not self.config.show_add_row_button:
            return False
        try:
            grown = self.grid.add_row()
        except DimensionError as e:
            self._reject(e)
            return False
        return self._commit(grown, f"Add row {grown.rows}")

    def add_column(self) -> bool:
        if not self._ready() or not self.config.show_add_column_button:
            return False
        try:
            grown = self.grid.add_column()
        except DimensionError as e:
            self._reject(e)
            return False
        return self._commit(grown, f"Add column {grown.cols}")

    # =============================================================================
    # SELECTION-BASED ACTIONS
    # =============================================================================

    def select_all(self) -> bool:
        if not self._ready():
            return False
        return self.selection.select_all(self.grid)

    def clear_selection(self) -> None:
        self.selection.clear()

    def merge_selected(self) -> bool:
        """Merge the selected rectangle; selection collapses to the anchor."""
        if not self._ready() or not self.config.enable_cell_merging:
            return False
        try:
            result = merge_cells(self.grid, self.selection.selection_order)
        except MergeSelectionError as e:
            self._reject(e)
            return False
        if result.anchor_id is None:
            logger.debug("Merge needs at least two selected cells")
            return False
        changed = self._commit(result.grid, f"Merge {self.selection.count} cells")
        self.selection.collapse_to(result.anchor_id)
        return changed

    def unmerge_selected(self) -> bool:
        """Dissolve the merge group of the first selected cell."""
        if not self._ready() or not self.config.enable_cell_merging:
            return False
        first = self.selection.first_selected
        return self._commit(unmerge_cells(self.grid, first), f"Unmerge {first}")

    def blank_selected(self) -> bool:
        return self._apply_blank(blank_cells, "Blank")

    def unblank_selected(self) -> bool:
        return self._apply_blank(unblank_cells, "Unblank")

    def _apply_blank(self, operation, label: str) -> bool:
        if not self._ready() or not self.config.enable_cell_blanking:
            return False
        if self.selection.count == 0:
            return False
        changed = self._commit(operation(self.grid, self.selection.selection_order),
                               f"{label} {self.selection.count} cells")
        # Blanking ends the selection session whether or not anything changed
        self.selection.clear()
        return changed

    # =============================================================================
    # UNDO/REDO
    # =============================================================================

    def undo(self) -> bool:
        if not self.command_history.undo(self):
            return False
        self.selection.clear()
        self._after_mutation()
        return True

    def redo(self) -> bool:
        if not self.command_history.redo(self):
            return False
        self.selection.clear()
        self._after_mutation()
        return True

    # =============================================================================
    # UI QUERIES
    # =============================================================================

    def available_actions(self) -> Set[str]:
        """Actions a front end should currently expose."""
        actions: Set[str] = set()
        if self.config.show_generate_button:
            actions.add(ACTION_GENERATE)
        if self.config.show_add_row_button:
            actions.add(ACTION_ADD_ROW)
        if self.config.show_add_column_button:
            actions.add(ACTION_ADD_COLUMN)
        if self.command_history.can_undo():
            actions.add(ACTION_UNDO)
        if self.command_history.can_redo():
            actions.add(ACTION_REDO)

        if self.selection.count > 0 and self.config.selection_allowed:
            actions.update({ACTION_SELECT_ALL, ACTION_CLEAR_SELECTION})
            if self.config.enable_cell_merging:
                actions.add(ACTION_UNMERGE)
                if self.selection.count >= 2:
                    actions.add(ACTION_MERGE)
            if self.config.enable_cell_blanking:
                actions.update({ACTION_BLANK, ACTION_UNBLANK})
        return actions

    def selection_label(self) -> str:
        return f"{self.selection.count} cell(s) selected"
