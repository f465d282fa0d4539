"""
Selection and drag-gesture state for the grid editor.

Selection holds cell ids, never positions, and is transient: it is not part
of the grid and never persisted. A drag gesture is mouse_down, zero or more
mouse_enter, then mouse_up; mouse_up must be wired to a global pointer
release so a drag cannot stay open when the button is released elsewhere.
"""
from typing import Iterable, List, Optional, Set, Tuple

from core.grid_model import TableGrid
from utils.cell_ids import cell_id, rectangle_ids


class SelectionEngine:
    """
    Click and drag selection.

    Attributes:
        allowed: Selection is enabled at all (merging or blanking is on)
        selection_mode: A selection session is active
        selected_cells: Selected cell ids
        selection_order: Same ids in the order they were first selected
        dragging: A drag gesture is in progress
        drag_anchor: (row, col) where the drag started
    """

    def __init__(self, allowed: bool = True):
        self.allowed = allowed
        self.selection_mode = False
        self.selected_cells: Set[str] = set()
        self.selection_order: List[str] = []
        self.dragging = False
        self.drag_anchor: Optional[Tuple[int, int]] = None
        # Selection as it was when the current drag began
        self._restore_point: List[str] = []

    # ---------- internal set/order bookkeeping ----------
    def _replace(self, ids: Iterable[str]) -> None:
        self.selected_cells = set()
        self.selection_order = []
        for cid in ids:
            self._add(cid)

    def _add(self, cid: str) -> None:
        if cid not in self.selected_cells:
            self.selected_cells.add(cid)
            self.selection_order.append(cid)

    def _remove(self, cid: str) -> None:
        if cid in self.selected_cells:
            self.selected_cells.remove(cid)
            self.selection_order.remove(cid)

    # ---------- queries ----------
    @property
    def count(self) -> int:
        return len(self.selected_cells)

    @property
    def first_selected(self) -> Optional[str]:
        return self.selection_order[0] if self.selection_order else None

    def is_selected(self, row: int, col: int) -> bool:
        return cell_id(row, col) in self.selected_cells

    # ---------- pointer events ----------
    def click(self, row: int, col: int, modifier: bool = False) -> bool:
        """
        Plain or modifier (Ctrl/Cmd) click on a cell.

        Returns:
            True if the click was handled as a selection change
        """
        if not self.allowed or self.dragging:
            return False

        cid = cell_id(row, col)
        if not self.selection_mode:
            self._replace([cid])
            self.selection_mode = True
            return True

        if modifier:
            # Toggle, but never empty the selection by removing the last member
            if cid in self.selected_cells and self.count > 1:
                self._remove(cid)
            else:
                self._add(cid)
        else:
            self._add(cid)
        return True

    def mouse_down(self, row: int, col: int, shift: bool = False, on_input: bool = False) -> bool:
        """Begin a drag gesture on a cell."""
        if not self.allowed or on_input:
            return False

        self._restore_point = list(self.selection_order)
        self.dragging = True
        self.drag_anchor = (row, col)
        self.selection_mode = True

        cid = cell_id(row, col)
        if shift:
            self._add(cid)
        else:
            self._replace([cid])
        return True

    def mouse_enter(self, row: int, col: int) -> bool:
        """Pointer moved into a cell; extend the drag rectangle."""
        if not self.dragging or self.drag_anchor is None:
            return False
        start_row, start_col = self.drag_anchor
        self._replace(list(self._restore_point) + rectangle_ids(start_row, start_col, row, col))
        return True

    def mouse_up(self) -> bool:
        """End any drag in progress; the last computed selection stays."""
        if not self.dragging:
            return False
        self.dragging = False
        self.drag_anchor = None
        self._restore_point = []
        return True

    # ---------- bulk operations ----------
    def select_all(self, grid: TableGrid) -> bool:
        """Select every visible cell."""
        if not self.allowed:
            return False
        self._replace(grid.visible_cell_ids())
        self.selection_mode = True
        return True

    def clear(self) -> None:
        """Empty the selection and leave selection mode."""
        self._replace([])
        self.selection_mode = False

    def collapse_to(self, cid: str) -> None:
        """Keep exactly one selected cell (used after a merge)."""
        self._replace([cid])

    def prune(self, grid: TableGrid) -> None:
        """Drop ids that no longer exist in the grid."""
        existing = {cell.cell_id for cell in grid.iter_cells()}
        keep = [cid for cid in self.selection_order if cid in existing]
        if len(keep) != self.count:
            self._replace(keep)
        if not keep:
            self.selection_mode = False
