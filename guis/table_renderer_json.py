# guis/table_renderer_json.py
#!/usr/bin/env python3
"""
Table Renderer for JSON Snapshots
Renders a persisted table snapshot with matplotlib, without a live editor.

Key features:
- Works directly on the snapshot wire format (tableRows / cells)
- Draws merged anchors across their spans and skips hidden cells
- Marks blank and blocked cells the same way the editor canvas does
"""

import numpy as np
import matplotlib.patches as patches
from typing import Any, Dict, Iterator, Optional

from core.snapshot import repair_span

# Cell state codes used by snapshot_matrix()
STATE_NORMAL = 0
STATE_BLOCKED = 1
STATE_BLANK = 2
STATE_HIDDEN = 3

FACE_COLORS = {
    STATE_NORMAL: "#FFFFFF",
    STATE_BLOCKED: "#FFF59D",
    STATE_BLANK: "#2C2C2C",
}
MERGED_FACE = "#E3F2FD"


def _iter_snapshot_cells(snapshot: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for row in snapshot.get("tableRows", []) or []:
        for cell in row.get("cells", []) or []:
            if isinstance(cell, dict):
                yield cell


def snapshot_matrix(snapshot: Dict[str, Any]) -> np.ndarray:
    """
    Summarise a snapshot as a rows x cols array of state codes.
    Position (r, c) lands at matrix[r - 1, c - 1].

    Hidden wins over blank, blank over blocked.
    """
    rows = int(snapshot.get("rows", 0) or 0)
    cols = int(snapshot.get("columns", 0) or 0)
    matrix = np.full((rows, cols), STATE_NORMAL, dtype=np.int8)
    for cell in _iter_snapshot_cells(snapshot):
        r, c = cell.get("rowIndex"), cell.get("columnIndex")
        if not (isinstance(r, int) and isinstance(c, int) and 1 <= r <= rows and 1 <= c <= cols):
            continue
        if cell.get("isHidden"):
            matrix[r - 1, c - 1] = STATE_HIDDEN
        elif cell.get("isBlank"):
            matrix[r - 1, c - 1] = STATE_BLANK
        elif cell.get("isBlocked"):
            matrix[r - 1, c - 1] = STATE_BLOCKED
    return matrix


class TableSnapshotRenderer:
    """
    Render a table snapshot using matplotlib.
    One grid unit is one unmerged cell; the y axis is inverted to match rows.
    """

    def __init__(self, cell_size: float = 1.0, padding: float = 0.25, text_weight: str = 'bold'):
        """
        Initialize the renderer.

        Args:
            cell_size: Edge length of an unmerged cell in axis units
            padding: Padding around the table in cell units
            text_weight: Font weight for values ('normal' or 'bold')
        """
        self.size = float(cell_size)
        self.pad = float(padding)
        self.tw = text_weight

    def _draw_cell(self, ax, cell: Dict[str, Any], state: int):
        r, c = cell["rowIndex"], cell["columnIndex"]
        height = repair_span(cell.get("rowSpan")) * self.size
        width = repair_span(cell.get("colSpan")) * self.size
        x, y = (c - 1) * self.size, (r - 1) * self.size

        facecolor = FACE_COLORS[state]
        if state == STATE_NORMAL and cell.get("isMerged"):
            facecolor = MERGED_FACE
        edgecolor = "#FBC02D" if state == STATE_BLOCKED else "#9E9E9E"

        ax.add_patch(patches.Rectangle((x, y), width, height, facecolor=facecolor,
                                       edgecolor=edgecolor, linewidth=2 if state == STATE_BLOCKED else 1))
        if state == STATE_BLANK:
            return
        font_size = max(6, min(18, 10 * self.size))
        ax.text(x + width / 2, y + height / 2, str(cell.get("sequenceNumber", "")),
                ha='center', va='center', fontsize=font_size, fontweight=self.tw, color='black')
        if cell.get("checked"):
            ax.text(x + 0.12 * self.size, y + 0.2 * self.size, "✓", fontsize=font_size * 0.7,
                    color="#2E7D32")

    def render_snapshot(self, snapshot: Dict[str, Any], ax=None) -> Optional[object]:
        """
        Render a complete snapshot.

        Args:
            snapshot: Decoded snapshot dictionary
            ax: Optional matplotlib axis (creates new figure if None)

        Returns:
            Matplotlib axis object
        """
        if ax is None:
            import matplotlib.pyplot as plt
            fig, ax = plt.subplots(figsize=(10, 8))

        matrix = snapshot_matrix(snapshot)
        rows, cols = matrix.shape

        for cell in _iter_snapshot_cells(snapshot):
            r, c = cell.get("rowIndex"), cell.get("columnIndex")
            if not (isinstance(r, int) and isinstance(c, int) and 1 <= r <= rows and 1 <= c <= cols):
                continue
            state = int(matrix[r - 1, c - 1])
            if state == STATE_HIDDEN:
                continue
            self._draw_cell(ax, cell, state)

        pad = self.pad * self.size
        ax.set_aspect('equal')
        ax.set_xlim(-pad, cols * self.size + pad)
        ax.set_ylim(rows * self.size + pad, -pad)  # Invert Y so row 1 is at the top
        ax.axis('off')
        return ax


# Standalone testing
if __name__ == "__main__":
    import matplotlib.pyplot as plt

    from core.grid_model import TableGrid
    from core.merge import merge_cells
    from core.snapshot import encode_snapshot

    demo = merge_cells(TableGrid.create(3, 4), ["cell_1_1", "cell_1_2", "cell_2_1", "cell_2_2"]).grid
    renderer = TableSnapshotRenderer()
    fig, ax = plt.subplots(figsize=(8, 6))
    renderer.render_snapshot(encode_snapshot(demo), ax)
    ax.set_title("Table Snapshot Rendering", fontsize=14, pad=20)
    plt.tight_layout()
    plt.show()
