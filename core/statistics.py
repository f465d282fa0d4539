"""
Derived counters published to the host after every mutation.
"""
from dataclasses import asdict, dataclass
from typing import Dict

from core.grid_model import TableGrid


@dataclass(frozen=True)
class TableStatistics:
    """
    Attributes:
        total: Every cell, hidden members included
        blocked: Cells whose checkbox is set
        merged: One per merge group (visible anchors only)
        blank: Visible blanked cells; a blanked group counts once
    """
    total: int = 0
    blocked: int = 0
    merged: int = 0
    blank: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def compute_statistics(grid: TableGrid) -> TableStatistics:
    """Recompute all counters from scratch."""
    total = blocked = merged = blank = 0
    for cell in grid.iter_cells():
        total += 1
        if cell.is_blocked:
            blocked += 1
        if cell.is_hidden:
            continue
        if cell.is_merged:
            merged += 1
        if cell.is_blank:
            blank += 1
    return TableStatistics(total=total, blocked=blocked, merged=merged, blank=blank)
