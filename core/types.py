"""
Shared types for the Tableview grid editor.
Separated to avoid circular imports between modules.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from utils.cell_ids import cell_id

DEFAULT_SEQUENCE_NUMBER = "-"
MAX_DIMENSION = 100


@dataclass(frozen=True)
class Cell:
    """
    One grid position with its value and flags.

    Cells are immutable; every edit produces a new Cell through ``replace``.
    ``is_selected`` only mirrors ``checked`` for older consumers and is not
    part of a cell's identity.
    """
    row: int
    col: int
    sequence_number: str = DEFAULT_SEQUENCE_NUMBER
    checked: bool = False
    is_blocked: bool = False
    is_merged: bool = False
    merge_group_id: str = ""
    is_blank: bool = False
    row_span: int = 1
    col_span: int = 1
    is_hidden: bool = False
    is_selected: bool = field(default=False, compare=False)

    @classmethod
    def default(cls, row: int, col: int) -> 'Cell':
        return cls(row=row, col=col)

    @property
    def cell_id(self) -> str:
        return cell_id(self.row, self.col)

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col

    def at(self, row: int, col: int) -> 'Cell':
        """Same cell content re-indexed to another position."""
        if (row, col) == (self.row, self.col):
            return self
        return replace(self, row=row, col=col)

    def unmerged(self) -> 'Cell':
        """Reset the merge shape; value, checked and blank state are kept."""
        return replace(self, is_merged=False, merge_group_id="",
                       row_span=1, col_span=1, is_hidden=False)


class EditNotice:
    """A user-visible message about a rejected or skipped edit."""
    def __init__(self, severity: str, message: str, location: Optional[Tuple[int, int]] = None):
        self.severity = severity  # "error", "warning", "info"
        self.message = message
        self.location = location

    def __str__(self):
        loc_str = f" at {self.location}" if self.location else ""
        return f"{self.severity.upper()}: {self.message}{loc_str}"


class GridEditError(ValueError):
    """Base class for edits the grid refuses to apply."""


class DimensionError(GridEditError):
    """Row or column count outside the allowed range."""


class MergeSelectionError(GridEditError):
    """Selection cannot be merged (not exactly a rectangle)."""
