"""
Tableview Grid Editor - Utilities Package
Cell/row identifier helpers shared by the core and the GUI.
"""
from .cell_ids import cell_id, row_id, parse_cell_id, bounding_box, rectangle_ids

__all__ = ['cell_id', 'row_id', 'parse_cell_id', 'bounding_box', 'rectangle_ids']
