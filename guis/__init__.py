# guis/__init__.py
"""
Tableview Grid Editor - GUI Package
Tkinter interface components and snapshot rendering.
"""
from .table_canvas import TableCanvas
from .status_bar import EnhancedStatusBar

__all__ = ['TableCanvas', 'EnhancedStatusBar']
