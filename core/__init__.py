"""
Tableview Grid Editor - Core Package
Grid model, merge/blank/selection engines, snapshot codec and the editor.
"""
from .types import Cell, EditNotice, GridEditError, DimensionError, MergeSelectionError
from .grid_model import TableGrid
from .config import TableConfig, load_config
from .commands import Command, CommandHistory
from .host import HostBindings, InMemoryHost, JsonFileHost
from .table_editor import TableEditor

__all__ = ['Cell', 'EditNotice', 'GridEditError', 'DimensionError', 'MergeSelectionError',
           'TableGrid', 'TableConfig', 'load_config', 'Command', 'CommandHistory',
           'HostBindings', 'InMemoryHost', 'JsonFileHost', 'TableEditor']
