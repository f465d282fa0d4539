import os
import sys
import pytest

# Add project root to sys.path (so tests can import core.*)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(PROJECT_ROOT)

from core.config import TableConfig
from core.grid_model import TableGrid
from core.host import InMemoryHost
from core.table_editor import TableEditor


@pytest.fixture
def grid():
    """A fresh 3x3 grid of default cells."""
    return TableGrid.create(3, 3)


@pytest.fixture
def host():
    return InMemoryHost(rows=3, cols=3)


@pytest.fixture
def editor_factory():
    """Returns a function that builds and starts an editor on an in-memory host."""
    def _make(rows=3, cols=3, snapshot="", **config):
        host = InMemoryHost(rows=rows, cols=cols, snapshot=snapshot)
        editor = TableEditor(host, TableConfig(**config))
        editor.start()
        host.run_timers()
        return editor, host
    return _make


@pytest.fixture
def editor(host):
    """A started editor on the ``host`` fixture with every capability on."""
    ed = TableEditor(host, TableConfig())
    ed.start()
    host.run_timers()
    return ed
