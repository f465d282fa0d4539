"""
Host collaborators of the grid editor.

The editor never talks to a UI toolkit or a storage backend directly. It
reads and writes a handful of external values through a HostBindings
implementation: row/column counts, the raw snapshot string, four counters,
two notification hooks, user-visible notices and a one-shot timer.
"""
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from core.statistics import TableStatistics
from core.types import EditNotice

logger = logging.getLogger(__name__)


class HostBindings(ABC):
    """Abstract base class for everything the editor consumes or produces."""

    @abstractmethod
    def read_dimensions(self) -> Tuple[Optional[int], Optional[int]]:
        """Current (rows, columns) exposed by the host; None when unavailable."""
        pass

    @abstractmethod
    def write_dimensions(self, rows: int, cols: int) -> None:
        pass

    @abstractmethod
    def read_snapshot(self) -> str:
        """Raw snapshot string; empty when nothing was persisted yet."""
        pass

    @abstractmethod
    def write_snapshot(self, payload: str) -> None:
        pass

    @abstractmethod
    def write_statistics(self, stats: TableStatistics) -> None:
        pass

    @abstractmethod
    def notify_cell_interaction(self) -> None:
        """Called after a click, checkbox toggle or value edit."""
        pass

    @abstractmethod
    def notify_table_change(self) -> None:
        """Called after every save."""
        pass

    @abstractmethod
    def show_notice(self, notice: EditNotice) -> None:
        pass

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        pass


class InMemoryHost(HostBindings):
    """
    Host keeping every external value in plain attributes.

    Timers are queued and only run when ``run_timers()`` is called, which
    lets callers observe the state between a save and its settle.
    """

    def __init__(self, rows: Optional[int] = None, cols: Optional[int] = None, snapshot: str = ""):
        self.rows = rows
        self.cols = cols
        self.snapshot = snapshot
        self.statistics: Optional[TableStatistics] = None
        self.cell_interactions = 0
        self.table_changes = 0
        self.notices: List[EditNotice] = []
        self.pending_timers: List[Tuple[int, Callable[[], None]]] = []

    def read_dimensions(self) -> Tuple[Optional[int], Optional[int]]:
        return self.rows, self.cols

    def write_dimensions(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols

    def read_snapshot(self) -> str:
        return self.snapshot

    def write_snapshot(self, payload: str) -> None:
        self.snapshot = payload

    def write_statistics(self, stats: TableStatistics) -> None:
        self.statistics = stats

    def notify_cell_interaction(self) -> None:
        self.cell_interactions += 1

    def notify_table_change(self) -> None:
        self.table_changes += 1

    def show_notice(self, notice: EditNotice) -> None:
        self.notices.append(notice)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending_timers.append((delay_ms, callback))

    def run_timers(self) -> int:
        """Run every queued timer callback; returns how many ran."""
        timers, self.pending_timers = self.pending_timers, []
        for _, callback in timers:
            callback()
        return len(timers)


class JsonFileHost(InMemoryHost):
    """In-memory host that mirrors the snapshot to a JSON file on disk."""

    def __init__(self, filename: str, rows: Optional[int] = None, cols: Optional[int] = None):
        snapshot = ""
        if os.path.exists(filename):
            with open(filename, 'r', encoding='utf-8') as f:
                snapshot = f.read()
            logger.info(f"Loaded table snapshot from {filename}")
        super().__init__(rows=rows, cols=cols, snapshot=snapshot)
        self.filename = filename

    def write_snapshot(self, payload: str) -> None:
        super().write_snapshot(payload)
        with open(self.filename, 'w', encoding='utf-8') as f:
            f.write(payload)
        logger.debug(f"Saved table snapshot to {self.filename}")
