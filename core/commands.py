"""
Command pattern for undo/redo in the Tableview editor.

Grids are immutable, so a command only has to remember the version it
replaced and the version it installed. Commands act on any target exposing
a ``grid`` attribute (the TableEditor).
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.grid_model import TableGrid

logger = logging.getLogger(__name__)


class Command(ABC):
    """Abstract base class for all reversible commands."""

    @abstractmethod
    def execute(self, target) -> bool:
        """Execute the command. Returns True if successful."""
        pass

    @abstractmethod
    def undo(self, target) -> bool:
        """Undo the command. Returns True if successful."""
        pass

    @abstractmethod
    def get_description(self) -> str:
        """Get human-readable description of the command."""
        pass


class ReplaceGridCommand(Command):
    """Swap the target's grid for a new version."""

    def __init__(self, new_grid: TableGrid, description: str):
        self.new_grid = new_grid
        self.description = description
        self.old_grid: Optional[TableGrid] = None

    def execute(self, target) -> bool:
        if target.grid is self.new_grid:
            return False
        self.old_grid = target.grid
        target.grid = self.new_grid
        return True

    def undo(self, target) -> bool:
        if self.old_grid is None:
            return False
        target.grid = self.old_grid
        return True

    def get_description(self) -> str:
        return self.description


class CommandHistory:
    """Manages command history for undo/redo operations."""

    def __init__(self, max_history: int = 100):
        self.max_history = max_history
        self.history: List[Command] = []
        self.current_index = -1  # Points to last executed command

    def execute_command(self, command: Command, target) -> bool:
        """Execute a command and add it to history."""
        if not command.execute(target):
            return False

        # Executing after an undo drops the redo branch
        del self.history[self.current_index + 1:]
        self.history.append(command)
        self.current_index += 1

        if len(self.history) > self.max_history:
            self.history.pop(0)
            self.current_index -= 1

        logger.debug(f"Executed: {command.get_description()}")
        return True

    def can_undo(self) -> bool:
        return self.current_index >= 0

    def can_redo(self) -> bool:
        return self.current_index < len(self.history) - 1

    def undo(self, target) -> bool:
        """Undo the last command."""
        if not self.can_undo():
            return False
        if not self.history[self.current_index].undo(target):
            return False
        self.current_index -= 1
        return True

    def redo(self, target) -> bool:
        """Redo the next command."""
        if not self.can_redo():
            return False
        if not self.history[self.current_index + 1].execute(target):
            return False
        self.current_index += 1
        return True

    def get_undo_description(self) -> Optional[str]:
        if not self.can_undo():
            return None
        return self.history[self.current_index].get_description()

    def get_redo_description(self) -> Optional[str]:
        if not self.can_redo():
            return None
        return self.history[self.current_index + 1].get_description()

    def clear_history(self):
        self.history.clear()
        self.current_index = -1

    def get_history_info(self) -> Dict[str, Any]:
        """Get information about current history state."""
        return {
            "total_commands": len(self.history),
            "current_index": self.current_index,
            "can_undo": self.can_undo(),
            "can_redo": self.can_redo(),
            "undo_description": self.get_undo_description(),
            "redo_description": self.get_redo_description()
        }
