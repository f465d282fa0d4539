"""
Feedback suppression between the editor and its host.

The host reflects back every value the editor writes to it. Two small state
holders keep the editor from re-importing its own output:

- EchoGuard: after the editor pushes row/column counts outward, the next
  inbound dimension update is its own echo and is ignored exactly once.
- SaveGate: while a save is in flight (until the settle timer fires) inbound
  snapshots are ignored, and afterwards a payload identical to the last save
  is still recognised as an echo.
"""
from enum import Enum
from typing import Optional


class SyncState(Enum):
    IDLE = "idle"
    AWAITING_ECHO = "awaiting_echo"


class EchoGuard:
    """Two-state machine: IDLE -> AWAITING_ECHO on arm(), back on consume()."""

    def __init__(self):
        self.state = SyncState.IDLE

    def arm(self) -> None:
        """Record that the editor just wrote dimensions to the host."""
        self.state = SyncState.AWAITING_ECHO

    def consume(self) -> bool:
        """
        Observe one inbound update.

        Returns:
            True if the update is the editor's own echo and must be ignored
        """
        if self.state is SyncState.AWAITING_ECHO:
            self.state = SyncState.IDLE
            return True
        return False

    @property
    def armed(self) -> bool:
        return self.state is SyncState.AWAITING_ECHO


class SaveGate:
    """Tracks the in-flight save and the last payload handed to the host."""

    def __init__(self):
        self.saving = False
        self.last_saved: Optional[str] = None

    def begin(self, payload: str) -> None:
        self.saving = True
        self.last_saved = payload

    def settle(self) -> None:
        self.saving = False

    def remember(self, payload: str) -> None:
        """Record a payload that was loaded from the host."""
        self.last_saved = payload

    def should_ignore(self, incoming: Optional[str]) -> bool:
        if self.saving:
            return True
        return bool(incoming) and incoming == self.last_saved
