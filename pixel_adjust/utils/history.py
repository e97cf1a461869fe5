# History management for undo/redo of effect checkpoints
"""
Provides a generic history stack for undo/redo operations.

The effects orchestrator stores one checkpoint per committed parameter change;
the stack itself knows nothing about rasters or parameters.
"""

from typing import TypeVar, Generic, Optional, List
from dataclasses import dataclass, field
from copy import deepcopy
import time

from .logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class HistoryEntry(Generic[T]):
    """A single entry in the history stack."""
    state: T
    description: str = ""
    timestamp: float = field(default_factory=time.time)


class HistoryStack(Generic[T]):
    """
    Generic history stack supporting undo/redo operations.

    The top of the undo stack is the current state, so undo needs at least
    two entries.
    """

    def __init__(
        self,
        max_size: int = 50,
        deep_copy: bool = True,
    ):
        """
        Initialize the history stack.

        Args:
            max_size: Maximum number of history entries to keep.
            deep_copy: Whether to deep copy states when pushing and returning.
        """
        self._undo_stack: List[HistoryEntry[T]] = []
        self._redo_stack: List[HistoryEntry[T]] = []
        self._max_size = max_size
        self._deep_copy = deep_copy

    def push(self, state: T, description: str = "") -> None:
        """
        Push a new state onto the history stack.

        Args:
            state: The state to save.
            description: Optional description of the change.
        """
        if self._deep_copy:
            state = deepcopy(state)

        entry = HistoryEntry(state=state, description=description)
        self._undo_stack.append(entry)

        # A new action invalidates anything that was undone
        self._redo_stack.clear()

        while len(self._undo_stack) > self._max_size:
            self._undo_stack.pop(0)

        logger.debug("History push: %s (stack size: %d)", description or "unnamed", len(self._undo_stack))

    def undo(self) -> Optional[T]:
        """
        Undo the last action and return the previous state.

        Returns:
            The previous state, or None if nothing to undo.
        """
        if not self.can_undo():
            logger.debug("Nothing to undo")
            return None

        current = self._undo_stack.pop()
        self._redo_stack.append(current)

        entry = self._undo_stack[-1]
        logger.debug("Undo: restored to '%s'", entry.description or "unnamed")
        return self._export(entry.state)

    def redo(self) -> Optional[T]:
        """
        Redo the last undone action and return the restored state.

        Returns:
            The restored state, or None if nothing to redo.
        """
        if not self.can_redo():
            logger.debug("Nothing to redo")
            return None

        entry = self._redo_stack.pop()
        self._undo_stack.append(entry)

        logger.debug("Redo: restored to '%s'", entry.description or "unnamed")
        return self._export(entry.state)

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._undo_stack) > 1

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._redo_stack) > 0

    def clear(self) -> None:
        """Clear all history."""
        self._undo_stack.clear()
        self._redo_stack.clear()
        logger.debug("History cleared")

    def get_undo_description(self) -> Optional[str]:
        """Get description of the action that would be undone."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return None

    def get_redo_description(self) -> Optional[str]:
        """Get description of the action that would be redone."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return None

    def get_undo_count(self) -> int:
        """Get number of available undo steps."""
        return max(0, len(self._undo_stack) - 1)

    def get_redo_count(self) -> int:
        return len(self._redo_stack)

    def get_current_state(self) -> Optional[T]:
        """Get the current state without modifying history."""
        if self._undo_stack:
            return self._export(self._undo_stack[-1].state)
        return None

    def descriptions(self) -> List[str]:
        """Descriptions of the undo stack, oldest first."""
        return [entry.description for entry in self._undo_stack]

    def __len__(self) -> int:
        return len(self._undo_stack)

    def _export(self, state: T) -> T:
        if self._deep_copy:
            return deepcopy(state)
        return state
