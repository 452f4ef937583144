"""
history.py

Linear undo/redo history with a cursor.

The history is a list of commands plus an index pointing at the last
applied one (-1 when nothing is applied). Recording a new command after
undoing discards the redo branch; exceeding the capacity drops the oldest
command. Undo with nothing to undo and redo at the head are silent no-ops.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

import debug_trace
from debug_trace import format_history, trace, trace_call
from settings import get_settings
from undo_commands import Command

log = logging.getLogger(__name__)


class HistoryManager(QObject):
    """Records commands and walks them back and forth.

    Args:
        max_history_size: Capacity; defaults to ``[history] max_size`` from
            settings.
        parent: Optional QObject parent.

    Signals:
        canUndoChanged(bool): Emitted when can_undo() flips.
        canRedoChanged(bool): Emitted when can_redo() flips.
        indexChanged(int): Emitted when the cursor moves.
        historyCleared(): Emitted by clear_history().
    """

    canUndoChanged = pyqtSignal(bool)
    canRedoChanged = pyqtSignal(bool)
    indexChanged = pyqtSignal(int)
    historyCleared = pyqtSignal()

    def __init__(self, max_history_size: Optional[int] = None, parent=None):
        super().__init__(parent)
        if max_history_size is None:
            max_history_size = get_settings().settings.history.max_size
        if max_history_size < 1:
            raise ValueError(f"max_history_size must be positive, got {max_history_size}")
        self.max_history_size = max_history_size
        self._history: List[Command] = []
        self._index = -1

    @property
    def index(self) -> int:
        """Position of the last applied command, -1 when none is applied."""
        return self._index

    def can_undo(self) -> bool:
        return self._index >= 0

    def can_redo(self) -> bool:
        return self._index < len(self._history) - 1

    def get_history(self) -> List[Command]:
        """Copy of the recorded commands, oldest first."""
        return list(self._history)

    def undo_description(self) -> str:
        return self._history[self._index].description if self.can_undo() else ""

    def redo_description(self) -> str:
        return self._history[self._index + 1].description if self.can_redo() else ""

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @trace_call("HISTORY")
    def execute_command(self, command: Command) -> None:
        """Run *command* and record it.

        If execute() raises, the exception propagates and nothing is
        recorded.
        """
        command.execute()
        self._push(command)

    @trace_call("HISTORY")
    def record_without_executing(self, command: Command) -> None:
        """Record a command whose effect is already applied (gestures)."""
        self._push(command)

    @trace_call("HISTORY")
    def undo(self) -> None:
        if not self.can_undo():
            return
        state = self._state()
        command = self._history[self._index]
        command.undo()
        self._index -= 1
        log.debug("Undo: %s (index %d)", command.description, self._index)
        self._emit_changes(state)
        self._trace_stack()

    @trace_call("HISTORY")
    def redo(self) -> None:
        if not self.can_redo():
            return
        state = self._state()
        command = self._history[self._index + 1]
        command.execute()
        self._index += 1
        log.debug("Redo: %s (index %d)", command.description, self._index)
        self._emit_changes(state)
        self._trace_stack()

    def clear_history(self) -> None:
        """Forget every command without undoing any of them."""
        state = self._state()
        self._history = []
        self._index = -1
        log.debug("History cleared")
        self.historyCleared.emit()
        self._emit_changes(state)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _push(self, command: Command) -> None:
        state = self._state()
        del self._history[self._index + 1:]
        self._history.append(command)
        self._index += 1

        if len(self._history) > self.max_history_size:
            dropped = self._history.pop(0)
            self._index -= 1
            trace(f"evicted {dropped.description!r}", "HISTORY")

        log.debug("Recorded: %s (index %d of %d)",
                  command.description, self._index, len(self._history))
        self._emit_changes(state)
        self._trace_stack()

    def _trace_stack(self) -> None:
        if debug_trace.DEBUG_TRACE:
            descriptions = [c.description for c in self._history]
            trace("stack:\n" + format_history(descriptions, self._index), "HISTORY")

    def _state(self):
        return (self.can_undo(), self.can_redo(), self._index)

    def _emit_changes(self, before) -> None:
        can_undo, can_redo, index = before
        if self.can_undo() != can_undo:
            self.canUndoChanged.emit(self.can_undo())
        if self.can_redo() != can_redo:
            self.canRedoChanged.emit(self.can_redo())
        if self._index != index:
            self.indexChanged.emit(self._index)
