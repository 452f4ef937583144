"""
gestures.py

Pointer gesture adapters for drag and resize.

A gesture mutates elements live while the pointer moves and records a
single retrospective command when it finishes:

    gesture = DragGesture(history, selection, scale=zoom)
    gesture.begin()              # snapshot before anything moves
    gesture.update(dx, dy)       # on every pointer move (total delta)
    gesture.finish()             # one MoveElementCommand, or nothing

Every update() re-applies the total delta to the pre-gesture snapshot, so
repeated calls never accumulate.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import QRectF

from debug_trace import trace
from document import local_name, restore_attr
from history import HistoryManager
from models import ResizeHandle
from settings import get_settings
from shapes import GeometryState, apply_geometry, capture_geometry, resized_state
from svg_transform import TRANSFORM_ATTR
from undo_commands import MoveElementCommand, ResizeElementCommand

log = logging.getLogger(__name__)


def resize_bounds(start: QRectF, handle: str, dx: float, dy: float,
                  keep_aspect: bool = False, min_size: Optional[float] = None) -> QRectF:
    """
    Bounding box after dragging *handle* by (dx, dy) from *start*.

    Edges named by the handle follow the pointer; the opposite edges stay
    put. With *keep_aspect* the start aspect ratio is preserved, driven by
    the horizontal edge for handles that touch left/right and by the
    vertical edge otherwise. Width and height are clamped to *min_size*
    (``[gestures] min_resize_size`` by default) by moving the dragged edge.

    Raises:
        ValueError: If *handle* is not a ResizeHandle value.
    """
    if handle not in ResizeHandle.ALL:
        raise ValueError(f"Unknown resize handle: {handle!r}")
    if min_size is None:
        min_size = get_settings().settings.gestures.min_resize_size

    left, top = start.left(), start.top()
    right, bottom = start.right(), start.bottom()

    if "left" in handle:
        left += dx
    if "right" in handle:
        right += dx
    if "top" in handle:
        top += dy
    if "bottom" in handle:
        bottom += dy

    if keep_aspect and start.width() > 0 and start.height() > 0:
        aspect = start.width() / start.height()
        if "left" in handle or "right" in handle:
            new_h = (right - left) / aspect
            if "top" in handle:
                top = bottom - new_h
            else:
                bottom = top + new_h
        else:
            new_w = (bottom - top) * aspect
            right = left + new_w

    if (right - left) < min_size:
        if "left" in handle:
            left = right - min_size
        else:
            right = left + min_size

    if (bottom - top) < min_size:
        if "top" in handle:
            top = bottom - min_size
        else:
            bottom = top + min_size

    return QRectF(left, top, right - left, bottom - top)


class DragGesture:
    """Live drag of one or more elements, recorded as one move.

    Args:
        history: Where the finished move is recorded.
        elements: Elements being dragged.
        scale: Viewport zoom factor; deltas are screen pixels.
    """

    def __init__(self, history: HistoryManager, elements, scale: float = 1.0):
        self.history = history
        self.elements: List = list(elements)
        self.scale = scale
        self._originals: Optional[List[Optional[str]]] = None
        self._delta = (0.0, 0.0)

    @property
    def active(self) -> bool:
        return self._originals is not None

    def begin(self) -> None:
        self._originals = [el.get(TRANSFORM_ATTR) for el in self.elements]
        self._delta = (0.0, 0.0)
        trace(f"drag begin: {len(self.elements)} element(s)", "GESTURE")

    def update(self, dx: float, dy: float) -> None:
        """Apply the total delta since begin()."""
        if not self.active:
            return
        self._delta = (dx, dy)
        self._command(dx, dy).execute()
        trace(f"drag update: ({dx}, {dy})", "GESTURE")

    def finish(self, dx: Optional[float] = None, dy: Optional[float] = None):
        """End the drag and record it.

        Returns:
            The recorded MoveElementCommand, or None for a zero-length drag.
        """
        if not self.active:
            return None
        if dx is None or dy is None:
            dx, dy = self._delta

        if dx == 0 and dy == 0:
            self._restore()
            trace("drag finish: no movement", "GESTURE")
            return None

        command = self._command(dx, dy)
        command.execute()
        self.history.record_without_executing(command)
        self._originals = None
        log.debug("Drag finished: %s by (%s, %s)", command.description, dx, dy)
        return command

    def cancel(self) -> None:
        if self.active:
            self._restore()
            trace("drag cancelled", "GESTURE")

    def _command(self, dx: float, dy: float) -> MoveElementCommand:
        return MoveElementCommand(self.elements, dx, dy, self.scale,
                                  original_transforms=self._originals)

    def _restore(self) -> None:
        for element, original in zip(self.elements, self._originals):
            restore_attr(element, TRANSFORM_ATTR, original)
        self._originals = None


class ResizeGesture:
    """Live resize of a single element from one of its bounding-box handles.

    Args:
        history: Where the finished resize is recorded.
        element: Element being resized.
        start_bounds: Screen-space bounding box at the start of the gesture.
        scale: Viewport zoom factor.
        keep_aspect: Preserve the start aspect ratio.
    """

    def __init__(self, history: HistoryManager, element, start_bounds: QRectF,
                 scale: float = 1.0, keep_aspect: bool = False):
        self.history = history
        self.element = element
        self.start_bounds = QRectF(start_bounds)
        self.scale = scale
        self.keep_aspect = keep_aspect
        self._snapshot: Optional[GeometryState] = None
        self._bounds = QRectF(start_bounds)

    @property
    def active(self) -> bool:
        return self._snapshot is not None

    @property
    def bounds(self) -> QRectF:
        """Current live bounding box."""
        return QRectF(self._bounds)

    def begin(self) -> None:
        self._snapshot = capture_geometry(self.element)
        self._bounds = QRectF(self.start_bounds)
        trace(f"resize begin: <{local_name(self.element)}> {self._snapshot}", "GESTURE")

    def update(self, handle: str, dx: float, dy: float) -> QRectF:
        """Resize live for a handle drag of (dx, dy) since begin()."""
        if not self.active:
            return self.bounds
        self._bounds = resize_bounds(self.start_bounds, handle, dx, dy, self.keep_aspect)
        self._apply(self._bounds)
        trace(f"resize update: {handle} ({dx}, {dy}) -> "
              f"{self._bounds.width()}x{self._bounds.height()}", "GESTURE")
        return self.bounds

    def finish(self):
        """End the resize and record it.

        Returns:
            The recorded ResizeElementCommand, or None when the size did
            not change.
        """
        if not self.active:
            return None

        start, end = self.start_bounds, self._bounds
        if end.width() == start.width() and end.height() == start.height():
            self._restore()
            trace("resize finish: size unchanged", "GESTURE")
            return None

        self._apply(end)
        command = ResizeElementCommand(
            self.element,
            start.width(), start.height(),
            end.width(), end.height(),
            self.scale,
            original_state=self._snapshot,
        )
        self.history.record_without_executing(command)
        self._snapshot = None
        log.debug("Resize finished: %s to %sx%s", command.description, end.width(), end.height())
        return command

    def cancel(self) -> None:
        if self.active:
            self._restore()
            trace("resize cancelled", "GESTURE")

    def _apply(self, bounds: QRectF) -> None:
        s = self.scale
        state = resized_state(
            self.element, self._snapshot,
            self.start_bounds.width() / s, self.start_bounds.height() / s,
            bounds.width() / s, bounds.height() / s,
        )
        apply_geometry(self.element, state)

    def _restore(self) -> None:
        apply_geometry(self.element, self._snapshot)
        self._snapshot = None
        self._bounds = QRectF(self.start_bounds)
