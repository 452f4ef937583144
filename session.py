"""
session.py

Editing session: one document, one history, one asset store, one clipboard.

Every user-facing action goes through the session so that it lands in the
history as exactly one command. The session holds no module-level state;
several sessions can coexist (e.g. one per open file).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from PyQt6.QtCore import QObject, QRectF, pyqtSignal

import debug_trace
from assets import AssetStore, sync_asset_element
from clipboard import Clipboard
from document import SvgDocument, is_attached, text_content
from gestures import DragGesture, ResizeGesture
from history import HistoryManager
from settings import AppSettings, get_settings
from shapes import element_bounds
from undo_commands import (
    Command,
    DeleteElementCommand,
    ImportAssetCommand,
    MoveElementCommand,
    PasteElementCommand,
    RemoveAssetCommand,
    TextEditCommand,
    TransformAssetCommand,
    ZOrderCommand,
)

log = logging.getLogger(__name__)

_ARROWS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


class EditorSession(QObject):
    """Editing state for one SVG document.

    Args:
        document: Document to edit; an empty one is created if omitted.
        settings: Settings to use; defaults to the global settings.
        parent: Optional QObject parent.

    Signals:
        selectionChanged(): The selection list was replaced.
        documentReplaced(): load_svg() or clear_document() ran.
    """

    selectionChanged = pyqtSignal()
    documentReplaced = pyqtSignal()

    def __init__(self, document: Optional[SvgDocument] = None,
                 settings: Optional[AppSettings] = None, parent=None):
        super().__init__(parent)
        self.settings = settings if settings is not None else get_settings().settings
        if self.settings.debug.trace:
            debug_trace.enable(True)
        self.document = document if document is not None else SvgDocument()
        self.history = HistoryManager(self.settings.history.max_size, self)
        self.assets = AssetStore(self)
        self.clipboard = Clipboard()
        self.selection: List[Any] = []

        self.assets.assetAdded.connect(self._sync_asset)
        self.assets.assetUpdated.connect(self._sync_asset)

    # ------------------------------------------------------------------
    # Document and selection
    # ------------------------------------------------------------------

    def load_svg(self, markup: str) -> SvgDocument:
        """Replace the document with parsed *markup*; history is cleared.

        Raises:
            DocumentError: If the markup is not well-formed.
        """
        self.document = SvgDocument.from_string(markup)
        self._reset()
        return self.document

    def clear_document(self) -> None:
        self.document.clear()
        self._reset()

    def _reset(self) -> None:
        self.assets.clear()
        self.history.clear_history()
        self.set_selection([])
        self.documentReplaced.emit()

    def set_selection(self, elements) -> None:
        self.selection = list(elements)
        self.selectionChanged.emit()

    def clear_selection(self) -> None:
        self.set_selection([])

    def _prune_selection(self) -> None:
        alive = [el for el in self.selection if is_attached(el)]
        if len(alive) != len(self.selection):
            self.set_selection(alive)

    def _run(self, command: Command) -> Command:
        self.history.execute_command(command)
        log.debug("Executed: %s", command.description)
        return command

    # ------------------------------------------------------------------
    # Element actions
    # ------------------------------------------------------------------

    def delete_selected(self) -> Optional[Command]:
        if not self.selection:
            return None
        command = self._run(DeleteElementCommand(self.selection))
        self.set_selection([])
        return command

    def z_order(self, action: str) -> Optional[Command]:
        """Restack the primary (first) selected element."""
        if not self.selection:
            return None
        return self._run(ZOrderCommand(self.selection[0], action))

    def nudge(self, dx: int, dy: int, large: bool = False) -> Optional[Command]:
        """Move the selection by (dx, dy) nudge steps, as the arrow keys do."""
        if not self.selection or (dx == 0 and dy == 0):
            return None
        gestures = self.settings.gestures
        step = gestures.nudge_step_large if large else gestures.nudge_step
        return self._run(MoveElementCommand(self.selection, dx * step, dy * step))

    def edit_text(self, element, new_text: str) -> Optional[Command]:
        """Replace an element's text; nothing is recorded if it is unchanged."""
        original = text_content(element)
        if original == new_text:
            return None
        return self._run(TextEditCommand(element, original, new_text))

    def copy_selected(self) -> int:
        return self.clipboard.copy(self.selection)

    def paste(self, target_parent=None) -> Optional[Command]:
        """Paste the clipboard into *target_parent* (the root by default).

        The pasted elements become the selection.
        """
        if not self.clipboard.has_content():
            return None
        parent = self.document.root if target_parent is None else target_parent
        command = PasteElementCommand(
            parent,
            self.clipboard.payload,
            self.clipboard.next_paste_index(),
            self.settings.clipboard,
        )
        self._run(command)
        self.set_selection(command.pasted_elements)
        return command

    # ------------------------------------------------------------------
    # Asset actions
    # ------------------------------------------------------------------

    def import_asset(self, data: Dict[str, Any]) -> str:
        """Import an asset and return its id."""
        command = ImportAssetCommand(data, self.assets.add_asset, self.assets.remove_asset)
        self._run(command)
        return command.asset_id

    def remove_asset(self, asset_id: str) -> Command:
        return self._run(RemoveAssetCommand(
            asset_id, self.assets.get_asset, self.assets.remove_asset, self.assets.add_asset,
        ))

    def transform_asset(self, asset_id: str, **updates) -> Command:
        """Change asset placement fields, e.g. ``transform_asset(id, scale=2.0)``."""
        return self._run(TransformAssetCommand(
            asset_id, updates, self.assets.get_asset, self.assets.update_asset,
        ))

    def _sync_asset(self, asset_id: str) -> None:
        asset = self.assets.get_asset(asset_id)
        if asset is not None:
            sync_asset_element(self.document, asset)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def begin_drag(self, scale: float = 1.0) -> Optional[DragGesture]:
        if not self.selection:
            return None
        gesture = DragGesture(self.history, self.selection, scale)
        gesture.begin()
        return gesture

    def begin_resize(self, start_bounds: Optional[QRectF] = None, scale: float = 1.0,
                     keep_aspect: bool = False) -> Optional[ResizeGesture]:
        """Start resizing the primary selected element.

        *start_bounds* is the on-screen box; when omitted it is derived
        from the element geometry times *scale*. Returns None when there is
        no selection or no known box.
        """
        if not self.selection:
            return None
        element = self.selection[0]
        if start_bounds is None:
            box = element_bounds(element)
            if box is None:
                log.debug("begin_resize: no bounds for %s", element.tag)
                return None
            start_bounds = QRectF(box.x() * scale, box.y() * scale,
                                  box.width() * scale, box.height() * scale)
        gesture = ResizeGesture(self.history, element, start_bounds, scale, keep_aspect)
        gesture.begin()
        return gesture

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> None:
        self.history.undo()
        self._prune_selection()

    def redo(self) -> None:
        self.history.redo()
        self._prune_selection()

    def handle_shortcut(self, shortcut: str) -> bool:
        """Dispatch a key chord such as ``"Ctrl+Z"`` or ``"Shift+Left"``.

        Ctrl and Meta are interchangeable. Returns True when the chord was
        recognised.
        """
        parts = [p.strip().lower() for p in shortcut.split("+") if p.strip()]
        if not parts:
            return False
        key = parts[-1]
        mods = set(parts[:-1])
        command_mod = bool(mods & {"ctrl", "control", "meta", "cmd"})
        shift = "shift" in mods
        if key.startswith("arrow"):
            key = key[len("arrow"):]

        if command_mod and key == "z":
            if shift:
                self.redo()
            else:
                self.undo()
            return True
        if command_mod and key == "y":
            self.redo()
            return True
        if command_mod and key == "c":
            self.copy_selected()
            return True
        if command_mod and key == "v":
            self.paste()
            return True
        if key in ("delete", "del") and not mods:
            self.delete_selected()
            return True
        if key in ("escape", "esc"):
            self.clear_selection()
            return True
        if key in _ARROWS and not command_mod:
            dx, dy = _ARROWS[key]
            self.nudge(dx, dy, large=shift)
            return True
        return False
