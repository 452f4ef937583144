"""
undo_commands.py

Reversible command implementations for undo/redo support.

Every mutating user action is one Command. Commands reach the history in
one of two ways (see history.HistoryManager):

* prospective - ``execute_command(cmd)`` performs the action and records it
  (delete, z-order, text edit, nudges, paste, asset operations);
* retrospective - a pointer gesture already applied the change live, so the
  command is built from the pre-gesture snapshot and recorded with
  ``record_without_executing(cmd)`` (drag, resize).
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from clipboard import calculate_paste_offset, deserialize_element, update_element_ids
from document import SvgDocument, document_order, local_name, restore_attr, set_text_content
from models import SerializedElement, SvgAsset, ZOrderAction
from settings import ClipboardSettings
from shapes import GeometryState, apply_geometry, apply_position_offset, capture_geometry, resized_state
from svg_transform import TRANSFORM_ATTR, TransformVector, parse_transform, serialize_transform

log = logging.getLogger(__name__)


def _as_list(elements) -> list:
    if isinstance(elements, (list, tuple)):
        return list(elements)
    return [elements]


def _describe(verb: str, elements: list) -> str:
    if len(elements) == 1:
        return f"{verb} {local_name(elements[0])}"
    return f"{verb} {len(elements)} elements"


class Command(ABC):
    """A reversible unit of work.

    ``execute()`` and ``undo()`` must be repeatable indefinitely:
    undo/redo/undo/... alternates between exactly two states.
    """

    description: str = ""

    @abstractmethod
    def execute(self) -> None:
        """Perform (or re-perform) the action."""

    @abstractmethod
    def undo(self) -> None:
        """Reverse the action."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description!r}>"


# ---------------------------------------------------------------------------
# Element commands
# ---------------------------------------------------------------------------

@dataclass
class _ElementTransform:
    element: Any
    original: Optional[str]   # None when the attribute was absent
    new: Optional[str]


class MoveElementCommand(Command):
    """Command for moving one or more elements by a translate delta.

    Args:
        elements: Element or list of elements to move.
        dx: Horizontal delta in screen pixels.
        dy: Vertical delta in screen pixels.
        scale: Viewport zoom factor; the delta is divided by it.
        original_transforms: Pre-gesture transform attribute values, one per
            element (None for an absent attribute). Required when the move
            was already applied live; when omitted the current attributes
            are read, which is only correct before the move happens.
    """

    def __init__(self, elements, dx: float, dy: float, scale: float = 1.0,
                 original_transforms: Optional[Sequence[Optional[str]]] = None):
        elements = _as_list(elements)
        if original_transforms is None:
            original_transforms = [el.get(TRANSFORM_ATTR) for el in elements]
        elif len(original_transforms) != len(elements):
            raise ValueError("original_transforms must match elements one to one")

        delta = TransformVector(translate_x=dx / scale, translate_y=dy / scale)
        self.positions: List[_ElementTransform] = []
        for element, original in zip(elements, original_transforms):
            new = serialize_transform(parse_transform(original).compose(delta))
            self.positions.append(_ElementTransform(element, original, new or None))

        self.dx = dx
        self.dy = dy
        self.description = _describe("Move", elements)

    def execute(self):
        for pos in self.positions:
            restore_attr(pos.element, TRANSFORM_ATTR, pos.new)

    def undo(self):
        for pos in self.positions:
            restore_attr(pos.element, TRANSFORM_ATTR, pos.original)


class ResizeElementCommand(Command):
    """Command for resizing an element according to its shape kind.

    Sizes are on-screen bounding-box sizes; *scale* (viewport zoom) and the
    element's own transform scale are divided out before they are applied
    to element attributes.

    Args:
        element: The element to resize.
        original_width, original_height: Bounding box size before resizing.
        new_width, new_height: Bounding box size after resizing.
        scale: Viewport zoom factor.
        original_state: Pre-gesture geometry snapshot (see
            shapes.capture_geometry). When given, the element has already
            been resized live and its current geometry is recorded as the
            forward state; otherwise the new geometry is computed from the
            element's current state and applied on execute().
    """

    def __init__(self, element, original_width: float, original_height: float,
                 new_width: float, new_height: float, scale: float = 1.0,
                 original_state: Optional[GeometryState] = None):
        self.element = element
        self.original_width = original_width / scale
        self.original_height = original_height / scale
        self.new_width = new_width / scale
        self.new_height = new_height / scale

        if original_state is None:
            self.original_state = capture_geometry(element)
            self.new_state = resized_state(
                element, self.original_state,
                self.original_width, self.original_height,
                self.new_width, self.new_height,
            )
        else:
            current = capture_geometry(element)
            keys = list(original_state) + [k for k in current if k not in original_state]
            self.original_state = {k: original_state.get(k, current.get(k)) for k in keys}
            self.new_state = {k: element.get(k) for k in keys}

        self.description = f"Resize {local_name(element)}"

    def execute(self):
        apply_geometry(self.element, self.new_state)

    def undo(self):
        apply_geometry(self.element, self.original_state)


class DeleteElementCommand(Command):
    """Command for deleting one or more elements.

    Each element's parent and next sibling are captured on the first
    execute(), in document order; undo re-inserts in reverse order so
    adjacent deletions come back in their original sequence.
    """

    def __init__(self, elements):
        self.elements = document_order(_as_list(elements))
        self._placements: Optional[List[tuple]] = None
        self.description = _describe("Delete", self.elements)

    def execute(self):
        if self._placements is None:
            self._placements = [(el, el.getparent(), el.getnext()) for el in self.elements]

        for element, _parent, _next in self._placements:
            parent = element.getparent()
            if parent is not None:
                parent.remove(element)

    def undo(self):
        for element, parent, next_sibling in reversed(self._placements or []):
            if parent is None:
                continue
            current = element.getparent()
            if current is not None:
                current.remove(element)
            if next_sibling is not None and next_sibling.getparent() is parent:
                next_sibling.addprevious(element)
            else:
                parent.append(element)


class ZOrderCommand(Command):
    """Command for changing an element's stacking order among its siblings.

    The original parent and next sibling are captured once, at construction.
    """

    def __init__(self, element, action: str):
        if action not in ZOrderAction.ALL:
            raise ValueError(f"Unknown z-order action: {action!r}")
        self.element = element
        self.action = action
        self.original_parent = element.getparent()
        self.original_next = element.getnext()
        self.description = f"{ZOrderAction.NAMES[action]} {local_name(element)}"

    def execute(self):
        element = self.element
        parent = element.getparent()
        if parent is None:
            return

        if self.action == ZOrderAction.TO_FRONT:
            parent.append(element)
        elif self.action == ZOrderAction.TO_BACK:
            parent.insert(0, element)
        elif self.action == ZOrderAction.FORWARD:
            next_sibling = element.getnext()
            if next_sibling is not None:
                next_sibling.addnext(element)
        elif self.action == ZOrderAction.BACKWARD:
            previous = element.getprevious()
            if previous is not None:
                previous.addprevious(element)

    def undo(self):
        parent = self.original_parent
        if parent is None:
            return
        if self.original_next is not None and self.original_next.getparent() is parent:
            self.original_next.addprevious(self.element)
        else:
            parent.append(self.element)


class TextEditCommand(Command):
    """Command for replacing the text content of a text element."""

    def __init__(self, element, original_text: str, new_text: str):
        self.element = element
        self.original_text = original_text
        self.new_text = new_text
        self.description = "Edit text"

    def execute(self):
        set_text_content(self.element, self.new_text)

    def undo(self):
        set_text_content(self.element, self.original_text)


class PasteElementCommand(Command):
    """Command for pasting clipboard snapshots into a parent element.

    Elements are built on the first execute() with fresh ids and an offset
    that grows with *paste_index*; redo re-appends the same elements so
    commands recorded later keep pointing at live elements.
    """

    def __init__(self, target_parent, copied_data: Sequence[SerializedElement],
                 paste_index: int = 0, settings: Optional[ClipboardSettings] = None):
        self.target_parent = target_parent
        self.copied_data = list(copied_data)
        self.paste_index = paste_index
        self.settings = settings
        self.pasted_elements: Optional[List[Any]] = None
        count = len(self.copied_data)
        self.description = f"Paste {count} element{'s' if count != 1 else ''}"

    def _build(self) -> List[Any]:
        taken = SvgDocument(self.target_parent.getroottree().getroot()).all_ids()
        prefix = self.settings.id_prefix if self.settings else None
        dx, dy = calculate_paste_offset(self.paste_index, self.settings)

        built = []
        for serialized in self.copied_data:
            try:
                element = deserialize_element(serialized)
            except ValueError as e:
                log.warning("Skipping clipboard entry: %s", e)
                continue
            id_map = update_element_ids(element, taken, prefix)
            taken.update(id_map.values())
            apply_position_offset(element, dx, dy)
            built.append(element)
        return built

    def execute(self):
        if self.pasted_elements is None:
            self.pasted_elements = self._build()
        for element in self.pasted_elements:
            parent = element.getparent()
            if parent is not None:
                parent.remove(element)
            self.target_parent.append(element)
        log.debug("Pasted %d element(s) at index %d", len(self.pasted_elements), self.paste_index)

    def undo(self):
        for element in self.pasted_elements or []:
            parent = element.getparent()
            if parent is not None:
                parent.remove(element)


# ---------------------------------------------------------------------------
# Asset commands
# ---------------------------------------------------------------------------

class ImportAssetCommand(Command):
    """Command for importing an asset into the store.

    The id and import time assigned on the first execute() are reused on
    redo, so the restored record matches the one that was undone.
    """

    def __init__(self, asset_data: Dict[str, Any],
                 add_asset_fn: Callable[..., str],
                 remove_asset_fn: Callable[[str], Optional[int]]):
        self.asset_data = dict(asset_data)
        self.add_asset_fn = add_asset_fn
        self.remove_asset_fn = remove_asset_fn
        self.asset_id: Optional[str] = None
        self.description = f"Import asset: {self.asset_data.get('name', '')}"

    def execute(self):
        if self.asset_id is None:
            self.asset_data.setdefault("imported_at", time.time())
            self.asset_id = self.add_asset_fn(self.asset_data)
        else:
            self.add_asset_fn(self.asset_data, self.asset_id)
        log.debug("Imported asset %s", self.asset_id)

    def undo(self):
        if self.asset_id:
            self.remove_asset_fn(self.asset_id)
            log.debug("Removed imported asset %s", self.asset_id)


class RemoveAssetCommand(Command):
    """Command for removing an asset; undo restores the full record under its id
    and at its former position in the asset list."""

    def __init__(self, asset_id: str,
                 get_asset_fn: Callable[[str], Optional[SvgAsset]],
                 remove_asset_fn: Callable[[str], Optional[int]],
                 add_asset_fn: Callable[..., str]):
        self.asset_id = asset_id
        self.get_asset_fn = get_asset_fn
        self.remove_asset_fn = remove_asset_fn
        self.add_asset_fn = add_asset_fn
        self.removed_asset: Optional[SvgAsset] = None
        self.removed_index: Optional[int] = None
        asset = get_asset_fn(asset_id)
        self.description = f"Remove asset: {asset.name if asset else asset_id}"

    def execute(self):
        self.removed_asset = self.get_asset_fn(self.asset_id)
        if self.removed_asset is None:
            log.debug("Remove asset: %s no longer exists", self.asset_id)
            return
        self.removed_index = self.remove_asset_fn(self.asset_id)

    def undo(self):
        if self.removed_asset is None:
            return
        self.add_asset_fn(self.removed_asset.to_dict(), self.removed_asset.id, self.removed_index)
        log.debug("Restored asset %s", self.removed_asset.id)


class TransformAssetCommand(Command):
    """Command for changing asset placement fields (position, scale, rotation, opacity).

    Only the fields named in *updates* are captured and restored.
    """

    def __init__(self, asset_id: str, updates: Dict[str, Any],
                 get_asset_fn: Callable[[str], Optional[SvgAsset]],
                 update_asset_fn: Callable[[str, Dict[str, Any]], None]):
        self.asset_id = asset_id
        self.new_state = dict(updates)
        self.update_asset_fn = update_asset_fn
        self.original_state: Dict[str, Any] = {}

        asset = get_asset_fn(asset_id)
        if asset is not None:
            for key in updates:
                if hasattr(asset, key):
                    self.original_state[key] = getattr(asset, key)

        kinds = [k for k in ("position", "scale", "rotation", "opacity") if k in updates]
        kinds += [k for k in updates if k not in kinds]
        self.description = f"Transform asset: {', '.join(kinds)}"

    def execute(self):
        self.update_asset_fn(self.asset_id, self.new_state)

    def undo(self):
        if self.original_state:
            self.update_asset_fn(self.asset_id, self.original_state)
