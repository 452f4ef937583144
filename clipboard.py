"""
clipboard.py

Clipboard payloads for copy/paste of SVG elements.

Copied elements are stored as serialized snapshots so later edits to the
originals don't leak into pastes. Each paste gets fresh ids and a
cascading offset derived from the paste counter.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Dict, Iterable, List, Optional, Set, Tuple

from lxml import etree

from document import local_name
from models import SerializedElement
from settings import ClipboardSettings, get_settings
from shapes import apply_position_offset

log = logging.getLogger(__name__)

_URL_REF_RE = re.compile(r"url\(\s*#([^)\s]+)\s*\)")


def serialize_element(element) -> SerializedElement:
    """Snapshot an element subtree for clipboard storage."""
    return SerializedElement(
        markup=etree.tostring(element, encoding="unicode", with_tail=False),
        tag=local_name(element),
        id=element.get("id"),
        attributes={str(k): v for k, v in element.attrib.items()},
    )


def deserialize_element(serialized: SerializedElement):
    """Rebuild a detached element from a clipboard snapshot.

    Raises:
        ValueError: If the stored markup is not well-formed.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(serialized.markup.encode("utf-8"), parser)
    except etree.XMLSyntaxError as e:
        raise ValueError(f"Failed to deserialize <{serialized.tag}>: {e}") from e


def generate_unique_id(prefix: str = "element", taken: Iterable[str] = ()) -> str:
    """Return ``<prefix>-<uuid4>`` not present in *taken*."""
    taken = set(taken)
    while True:
        candidate = f"{prefix}-{uuid.uuid4()}"
        if candidate not in taken:
            return candidate


def update_element_ids(element, taken: Iterable[str] = (),
                       prefix: Optional[str] = None) -> Dict[str, str]:
    """
    Give every id in the subtree a fresh unique value and rewrite references.

    Only references to ids defined inside the subtree are rewritten: values
    of the form ``url(#id)`` anywhere in an attribute (including ``style``)
    and attribute values that are exactly ``#id`` (``href``/``xlink:href``).
    Text inside ``<style>`` elements is not rewritten.

    Args:
        element: Root of the subtree to update in place
        taken: Ids already in use in the target document
        prefix: Id prefix; defaults to the clipboard settings

    Returns:
        Mapping of old id -> new id
    """
    if prefix is None:
        prefix = get_settings().settings.clipboard.id_prefix
    used: Set[str] = set(taken)
    id_map: Dict[str, str] = {}

    nodes = [n for n in element.iter() if isinstance(n.tag, str)]
    for node in nodes:
        old_id = node.get("id")
        if not old_id:
            continue
        new_id = generate_unique_id(prefix, used)
        used.add(new_id)
        node.set("id", new_id)
        id_map[old_id] = new_id

    if not id_map:
        return id_map

    def _swap_url(match: "re.Match") -> str:
        ref = match.group(1)
        return f"url(#{id_map[ref]})" if ref in id_map else match.group(0)

    for node in nodes:
        for name, value in list(node.attrib.items()):
            if name == "id":
                continue
            new_value = _URL_REF_RE.sub(_swap_url, value)
            if new_value.startswith("#") and new_value[1:] in id_map:
                new_value = f"#{id_map[new_value[1:]]}"
            if new_value != value:
                node.set(name, new_value)
    return id_map


def calculate_paste_offset(index: int = 0,
                           settings: Optional[ClipboardSettings] = None) -> Tuple[float, float]:
    """Offset for the *index*-th paste of the same payload; grows with each paste."""
    if settings is None:
        settings = get_settings().settings.clipboard
    d = settings.paste_offset_base + index * settings.paste_offset_step
    return (d, d)


class Clipboard:
    """In-memory clipboard holding serialized element snapshots.

    The paste counter restarts whenever new content is copied, so the
    first paste of every payload lands at the base offset.
    """

    def __init__(self):
        self._payload: List[SerializedElement] = []
        self._paste_count = 0

    @property
    def payload(self) -> List[SerializedElement]:
        return list(self._payload)

    def has_content(self) -> bool:
        return bool(self._payload)

    def copy(self, elements: Iterable) -> int:
        """Store snapshots of *elements*; returns how many were copied."""
        self._payload = [serialize_element(el) for el in elements]
        self._paste_count = 0
        log.debug("Copied %d element(s) to clipboard", len(self._payload))
        return len(self._payload)

    def next_paste_index(self) -> int:
        """Return the current paste index and advance the counter."""
        index = self._paste_count
        self._paste_count += 1
        return index

    def clear(self) -> None:
        self._payload = []
        self._paste_count = 0


__all__ = [
    "Clipboard",
    "apply_position_offset",
    "calculate_paste_offset",
    "deserialize_element",
    "generate_unique_id",
    "serialize_element",
    "update_element_ids",
]
