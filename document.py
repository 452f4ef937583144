"""
document.py

SVG document wrapper and element accessors built on lxml.

Commands only ever touch elements through these helpers (attributes,
parent/sibling placement, text content), which keeps the command code
independent of how the document was loaded.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from lxml import etree

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

log = logging.getLogger(__name__)


class DocumentError(ValueError):
    """Raised when SVG markup cannot be parsed."""


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)


# ---------------------------------------------------------------------------
# Element accessors
# ---------------------------------------------------------------------------

def local_name(element) -> str:
    """Lower-case tag name without namespace (``"rect"`` for ``{svg}rect``)."""
    tag = element.tag
    if not isinstance(tag, str):
        # Comments and processing instructions
        return ""
    return etree.QName(tag).localname.lower()


def remove_attr(element, name: str) -> None:
    if name in element.attrib:
        del element.attrib[name]


def restore_attr(element, name: str, value: Optional[str]) -> None:
    """Set *name* to *value*, or remove it when the captured value was absent."""
    if value is None:
        remove_attr(element, name)
    else:
        element.set(name, value)


def text_content(element) -> str:
    """Concatenated text of the element and its descendants (DOM ``textContent``)."""
    return "".join(element.itertext())


def set_text_content(element, text: str) -> None:
    """Replace all children with a single text run (DOM ``textContent`` setter)."""
    for child in list(element):
        element.remove(child)
    element.text = text


def is_attached(element) -> bool:
    return element.getparent() is not None


def document_order(elements: Iterable) -> List:
    """
    Sort elements into document order.

    Elements sharing a root are ordered by their position in a depth-first
    walk of that root; detached elements keep their relative input order at
    the end.
    """
    elements = list(elements)
    positions: Dict[int, int] = {}
    roots = []
    for el in elements:
        root = el.getroottree().getroot()
        if root is not None and all(root is not r for r in roots):
            roots.append(root)
    offset = 0
    for root in roots:
        for i, node in enumerate(root.iter()):
            positions.setdefault(id(node), offset + i)
        offset += sum(1 for _ in root.iter())
    fallback = offset
    keyed = []
    for n, el in enumerate(elements):
        keyed.append((positions.get(id(el), fallback + n), n, el))
    keyed.sort(key=lambda t: (t[0], t[1]))
    return [el for _, _, el in keyed]


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

class SvgDocument:
    """An editable SVG element tree.

    Args:
        root: Root ``<svg>`` element. A fresh empty one is created if omitted.
    """

    def __init__(self, root=None):
        if root is None:
            root = etree.Element(f"{{{SVG_NS}}}svg", nsmap={None: SVG_NS, "xlink": XLINK_NS})
        self.root = root

    @classmethod
    def from_string(cls, markup: str) -> "SvgDocument":
        """Parse SVG markup.

        Raises:
            DocumentError: If the markup is not well-formed XML.
        """
        data = markup.encode("utf-8") if isinstance(markup, str) else markup
        try:
            root = etree.fromstring(data, _parser())
        except etree.XMLSyntaxError as e:
            raise DocumentError(f"Invalid SVG markup: {e}") from e
        log.debug("Loaded SVG document <%s> with %d elements",
                  local_name(root), sum(1 for _ in root.iter()))
        return cls(root)

    def to_string(self) -> str:
        return etree.tostring(self.root, encoding="unicode")

    def new_element(self, tag: str, parent=None, **attrs):
        """Create an SVG element; appended to *parent* when given."""
        qualified = f"{{{SVG_NS}}}{tag}"
        attrib = {k.replace("_", "-"): str(v) for k, v in attrs.items()}
        if parent is not None:
            return etree.SubElement(parent, qualified, attrib)
        return etree.Element(qualified, attrib, nsmap={None: SVG_NS})

    def find_by_id(self, element_id: str):
        """Return the element with ``id == element_id`` or None."""
        for el in self.root.iter():
            if isinstance(el.tag, str) and el.get("id") == element_id:
                return el
        return None

    def find_by_attr(self, name: str, value: str):
        for el in self.root.iter():
            if isinstance(el.tag, str) and el.get(name) == value:
                return el
        return None

    def all_ids(self) -> Set[str]:
        return {
            el.get("id") for el in self.root.iter()
            if isinstance(el.tag, str) and el.get("id")
        }

    def children(self, parent=None) -> List:
        """Element children of *parent* (root by default), in order."""
        parent = self.root if parent is None else parent
        return [c for c in parent if isinstance(c.tag, str)]

    def clear(self) -> None:
        """Remove every child of the root element."""
        for child in list(self.root):
            self.root.remove(child)
