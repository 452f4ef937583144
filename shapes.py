"""
shapes.py

Per-kind geometry handlers for SVG elements.

Every element resolves to exactly one ShapeKind. Primitive kinds edit
their own geometry attributes; GENERIC (groups, paths, polygons and any
unknown tag) falls back to composing into the transform attribute.
"""

from __future__ import annotations

import enum
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF

from document import local_name, restore_attr
from svg_transform import (
    TRANSFORM_ATTR,
    TransformVector,
    apply_translation,
    get_transform,
    parse_transform,
    serialize_transform,
)
from utils import format_number, parse_number, parse_numbers

# Geometry snapshot: attribute name -> value, None when the attribute was absent
GeometryState = Dict[str, Optional[str]]


class ShapeKind(enum.Enum):
    RECT = "rect"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    LINE = "line"
    TEXT = "text"
    GENERIC = "generic"

    @classmethod
    def of(cls, element) -> "ShapeKind":
        """Resolve the kind of *element* from its tag, defaulting to GENERIC."""
        return _TAG_KINDS.get(local_name(element), cls.GENERIC)


_TAG_KINDS = {
    "rect": ShapeKind.RECT,
    "image": ShapeKind.RECT,
    "use": ShapeKind.RECT,
    "circle": ShapeKind.CIRCLE,
    "ellipse": ShapeKind.ELLIPSE,
    "line": ShapeKind.LINE,
    "text": ShapeKind.TEXT,
}


def _num(element, name: str) -> float:
    return parse_number(element.get(name), 0.0)


def _state_num(state: GeometryState, name: str) -> float:
    return parse_number(state.get(name), 0.0)


def _ratio(new: float, old: float) -> float:
    return new / old if old else 1.0


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

class ShapeHandler:
    """Transform-based fallback used for every GENERIC element."""

    geometry_keys: Tuple[str, ...] = ()

    def position(self, element) -> QPointF:
        vector = get_transform(element)
        return QPointF(vector.translate_x, vector.translate_y)

    def offset(self, element, dx: float, dy: float) -> None:
        apply_translation(element, dx, dy)

    def resized(self, element, state: GeometryState,
                old_w: float, old_h: float, new_w: float, new_h: float) -> GeometryState:
        """New attribute values after resizing from the geometry in *state*."""
        vector = parse_transform(state.get(TRANSFORM_ATTR)).compose(
            TransformVector(scale_x=_ratio(new_w, old_w), scale_y=_ratio(new_h, old_h))
        )
        return {TRANSFORM_ATTR: serialize_transform(vector) or None}

    def local_bounds(self, element) -> Optional[QRectF]:
        tag = local_name(element)
        if tag in ("polygon", "polyline"):
            values = parse_numbers(element.get("points"))
            xs, ys = values[0::2], values[1::2]
            n = min(len(xs), len(ys))
            if not n:
                return None
            xs, ys = xs[:n], ys[:n]
            return QRectF(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))
        if tag in ("g", "svg", "a"):
            result = None
            for child in element:
                if not isinstance(child.tag, str):
                    continue
                rect = element_bounds(child)
                if rect is None:
                    continue
                result = rect if result is None else result.united(rect)
            return result
        return None


class RectHandler(ShapeHandler):
    geometry_keys = ("x", "y", "width", "height")

    def position(self, element) -> QPointF:
        return QPointF(_num(element, "x"), _num(element, "y"))

    def offset(self, element, dx: float, dy: float) -> None:
        element.set("x", format_number(_num(element, "x") + dx))
        element.set("y", format_number(_num(element, "y") + dy))

    def resized(self, element, state, old_w, old_h, new_w, new_h):
        return {"width": format_number(new_w), "height": format_number(new_h)}

    def local_bounds(self, element) -> Optional[QRectF]:
        return QRectF(_num(element, "x"), _num(element, "y"),
                      _num(element, "width"), _num(element, "height"))


class TextHandler(ShapeHandler):
    """Text positions by x/y but resizes through the transform fallback."""

    geometry_keys = ("x", "y")

    def position(self, element) -> QPointF:
        return QPointF(_num(element, "x"), _num(element, "y"))

    def offset(self, element, dx: float, dy: float) -> None:
        element.set("x", format_number(_num(element, "x") + dx))
        element.set("y", format_number(_num(element, "y") + dy))

    def local_bounds(self, element) -> Optional[QRectF]:
        return QRectF(_num(element, "x"), _num(element, "y"), 0.0, 0.0)


class CircleHandler(ShapeHandler):
    geometry_keys = ("cx", "cy", "r")

    def position(self, element) -> QPointF:
        return QPointF(_num(element, "cx"), _num(element, "cy"))

    def offset(self, element, dx: float, dy: float) -> None:
        element.set("cx", format_number(_num(element, "cx") + dx))
        element.set("cy", format_number(_num(element, "cy") + dy))

    def resized(self, element, state, old_w, old_h, new_w, new_h):
        return {"r": format_number(min(new_w, new_h) / 2)}

    def local_bounds(self, element) -> Optional[QRectF]:
        r = _num(element, "r")
        return QRectF(_num(element, "cx") - r, _num(element, "cy") - r, 2 * r, 2 * r)


class EllipseHandler(CircleHandler):
    geometry_keys = ("cx", "cy", "rx", "ry")

    def resized(self, element, state, old_w, old_h, new_w, new_h):
        return {"rx": format_number(new_w / 2), "ry": format_number(new_h / 2)}

    def local_bounds(self, element) -> Optional[QRectF]:
        rx, ry = _num(element, "rx"), _num(element, "ry")
        return QRectF(_num(element, "cx") - rx, _num(element, "cy") - ry, 2 * rx, 2 * ry)


class LineHandler(ShapeHandler):
    geometry_keys = ("x1", "y1", "x2", "y2")

    def position(self, element) -> QPointF:
        return QPointF(_num(element, "x1"), _num(element, "y1"))

    def offset(self, element, dx: float, dy: float) -> None:
        for key, delta in (("x1", dx), ("y1", dy), ("x2", dx), ("y2", dy)):
            element.set(key, format_number(_num(element, key) + delta))

    def resized(self, element, state, old_w, old_h, new_w, new_h):
        # Endpoints scale about (x1, y1)
        x1, y1 = _state_num(state, "x1"), _state_num(state, "y1")
        x2, y2 = _state_num(state, "x2"), _state_num(state, "y2")
        sx, sy = _ratio(new_w, old_w), _ratio(new_h, old_h)
        return {
            "x1": format_number(x1),
            "y1": format_number(y1),
            "x2": format_number(x1 + (x2 - x1) * sx),
            "y2": format_number(y1 + (y2 - y1) * sy),
        }

    def local_bounds(self, element) -> Optional[QRectF]:
        x1, y1 = _num(element, "x1"), _num(element, "y1")
        x2, y2 = _num(element, "x2"), _num(element, "y2")
        return QRectF(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))


HANDLERS: Dict[ShapeKind, ShapeHandler] = {
    ShapeKind.RECT: RectHandler(),
    ShapeKind.CIRCLE: CircleHandler(),
    ShapeKind.ELLIPSE: EllipseHandler(),
    ShapeKind.LINE: LineHandler(),
    ShapeKind.TEXT: TextHandler(),
    ShapeKind.GENERIC: ShapeHandler(),
}


def handler_for(element) -> ShapeHandler:
    return HANDLERS[ShapeKind.of(element)]


# ---------------------------------------------------------------------------
# Geometry snapshot helpers
# ---------------------------------------------------------------------------

def capture_geometry(element) -> GeometryState:
    """Snapshot the element's geometry attributes plus its transform.

    Returns a dict that can be passed to apply_geometry() to restore the
    element exactly, including attributes that were absent.
    """
    keys = handler_for(element).geometry_keys + (TRANSFORM_ATTR,)
    return {key: element.get(key) for key in keys}


def apply_geometry(element, state: GeometryState) -> None:
    """Restore geometry attributes from a snapshot dict."""
    for key, value in state.items():
        restore_attr(element, key, value)


def resized_state(element, state: GeometryState,
                  old_w: float, old_h: float, new_w: float, new_h: float) -> GeometryState:
    """
    Full geometry state after resizing from *state*.

    Sizes are bounding-box sizes as returned by element_bounds(), i.e.
    they include the element's own transform scale. That scale is divided
    out so primitive kinds receive local attribute units; ratio-based kinds
    are unaffected.
    """
    vector = parse_transform(state.get(TRANSFORM_ATTR))
    sx = abs(vector.scale_x) or 1.0
    sy = abs(vector.scale_y) or 1.0
    result = dict(state)
    result.update(handler_for(element).resized(
        element, state, old_w / sx, old_h / sy, new_w / sx, new_h / sy,
    ))
    return result


def element_position(element) -> QPointF:
    return handler_for(element).position(element)


def apply_position_offset(element, dx: float, dy: float) -> None:
    """Shift an element by (dx, dy) in its own coordinate space."""
    handler_for(element).offset(element, dx, dy)


def element_bounds(element) -> Optional[QRectF]:
    """
    Best-effort bounding box in the parent's coordinate space.

    The element's own translate and scale are applied; rotation is not.
    Returns None when the geometry cannot be determined (e.g. paths).
    """
    rect = handler_for(element).local_bounds(element)
    if rect is None:
        return None
    v = get_transform(element)
    return QRectF(
        v.translate_x + rect.x() * v.scale_x,
        v.translate_y + rect.y() * v.scale_y,
        rect.width() * v.scale_x,
        rect.height() * v.scale_y,
    ).normalized()
