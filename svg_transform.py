"""
svg_transform.py

Restricted SVG transform model: parse, serialize and compose the
``translate`` / ``scale`` / ``rotate`` fragments the editor writes into an
element's ``transform`` attribute.

Composition is component-wise, not matrix multiplication: translations
add, scales multiply and rotation degrees add. Moves and resizes always
compose a delta into the parsed vector; only ``set_absolute_scale``
overwrites a component.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from utils import format_number, parse_numbers

TRANSFORM_ATTR = "transform"

_FRAGMENT_RE = re.compile(r"\b(translate|scale|rotate)\s*\(([^)]*)\)")


@dataclass
class TransformVector:
    """Composed effect of every transform fragment in one attribute string."""
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotate: float = 0.0   # degrees

    def compose(self, other: "TransformVector") -> "TransformVector":
        """Return the component-wise composition of two vectors."""
        return TransformVector(
            translate_x=self.translate_x + other.translate_x,
            translate_y=self.translate_y + other.translate_y,
            scale_x=self.scale_x * other.scale_x,
            scale_y=self.scale_y * other.scale_y,
            rotate=self.rotate + other.rotate,
        )

    def is_identity(self) -> bool:
        return (
            self.translate_x == 0 and self.translate_y == 0
            and self.scale_x == 1 and self.scale_y == 1
            and self.rotate == 0
        )


def parse_transform(text: Optional[str]) -> TransformVector:
    """
    Parse a transform attribute string into a TransformVector.

    Repeated fragments of the same kind are folded by the composition
    rule, so ``"scale(1.5) scale(2)"`` yields a scale of 3. Unrecognised
    fragments and fragments without a usable number are ignored; this
    function never raises.

    Args:
        text: The transform attribute value (may be None or empty)

    Returns:
        The composed TransformVector (identity for empty input)
    """
    result = TransformVector()
    if not text:
        return result

    for match in _FRAGMENT_RE.finditer(text):
        kind = match.group(1)
        values = parse_numbers(match.group(2))
        if not values:
            continue
        if kind == "translate":
            tx = values[0]
            ty = values[1] if len(values) > 1 else 0.0
            result = result.compose(TransformVector(translate_x=tx, translate_y=ty))
        elif kind == "scale":
            sx = values[0]
            sy = values[1] if len(values) > 1 else sx
            result = result.compose(TransformVector(scale_x=sx, scale_y=sy))
        else:
            # rotate(deg[, cx, cy]) - the centre is not part of the model
            result = result.compose(TransformVector(rotate=values[0]))
    return result


def serialize_transform(vector: TransformVector) -> str:
    """
    Serialize a TransformVector in canonical ``translate scale rotate`` order.

    A component equal to its identity value is omitted, so the identity
    vector serializes to the empty string.
    """
    parts = []
    if vector.translate_x != 0 or vector.translate_y != 0:
        parts.append(
            f"translate({format_number(vector.translate_x)}, {format_number(vector.translate_y)})"
        )
    if vector.scale_x != 1 or vector.scale_y != 1:
        parts.append(
            f"scale({format_number(vector.scale_x)}, {format_number(vector.scale_y)})"
        )
    if vector.rotate != 0:
        parts.append(f"rotate({format_number(vector.rotate)})")
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Element helpers
# ---------------------------------------------------------------------------

def get_transform(element) -> TransformVector:
    """Parse the element's current transform attribute."""
    return parse_transform(element.get(TRANSFORM_ATTR))


def set_transform(element, vector: TransformVector) -> None:
    """Write *vector* to the element, removing the attribute for identity."""
    text = serialize_transform(vector)
    if text:
        element.set(TRANSFORM_ATTR, text)
    elif TRANSFORM_ATTR in element.attrib:
        del element.attrib[TRANSFORM_ATTR]


def apply_translation(element, dx: float, dy: float, scale: float = 1.0) -> None:
    """
    Add a pointer delta to the element's translation.

    Args:
        element: Target element
        dx: Horizontal delta in screen pixels
        dy: Vertical delta in screen pixels
        scale: Viewport zoom factor divided out of the delta
    """
    vector = get_transform(element).compose(
        TransformVector(translate_x=dx / scale, translate_y=dy / scale)
    )
    set_transform(element, vector)


def apply_scale_ratio(element, ratio_x: float, ratio_y: float) -> None:
    """Multiply the element's scale by the given ratios."""
    vector = get_transform(element).compose(
        TransformVector(scale_x=ratio_x, scale_y=ratio_y)
    )
    set_transform(element, vector)


def set_absolute_scale(element, scale_x: float, scale_y: float) -> None:
    """Overwrite the scale component, keeping translate and rotate."""
    vector = get_transform(element)
    vector.scale_x = scale_x
    vector.scale_y = scale_y
    set_transform(element, vector)
