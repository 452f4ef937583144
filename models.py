"""
models.py

Data models and constants for the SVG editor core.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple


# ----------------------------
# Asset model
# ----------------------------

@dataclass
class SvgAsset:
    """One SVG file loaded onto the canvas as an independently placed asset.

    ``position``, ``scale``, ``rotation`` and ``opacity`` are the fields a
    TransformAssetCommand edits; ``id`` and ``imported_at`` are assigned by
    the AssetStore.
    """
    id: str = ""
    name: str = ""
    content: str = ""                                  # raw SVG markup
    position: Tuple[float, float] = (0.0, 0.0)
    scale: float = 1.0                                 # 1.0 = 100%
    z_index: int = 0                                   # higher draws on top
    visible: bool = True
    rotation: float = 0.0                              # degrees
    opacity: float = 1.0                               # 0-1
    imported_at: float = 0.0                           # epoch seconds

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SvgAsset":
        """Create an SvgAsset from a dict, ignoring unknown keys.

        Args:
            d: Asset dict, possibly partial.

        Returns:
            An ``SvgAsset`` with defaults for missing fields.
        """
        if not isinstance(d, dict):
            return cls()
        known = {k: v for k, v in d.items() if k in ASSET_FIELDS}
        if "position" in known:
            x, y = known["position"]
            known["position"] = (float(x), float(y))
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


ASSET_FIELDS = frozenset(f.name for f in fields(SvgAsset))

# Fields the store assigns; never part of the data handed to add_asset().
ASSET_IDENTITY_FIELDS = frozenset({"id", "imported_at"})


# ----------------------------
# Clipboard model
# ----------------------------

@dataclass
class SerializedElement:
    """Clipboard snapshot of one element subtree."""
    markup: str
    tag: str
    id: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)


# ----------------------------
# Z-order actions
# ----------------------------

class ZOrderAction:
    """Stacking-order actions for ZOrderCommand."""
    TO_FRONT = "toFront"
    TO_BACK = "toBack"
    FORWARD = "forward"
    BACKWARD = "backward"

    ALL = (TO_FRONT, TO_BACK, FORWARD, BACKWARD)

    NAMES = {
        TO_FRONT: "Bring to Front",
        TO_BACK: "Send to Back",
        FORWARD: "Bring Forward",
        BACKWARD: "Send Backward",
    }


# ----------------------------
# Resize handles
# ----------------------------

class ResizeHandle:
    """Bounding-box handles a resize gesture can start from."""
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    ALL = (TOP_LEFT, TOP_RIGHT, BOTTOM_LEFT, BOTTOM_RIGHT, TOP, RIGHT, BOTTOM, LEFT)
