"""
assets.py

Asset store for multiple SVG files placed on one canvas.

The store is the collaborator asset commands act on: get/add/update/remove
by id. Unknown ids are ignored so a command whose asset was removed by
another path becomes a harmless no-op.
"""

from __future__ import annotations

import dataclasses
import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from document import SvgDocument, remove_attr
from models import ASSET_FIELDS, ASSET_IDENTITY_FIELDS, SvgAsset
from svg_transform import set_absolute_scale
from utils import format_number

log = logging.getLogger(__name__)

ASSET_ID_ATTR = "data-asset-id"


class AssetStore(QObject):
    """Ordered collection of SvgAsset records keyed by id."""

    assetAdded = pyqtSignal(str)
    assetUpdated = pyqtSignal(str)
    assetRemoved = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._assets: List[SvgAsset] = []

    def assets(self) -> List[SvgAsset]:
        return list(self._assets)

    def sorted_assets(self) -> List[SvgAsset]:
        """Assets in drawing order (ascending z_index)."""
        return sorted(self._assets, key=lambda a: a.z_index)

    def get_asset(self, asset_id: str) -> Optional[SvgAsset]:
        for asset in self._assets:
            if asset.id == asset_id:
                return asset
        return None

    def add_asset(self, data: Dict[str, Any], asset_id: Optional[str] = None,
                  index: Optional[int] = None) -> str:
        """
        Add an asset and return its id.

        Args:
            data: Asset fields; ``id`` is ignored (see asset_id). A given
                ``imported_at`` is kept, otherwise the current time is used.
            asset_id: Reuse this id instead of generating one. Used when
                re-adding an asset that was removed, so references to it
                keep resolving.
            index: Position in the asset list; appended when omitted.

        Returns:
            The id of the stored asset.
        """
        fields = {k: v for k, v in data.items()
                  if k in ASSET_FIELDS and k not in ASSET_IDENTITY_FIELDS}
        new_id = asset_id or str(uuid.uuid4())
        if self.get_asset(new_id) is not None:
            log.debug("Asset %s already present; replacing", new_id)
            self._assets = [a for a in self._assets if a.id != new_id]
        imported_at = data.get("imported_at")
        asset = SvgAsset.from_dict(fields)
        asset.id = new_id
        asset.imported_at = imported_at or time.time()
        if index is None:
            self._assets.append(asset)
        else:
            self._assets.insert(max(0, min(index, len(self._assets))), asset)
        log.debug("Added asset %s (%s)", new_id, asset.name)
        self.assetAdded.emit(new_id)
        return new_id

    def update_asset(self, asset_id: str, updates: Dict[str, Any]) -> None:
        """Apply a partial update; unknown ids and fields are ignored."""
        changes = {k: v for k, v in updates.items()
                   if k in ASSET_FIELDS and k not in ASSET_IDENTITY_FIELDS}
        for i, asset in enumerate(self._assets):
            if asset.id == asset_id:
                self._assets[i] = dataclasses.replace(asset, **changes)
                log.debug("Updated asset %s: %s", asset_id, changes)
                self.assetUpdated.emit(asset_id)
                return
        log.debug("update_asset: no asset %s", asset_id)

    def remove_asset(self, asset_id: str) -> Optional[int]:
        """Remove an asset; returns its former list index, or None if unknown."""
        for i, asset in enumerate(self._assets):
            if asset.id == asset_id:
                del self._assets[i]
                log.debug("Removed asset %s", asset_id)
                self.assetRemoved.emit(asset_id)
                return i
        return None

    def reorder_assets(self, from_index: int, to_index: int) -> None:
        """Move an asset in the list and renumber z_index to match."""
        if not (0 <= from_index < len(self._assets)):
            return
        moved = self._assets.pop(from_index)
        to_index = max(0, min(to_index, len(self._assets)))
        self._assets.insert(to_index, moved)
        self._assets = [dataclasses.replace(a, z_index=i) for i, a in enumerate(self._assets)]
        for asset in self._assets:
            self.assetUpdated.emit(asset.id)

    def clear(self) -> None:
        ids = [a.id for a in self._assets]
        self._assets = []
        for asset_id in ids:
            self.assetRemoved.emit(asset_id)


def sync_asset_element(document: SvgDocument, asset: SvgAsset):
    """
    Push an asset's scale, opacity and visibility onto its canvas element.

    The element is the one carrying ``data-asset-id``; its scale is set
    absolutely since the asset record is the source of truth.

    Returns:
        The synced element, or None if the asset has no element.
    """
    element = document.find_by_attr(ASSET_ID_ATTR, asset.id)
    if element is None:
        return None
    set_absolute_scale(element, asset.scale, asset.scale)
    if asset.opacity != 1:
        element.set("opacity", format_number(asset.opacity))
    else:
        remove_attr(element, "opacity")
    if asset.visible:
        remove_attr(element, "display")
    else:
        element.set("display", "none")
    return element
