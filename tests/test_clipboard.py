"""Tests for clipboard snapshots, id regeneration and paste offsets."""
from __future__ import annotations

import pytest
from lxml import etree

from clipboard import (
    Clipboard,
    calculate_paste_offset,
    deserialize_element,
    generate_unique_id,
    serialize_element,
    update_element_ids,
)
from models import SerializedElement
from settings import ClipboardSettings


class TestSerialization:
    def test_snapshot_is_independent_of_original(self, rect):
        snap = serialize_element(rect)
        rect.set("width", "999")
        restored = deserialize_element(snap)
        assert restored.get("width") == "100"
        assert snap.tag == "rect"
        assert snap.id == "r1"

    def test_tail_not_included(self, rect):
        assert not serialize_element(rect).markup.endswith("\n  ")

    def test_bad_markup(self):
        with pytest.raises(ValueError):
            deserialize_element(SerializedElement(markup="<rect", tag="rect"))


class TestIds:
    def test_generate_unique_id_prefix(self):
        assert generate_unique_id("pasted").startswith("pasted-")

    def test_update_ids_rewrites_internal_references(self):
        group = etree.fromstring(
            '<g id="a">'
            '<linearGradient id="grad"/>'
            '<rect id="b" fill="url(#grad)" style="stroke: url(#grad)"/>'
            '<use href="#b"/>'
            '<circle fill="url(#outside)"/>'
            '</g>'
        )
        id_map = update_element_ids(group, prefix="copy")
        assert set(id_map) == {"a", "grad", "b"}
        rect = group[1]
        new_grad = id_map["grad"]
        assert rect.get("fill") == f"url(#{new_grad})"
        assert rect.get("style") == f"stroke: url(#{new_grad})"
        assert group[2].get("href") == f"#{id_map['b']}"
        assert group[3].get("fill") == "url(#outside)"

    def test_avoids_taken_ids(self):
        el = etree.fromstring('<rect id="x"/>')
        id_map = update_element_ids(el, taken={"x"}, prefix="p")
        assert id_map["x"] != "x"
        assert el.get("id") == id_map["x"]


class TestPasteOffset:
    def test_defaults(self):
        assert calculate_paste_offset(0) == (10, 10)
        assert calculate_paste_offset(2) == (20, 20)

    def test_custom_settings(self):
        s = ClipboardSettings(paste_offset_base=4, paste_offset_step=1)
        assert calculate_paste_offset(3, s) == (7, 7)


class TestClipboard:
    def test_copy_resets_counter(self, rect):
        clip = Clipboard()
        assert not clip.has_content()
        clip.copy([rect])
        assert clip.next_paste_index() == 0
        assert clip.next_paste_index() == 1
        clip.copy([rect])
        assert clip.next_paste_index() == 0

    def test_clear(self, rect):
        clip = Clipboard()
        clip.copy([rect])
        clip.clear()
        assert clip.payload == []
