"""Tests for per-kind geometry dispatch in shapes.py."""
from __future__ import annotations

import pytest
from lxml import etree

from shapes import (
    ShapeKind,
    apply_geometry,
    apply_position_offset,
    capture_geometry,
    element_bounds,
    element_position,
    handler_for,
    resized_state,
)


def _el(tag, **attrs):
    return etree.Element("{http://www.w3.org/2000/svg}" + tag, {k: str(v) for k, v in attrs.items()})


# ─────────────────────────────────────────────────────────
# Kind resolution
# ─────────────────────────────────────────────────────────


class TestShapeKind:
    @pytest.mark.parametrize("tag,kind", [
        ("rect", ShapeKind.RECT),
        ("image", ShapeKind.RECT),
        ("use", ShapeKind.RECT),
        ("circle", ShapeKind.CIRCLE),
        ("ellipse", ShapeKind.ELLIPSE),
        ("line", ShapeKind.LINE),
        ("text", ShapeKind.TEXT),
        ("g", ShapeKind.GENERIC),
        ("path", ShapeKind.GENERIC),
        ("polygon", ShapeKind.GENERIC),
        ("foo", ShapeKind.GENERIC),
    ])
    def test_tag_mapping(self, tag, kind):
        assert ShapeKind.of(_el(tag)) is kind

    def test_unnamespaced_tag(self):
        assert ShapeKind.of(etree.Element("circle")) is ShapeKind.CIRCLE


# ─────────────────────────────────────────────────────────
# Resize rules
# ─────────────────────────────────────────────────────────


class TestResized:
    def _resize(self, el, old, new):
        state = capture_geometry(el)
        return handler_for(el).resized(el, state, old[0], old[1], new[0], new[1])

    def test_rect_sets_width_height(self):
        el = _el("rect", x=0, y=0, width=100, height=50)
        assert self._resize(el, (100, 50), (120, 60)) == {"width": "120", "height": "60"}

    def test_circle_uses_smaller_side(self):
        el = _el("circle", cx=0, cy=0, r=10)
        assert self._resize(el, (20, 20), (40, 30)) == {"r": "15"}

    def test_ellipse_halves(self):
        el = _el("ellipse", rx=10, ry=5)
        assert self._resize(el, (20, 10), (50, 30)) == {"rx": "25", "ry": "15"}

    def test_line_scales_about_first_point(self):
        el = _el("line", x1=10, y1=10, x2=30, y2=20)
        result = self._resize(el, (20, 10), (40, 30))
        assert result == {"x1": "10", "y1": "10", "x2": "50", "y2": "40"}

    def test_generic_composes_scale(self):
        el = _el("g", transform="translate(5, 5) scale(2)")
        result = self._resize(el, (100, 100), (150, 50))
        assert result == {"transform": "translate(5, 5) scale(3, 1)"}

    def test_zero_old_dimension_ratio_is_one(self):
        el = _el("path")
        assert self._resize(el, (0, 0), (50, 50)) == {"transform": None}

    def test_text_resizes_through_transform(self):
        el = _el("text", x=1, y=2)
        assert self._resize(el, (10, 10), (20, 20)) == {"transform": "scale(2, 2)"}

    def test_resized_state_divides_out_own_scale(self):
        el = _el("rect", width=100, height=50, transform="scale(2)")
        state = resized_state(el, capture_geometry(el), 200, 100, 220, 100)
        assert state["width"] == "110"
        assert state["height"] == "50"
        assert state["transform"] == "scale(2)"

    def test_resized_state_circle_with_own_scale(self):
        el = _el("circle", r=10, transform="scale(3)")
        state = resized_state(el, capture_geometry(el), 60, 60, 90, 90)
        assert state["r"] == "15"

    def test_resized_state_generic_ratio_unchanged(self):
        el = _el("g", transform="scale(2)")
        state = resized_state(el, capture_geometry(el), 100, 100, 150, 50)
        assert state["transform"] == "scale(3, 1)"


# ─────────────────────────────────────────────────────────
# Snapshots, offsets and bounds
# ─────────────────────────────────────────────────────────


class TestGeometrySnapshot:
    def test_capture_includes_transform_and_absent_keys(self):
        el = _el("rect", x=1, width=5, height=6)
        state = capture_geometry(el)
        assert state == {"x": "1", "y": None, "width": "5", "height": "6", "transform": None}

    def test_apply_removes_absent_attributes(self):
        el = _el("rect", x=1, width=5, height=6)
        state = capture_geometry(el)
        el.set("y", "9")
        el.set("transform", "scale(2)")
        apply_geometry(el, state)
        assert "y" not in el.attrib
        assert "transform" not in el.attrib
        assert el.get("x") == "1"


class TestOffsets:
    def test_rect_shifts_xy(self):
        el = _el("rect", x=10, y=20)
        apply_position_offset(el, 5, 5)
        assert (el.get("x"), el.get("y")) == ("15", "25")

    def test_circle_shifts_centre(self):
        el = _el("circle", cx=1, cy=2, r=3)
        apply_position_offset(el, 10, 10)
        assert (el.get("cx"), el.get("cy")) == ("11", "12")

    def test_line_shifts_both_endpoints(self):
        el = _el("line", x1=0, y1=0, x2=4, y2=4)
        apply_position_offset(el, 1, 2)
        assert [el.get(k) for k in ("x1", "y1", "x2", "y2")] == ["1", "2", "5", "6"]

    def test_generic_composes_translation(self):
        el = _el("g", transform="translate(3, 3)")
        apply_position_offset(el, 10, 10)
        assert el.get("transform") == "translate(13, 13)"

    def test_position(self):
        assert element_position(_el("ellipse", cx=7, cy=8)).x() == 7


class TestBounds:
    def test_rect(self):
        r = element_bounds(_el("rect", x=10, y=20, width=30, height=40))
        assert (r.x(), r.y(), r.width(), r.height()) == (10, 20, 30, 40)

    def test_circle(self):
        r = element_bounds(_el("circle", cx=50, cy=50, r=10))
        assert (r.x(), r.y(), r.width(), r.height()) == (40, 40, 20, 20)

    def test_transform_applied(self):
        r = element_bounds(_el("rect", x=0, y=0, width=10, height=10,
                               transform="translate(5, 5) scale(2)"))
        assert (r.x(), r.y(), r.width(), r.height()) == (5, 5, 20, 20)

    def test_polygon_points(self):
        r = element_bounds(_el("polygon", points="0,0 10,0 10,20"))
        assert (r.width(), r.height()) == (10, 20)

    def test_group_unions_children(self):
        g = _el("g", transform="translate(100, 0)")
        g.append(_el("rect", x=0, y=0, width=10, height=10))
        g.append(_el("rect", x=20, y=20, width=10, height=10))
        r = element_bounds(g)
        assert (r.x(), r.y(), r.width(), r.height()) == (100, 0, 30, 30)

    def test_path_unknown(self):
        assert element_bounds(_el("path", d="M0 0")) is None
