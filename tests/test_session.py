"""End-to-end tests of EditorSession actions through the shared history."""
from __future__ import annotations

import pytest

from conftest import SAMPLE_SVG
from document import DocumentError, text_content
from models import ResizeHandle, ZOrderAction
from session import EditorSession
from settings import AppSettings
from shapes import element_bounds


@pytest.fixture()
def session():
    s = EditorSession(settings=AppSettings())
    s.load_svg(SAMPLE_SVG)
    return s


def _ids(session):
    return [c.get("id") for c in session.document.children()]


class TestDocument:
    def test_load_clears_history(self, session):
        session.set_selection([session.document.find_by_id("r1")])
        session.delete_selected()
        assert session.history.can_undo()
        session.load_svg(SAMPLE_SVG)
        assert not session.history.can_undo()
        assert session.selection == []

    def test_load_invalid_markup(self, session):
        with pytest.raises(DocumentError):
            session.load_svg("<svg><rect></svg>")

    def test_clear_document(self, session):
        session.clear_document()
        assert session.document.children() == []
        assert not session.history.can_undo()

    def test_all_ids_covers_nested_elements(self, session):
        ids = session.document.all_ids()
        assert {"grad", "r1", "c1", "e1", "l1", "t1", "g1"} <= ids
        session.set_selection([session.document.find_by_id("r1")])
        session.copy_selected()
        session.paste(target_parent=session.document.find_by_id("g1"))
        assert session.selection[0].get("id") not in ids
        assert session.selection[0].get("id") in session.document.all_ids()


class TestActions:
    def test_delete_and_undo_restores_selection_target(self, session):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        session.delete_selected()
        assert session.selection == []
        session.undo()
        assert session.document.find_by_id("r1") is rect

    def test_delete_with_empty_selection(self, session):
        assert session.delete_selected() is None
        assert not session.history.can_undo()

    def test_nudge_steps(self, session):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        session.nudge(1, 0)
        session.nudge(0, 1, large=True)
        assert rect.get("transform") == "translate(1, 10)"
        session.undo()
        session.undo()
        assert "transform" not in rect.attrib

    def test_z_order(self, session):
        session.set_selection([session.document.find_by_id("r1")])
        session.z_order(ZOrderAction.TO_FRONT)
        assert _ids(session)[-1] == "r1"
        session.undo()
        assert _ids(session)[1] == "r1"

    def test_edit_text_unchanged_records_nothing(self, session):
        text = session.document.find_by_id("t1")
        assert session.edit_text(text, "Hello world") is None
        session.edit_text(text, "Changed")
        assert text_content(text) == "Changed"
        session.undo()
        assert text_content(text) == "Hello world"

    def test_paste_sequence(self, session):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        session.copy_selected()
        xs = []
        for _ in range(3):
            session.paste()
            assert len(session.selection) == 1
            xs.append(float(session.selection[0].get("x")))
        assert xs == [20, 25, 30]
        ids = [el.get("id") for el in session.document.root.iter()
               if isinstance(el.tag, str) and el.get("id")]
        assert len(ids) == len(set(ids))

    def test_paste_two_elements_three_times(self, session):
        originals = session.document.all_ids()
        session.set_selection([session.document.find_by_id("r1"),
                               session.document.find_by_id("c1")])
        assert session.copy_selected() == 2
        new_ids, rect_xs, circle_xs = [], [], []
        for _ in range(3):
            session.paste()
            rect_copy, circle_copy = session.selection
            new_ids += [rect_copy.get("id"), circle_copy.get("id")]
            rect_xs.append(float(rect_copy.get("x")))
            circle_xs.append(float(circle_copy.get("cx")))
        assert len(set(new_ids)) == 6
        assert not set(new_ids) & originals
        assert all(a < b for a, b in zip(rect_xs, rect_xs[1:]))
        assert all(a < b for a, b in zip(circle_xs, circle_xs[1:]))

    def test_paste_empty_clipboard(self, session):
        assert session.paste() is None

    def test_undo_prunes_detached_selection(self, session):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        session.copy_selected()
        session.paste()
        assert session.selection
        session.undo()
        assert session.selection == []


class TestAssets:
    def test_import_transform_remove(self, session):
        asset_id = session.import_asset({"name": "logo", "content": "<svg/>"})
        session.transform_asset(asset_id, scale=2.0)
        assert session.assets.get_asset(asset_id).scale == 2.0
        session.remove_asset(asset_id)
        assert session.assets.get_asset(asset_id) is None
        session.undo()
        session.undo()
        assert session.assets.get_asset(asset_id).scale == 1.0
        session.undo()
        assert session.assets.get_asset(asset_id) is None

    def test_transform_syncs_element_on_undo(self, session):
        asset_id = session.import_asset({"name": "logo"})
        el = session.document.new_element("g", session.document.root)
        el.set("data-asset-id", asset_id)
        session.transform_asset(asset_id, opacity=0.5)
        assert el.get("opacity") == "0.5"
        session.undo()
        assert el.get("opacity") is None


class TestGesturesAndShortcuts:
    def test_drag_through_session(self, session):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        drag = session.begin_drag()
        drag.update(10, 0)
        drag.finish()
        assert session.history.undo_description() == "Move rect"

    def test_begin_resize_derives_bounds(self, session):
        session.set_selection([session.document.find_by_id("r1")])
        gesture = session.begin_resize(scale=2)
        assert gesture.start_bounds.width() == 200

    def test_resize_scaled_rect_follows_handle(self):
        s = EditorSession(settings=AppSettings())
        s.load_svg('<svg xmlns="http://www.w3.org/2000/svg">'
                   '<rect id="s" width="100" height="50" transform="scale(2)"/></svg>')
        rect = s.document.find_by_id("s")
        s.set_selection([rect])
        gesture = s.begin_resize()
        assert gesture.start_bounds.width() == 200
        gesture.update(ResizeHandle.RIGHT, 20, 0)
        assert gesture.finish() is not None
        assert (rect.get("width"), rect.get("height")) == ("110", "50")
        box = element_bounds(rect)
        assert (box.width(), box.height()) == (220, 100)
        s.undo()
        assert rect.get("width") == "100"
        s.redo()
        assert rect.get("width") == "110"

    def test_begin_without_selection(self, session):
        assert session.begin_drag() is None
        assert session.begin_resize() is None

    @pytest.mark.parametrize("undo_key,redo_key", [
        ("Ctrl+Z", "Ctrl+Y"),
        ("Meta+Z", "Meta+Shift+Z"),
        ("ctrl+z", "Ctrl+Shift+Z"),
    ])
    def test_undo_redo_shortcuts(self, session, undo_key, redo_key):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        assert session.handle_shortcut("Right")
        assert rect.get("transform") == "translate(1, 0)"
        assert session.handle_shortcut(undo_key)
        assert "transform" not in rect.attrib
        assert session.handle_shortcut(redo_key)
        assert rect.get("transform") == "translate(1, 0)"

    def test_shift_arrow_is_large_step(self, session):
        rect = session.document.find_by_id("r1")
        session.set_selection([rect])
        session.handle_shortcut("Shift+ArrowUp")
        assert rect.get("transform") == "translate(0, -10)"

    def test_delete_and_escape(self, session):
        session.set_selection([session.document.find_by_id("c1")])
        assert session.handle_shortcut("Delete")
        assert session.document.find_by_id("c1") is None
        session.set_selection([session.document.find_by_id("r1")])
        assert session.handle_shortcut("Escape")
        assert session.selection == []

    def test_unknown_shortcut(self, session):
        assert not session.handle_shortcut("Ctrl+Q")
