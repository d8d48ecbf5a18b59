"""Tests for snapshot capture and position restore."""

from __future__ import annotations

from conftest import FakeViewer

from pagekeeper.history.models import ZERO_RECT, Point, ReadingPosition, Rect
from pagekeeper.viewer.base import DisplayMode
from pagekeeper.viewer.snapshot import apply_defaults, capture_snapshot, restore_position


class TestCaptureSnapshot:
    def test_projects_viewer_state(self, fake_viewer: FakeViewer):
        fake_viewer.page = 4
        fake_viewer.mode = 2
        fake_viewer.auto = False
        fake_viewer.scale = 1.25
        snap = capture_snapshot(fake_viewer)
        assert snap is not None
        assert snap.display_name == "Report"
        assert snap.source_locator == "/docs/Report.pdf"
        assert snap.page_count == 12
        assert snap.page_index == 4
        assert snap.display_mode == 2
        assert snap.destination_point == Point(10.0, 20.0)
        assert snap.destination_zoom == 1.5
        assert snap.viewport_rect == Rect(0.0, 0.0, 400.0, 500.0)
        assert snap.auto_scale is False
        assert snap.scale_factor == 1.25
        assert snap.scale_to_fit_factor == 0.9

    def test_no_document(self):
        assert capture_snapshot(FakeViewer(locator=None)) is None

    def test_no_current_page(self, fake_viewer: FakeViewer):
        fake_viewer.page = None
        assert capture_snapshot(fake_viewer) is None

    def test_unresolvable_destination(self, fake_viewer: FakeViewer):
        fake_viewer.resolvable = False
        assert capture_snapshot(fake_viewer) is None

    def test_missing_bounds_become_empty_rect(self, fake_viewer: FakeViewer):
        fake_viewer.bounds = None
        snap = capture_snapshot(fake_viewer)
        assert snap is not None
        assert snap.viewport_rect == ZERO_RECT

    def test_does_not_touch_viewer(self, fake_viewer: FakeViewer):
        capture_snapshot(fake_viewer)
        assert fake_viewer.calls == []


class TestRestorePosition:
    def _position(self, **kw) -> ReadingPosition:
        values = dict(
            identity="id",
            display_name="Report",
            page_index=3,
            display_mode=1,
            destination_point=Point(5.0, 6.0),
            destination_zoom=2.0,
            auto_scale=False,
            scale_factor=2.0,
        )
        values.update(kw)
        return ReadingPosition(**values)

    def test_applies_in_order(self, fake_viewer: FakeViewer):
        assert restore_position(fake_viewer, self._position(), page_count=12)
        assert fake_viewer.calls == [
            ("auto", False),
            ("scale", 2.0),
            ("mode", 1),
            ("destination", 3, Point(5.0, 6.0), 2.0),
        ]

    def test_page_out_of_range(self, fake_viewer: FakeViewer):
        assert not restore_position(
            fake_viewer, self._position(page_index=40), page_count=12
        )
        assert fake_viewer.calls == []

    def test_apply_defaults(self, fake_viewer: FakeViewer):
        apply_defaults(fake_viewer, DisplayMode.TWO_UP)
        assert fake_viewer.calls == [("auto", True), ("mode", DisplayMode.TWO_UP)]
