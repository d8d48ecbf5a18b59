"""Tests for the PyMuPDF-backed viewer model."""

from __future__ import annotations

from pathlib import Path

import pytest

from pagekeeper.history.models import Point, Rect
from pagekeeper.viewer.base import DisplayMode, ViewerEvent
from pagekeeper.viewer.pdf_viewer import MAX_SCALE, PdfViewer
from pagekeeper.viewer.snapshot import capture_snapshot


@pytest.fixture
def events() -> list[ViewerEvent]:
    return []


@pytest.fixture
def viewer(report_pdf: Path, events: list[ViewerEvent]) -> PdfViewer:
    v = PdfViewer(612, 792, listener=events.append)
    v.open(report_pdf)
    events.clear()
    yield v
    v.close()


class TestOpen:
    def test_open_fires_events(self, report_pdf: Path):
        events: list[ViewerEvent] = []
        v = PdfViewer(listener=events.append)
        v.open(report_pdf)
        assert events == [ViewerEvent.DOCUMENT_CHANGED, ViewerEvent.PAGE_CHANGED]
        assert v.page_count == 10
        assert v.current_page_index == 0
        assert v.document_source_locator == str(report_pdf.resolve())
        v.close()

    def test_open_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            PdfViewer().open(tmp_path / "nope.pdf")

    def test_nothing_attached(self):
        v = PdfViewer()
        assert v.current_document is None
        assert v.current_page_index is None
        assert v.current_destination is None
        assert v.viewport_bounds is None
        assert capture_snapshot(v) is None

    def test_close(self, viewer: PdfViewer, events: list[ViewerEvent]):
        viewer.close()
        assert viewer.current_document is None
        assert events == [ViewerEvent.DOCUMENT_CHANGED]

    def test_page_text(self, viewer: PdfViewer):
        assert "Page 1 of Report" in viewer.page_text(0)
        assert viewer.page_text(99) == ""


class TestGeometry:
    def test_fit_scale_single_page(self, viewer: PdfViewer):
        assert viewer.scale_to_fit_factor == pytest.approx(1.0)
        assert viewer.viewport_bounds == Rect(0.0, 0.0, 612.0, 792.0)

    def test_fit_scale_two_up(self, viewer: PdfViewer, events: list[ViewerEvent]):
        viewer.set_display_mode(DisplayMode.TWO_UP)
        assert viewer.scale_to_fit_factor == pytest.approx(0.5)
        assert events == [ViewerEvent.SCALE_CHANGED]

    def test_unknown_mode_falls_back(self, viewer: PdfViewer):
        viewer.set_display_mode(42)
        assert viewer.display_mode == DisplayMode.SINGLE_PAGE

    def test_zoom_disables_auto_scale(self, viewer: PdfViewer, events):
        viewer.zoom_in()
        assert viewer.auto_scale is False
        assert viewer.scale_factor == pytest.approx(1.25)
        assert events == [ViewerEvent.SCALE_CHANGED]

    def test_scale_clamped(self, viewer: PdfViewer):
        viewer.set_auto_scale(False)
        viewer.set_scale_factor(1000)
        assert viewer.scale_factor == MAX_SCALE

    def test_resize_changes_fit(self, viewer: PdfViewer):
        viewer.resize(306, 396)
        assert viewer.scale_factor == pytest.approx(0.5)


class TestNavigation:
    def test_next_and_prev(self, viewer: PdfViewer, events: list[ViewerEvent]):
        assert viewer.next_page()
        assert viewer.current_page_index == 1
        assert viewer.prev_page()
        assert viewer.current_page_index == 0
        assert events == [ViewerEvent.PAGE_CHANGED, ViewerEvent.PAGE_CHANGED]

    def test_prev_at_start(self, viewer: PdfViewer):
        assert not viewer.prev_page()

    def test_next_at_end(self, viewer: PdfViewer):
        viewer.jump_to_page_index(9)
        assert not viewer.next_page()

    def test_two_up_steps_by_two(self, viewer: PdfViewer):
        viewer.set_display_mode(DisplayMode.TWO_UP)
        viewer.next_page()
        assert viewer.current_page_index == 2

    def test_jump_clamps(self, viewer: PdfViewer):
        viewer.jump_to_page_index(500)
        assert viewer.current_page_index == 9

    def test_same_page_jump_is_silent(self, viewer: PdfViewer, events):
        viewer.jump_to_page_index(0)
        assert events == []

    def test_scroll_clamped_to_page(self, viewer: PdfViewer):
        viewer.set_auto_scale(False)
        viewer.set_scale_factor(2.0)
        viewer.scroll(0, 100)
        assert viewer.viewport_bounds == Rect(0.0, 100.0, 306.0, 396.0)
        viewer.scroll(0, 10_000)
        assert viewer.viewport_bounds.y == pytest.approx(396.0)
        assert viewer.current_page_index == 0

    def test_continuous_scroll_flows_to_next_page(self, viewer: PdfViewer):
        viewer.set_display_mode(DisplayMode.SINGLE_PAGE_CONTINUOUS)
        viewer.set_auto_scale(False)
        viewer.set_scale_factor(2.0)
        viewer.scroll(0, 500)
        assert viewer.current_page_index == 1
        assert viewer.viewport_bounds.y == 0.0

    def test_jump_to_destination(self, viewer: PdfViewer, events):
        viewer.set_auto_scale(False)
        viewer.set_scale_factor(2.0)
        events.clear()
        viewer.jump_to_destination(4, Point(10.0, 50.0), 2.0)
        assert viewer.current_page_index == 4
        assert viewer.current_destination.point == Point(10.0, 50.0)
        assert events == [ViewerEvent.PAGE_CHANGED]

    def test_snapshot_from_viewer(self, viewer: PdfViewer, report_pdf: Path):
        viewer.jump_to_page_index(3)
        snap = capture_snapshot(viewer)
        assert snap.display_name == "Report"
        assert snap.page_index == 3
        assert snap.page_count == 10
        assert snap.auto_scale is True
        assert snap.source_locator == str(report_pdf.resolve())
