"""Shared fixtures for tests."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pymupdf
import pytest

from pagekeeper.config import AppConfig
from pagekeeper.history.models import Destination, Point, Rect
from pagekeeper.history.storage import MemoryStore, SqliteStore
from pagekeeper.history.store import HistoryStore
from pagekeeper.viewer.base import ViewerCommands, ViewerState


def make_pdf(path: Path, pages: int = 10) -> Path:
    doc = pymupdf.open()
    for i in range(pages):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 72), f"Page {i + 1} of {path.stem}")
    doc.save(str(path))
    doc.close()
    return path


class FakeViewer(ViewerState, ViewerCommands):
    """In-memory viewer with directly settable state."""

    def __init__(self, locator: Optional[str] = "/docs/Report.pdf") -> None:
        self.document: Optional[object] = object() if locator else None
        self.locator = locator
        self.pages = 12
        self.page: Optional[int] = 0
        self.destination_point = Point(10.0, 20.0)
        self.zoom = 1.5
        self.resolvable = True
        self.mode = 0
        self.bounds: Optional[Rect] = Rect(0.0, 0.0, 400.0, 500.0)
        self.auto = True
        self.scale = 1.0
        self.fit = 0.9
        self.calls: list[tuple] = []

    @property
    def current_document(self):
        return self.document

    @property
    def document_source_locator(self):
        return self.locator

    @property
    def page_count(self):
        return self.pages

    @property
    def current_page_index(self):
        return self.page

    @property
    def current_destination(self):
        if not self.resolvable or self.page is None:
            return None
        return Destination(self.page, self.destination_point, self.zoom)

    @property
    def display_mode(self):
        return self.mode

    @property
    def viewport_bounds(self):
        return self.bounds

    @property
    def auto_scale(self):
        return self.auto

    @property
    def scale_factor(self):
        return self.scale

    @property
    def scale_to_fit_factor(self):
        return self.fit

    def jump_to_page_index(self, index):
        self.calls.append(("page", index))

    def jump_to_destination(self, page_index, point, zoom):
        self.calls.append(("destination", page_index, point, zoom))

    def set_display_mode(self, mode):
        self.calls.append(("mode", mode))

    def set_auto_scale(self, enabled):
        self.calls.append(("auto", enabled))

    def set_scale_factor(self, factor):
        self.calls.append(("scale", factor))


@pytest.fixture
def storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SqliteStore:
    store = SqliteStore(tmp_path / "test.db")
    yield store
    store.close()


@pytest.fixture
def history(storage: MemoryStore) -> HistoryStore:
    return HistoryStore(storage, clock=lambda: 1000.0)


@pytest.fixture
def fake_viewer() -> FakeViewer:
    return FakeViewer()


@pytest.fixture
def report_pdf(tmp_path: Path) -> Path:
    return make_pdf(tmp_path / "Report.pdf", pages=10)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )
