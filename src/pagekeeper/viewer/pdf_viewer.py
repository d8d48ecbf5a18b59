"""PDF viewer model using PyMuPDF.

Keeps the geometry a graphical viewer would have (viewport size, scale,
scroll offset) so positions captured here carry real page-local coordinates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import pymupdf

from pagekeeper.history.models import Destination, Point, Rect

from .base import DisplayMode, ViewerCommands, ViewerEvent, ViewerState

log = logging.getLogger(__name__)

MIN_SCALE = 0.1
MAX_SCALE = 10.0
ZOOM_STEP = 1.25

Listener = Callable[[ViewerEvent], None]


class PdfViewer(ViewerState, ViewerCommands):
    def __init__(
        self,
        viewport_width: float = 612.0,
        viewport_height: float = 792.0,
        listener: Optional[Listener] = None,
    ) -> None:
        self.listener = listener
        self._doc: Optional[pymupdf.Document] = None
        self._locator: Optional[str] = None
        self._page_idx = 0
        self._offset = Point()
        self._viewport = (max(1.0, viewport_width), max(1.0, viewport_height))
        self._mode = DisplayMode.SINGLE_PAGE
        self._auto_scale = True
        self._scale = 1.0

    def _emit(self, event: ViewerEvent) -> None:
        if self.listener is not None:
            self.listener(event)

    # ── Document ───────────────────────────────────

    def open(self, file_path: Path) -> None:
        file_path = Path(file_path).expanduser().resolve()
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        doc = pymupdf.open(str(file_path))
        if len(doc) == 0:
            doc.close()
            raise ValueError(f"No pages in {file_path.name}")

        self._release()
        self._doc = doc
        self._locator = str(file_path)
        self._page_idx = 0
        self._offset = Point()
        log.debug("open %s (%d pages)", file_path, len(doc))
        self._emit(ViewerEvent.DOCUMENT_CHANGED)
        self._emit(ViewerEvent.PAGE_CHANGED)

    def close(self) -> None:
        if self._doc is None:
            return
        self._release()
        self._emit(ViewerEvent.DOCUMENT_CHANGED)

    def _release(self) -> None:
        if self._doc is not None:
            self._doc.close()
        self._doc = None
        self._locator = None
        self._page_idx = 0
        self._offset = Point()

    def page_text(self, index: int) -> str:
        if self._doc is None or not 0 <= index < len(self._doc):
            return ""
        return self._doc[index].get_text("text")

    def page_size(self, index: Optional[int] = None) -> tuple[float, float]:
        if self._doc is None:
            return self._viewport
        idx = self._page_idx if index is None else index
        rect = self._doc[max(0, min(idx, len(self._doc) - 1))].rect
        return rect.width, rect.height

    # ── ViewerState ────────────────────────────────

    @property
    def current_document(self) -> Optional[pymupdf.Document]:
        return self._doc

    @property
    def document_source_locator(self) -> Optional[str]:
        return self._locator

    @property
    def page_count(self) -> int:
        return len(self._doc) if self._doc is not None else 0

    @property
    def current_page_index(self) -> Optional[int]:
        return self._page_idx if self._doc is not None else None

    @property
    def current_destination(self) -> Optional[Destination]:
        if self._doc is None:
            return None
        return Destination(self._page_idx, self._offset, self.scale_factor)

    @property
    def display_mode(self) -> int:
        return int(self._mode)

    @property
    def viewport_bounds(self) -> Optional[Rect]:
        if self._doc is None:
            return None
        width, height = self._visible_size()
        return Rect(self._offset.x, self._offset.y, width, height)

    @property
    def auto_scale(self) -> bool:
        return self._auto_scale

    @property
    def scale_factor(self) -> float:
        return self.scale_to_fit_factor if self._auto_scale else self._scale

    @property
    def scale_to_fit_factor(self) -> float:
        page_w, page_h = self.page_size()
        if self._mode.is_two_up:
            page_w *= 2
        vw, vh = self._viewport
        return _clamp_scale(min(vw / page_w, vh / page_h))

    def _visible_size(self) -> tuple[float, float]:
        vw, vh = self._viewport
        scale = self.scale_factor
        return vw / scale, vh / scale

    # ── ViewerCommands ─────────────────────────────

    def jump_to_page_index(self, index: int) -> None:
        self._go(index, Point())

    def jump_to_destination(self, page_index: int, point: Point, zoom: float) -> None:
        if self._doc is None:
            return
        if not self._auto_scale and zoom > 0:
            self._scale = _clamp_scale(zoom)
        self._go(page_index, point)

    def _go(self, index: int, offset: Point) -> None:
        if self._doc is None:
            return
        index = max(0, min(index, len(self._doc) - 1))
        changed = index != self._page_idx
        self._page_idx = index
        self._offset = offset
        self._clamp_offset()
        if changed:
            self._emit(ViewerEvent.PAGE_CHANGED)

    def set_display_mode(self, mode: int) -> None:
        self._with_scale_event(lambda: setattr(self, "_mode", DisplayMode.coerce(mode)))

    def set_auto_scale(self, enabled: bool) -> None:
        self._with_scale_event(lambda: setattr(self, "_auto_scale", bool(enabled)))

    def set_scale_factor(self, factor: float) -> None:
        self._with_scale_event(lambda: setattr(self, "_scale", _clamp_scale(factor)))

    def _with_scale_event(self, change: Callable[[], None]) -> None:
        before = self.scale_factor
        change()
        self._clamp_offset()
        if self._doc is not None and self.scale_factor != before:
            self._emit(ViewerEvent.SCALE_CHANGED)

    # ── Navigation ─────────────────────────────────

    @property
    def page_step(self) -> int:
        return 2 if self._mode.is_two_up else 1

    def next_page(self) -> bool:
        if self._doc is None or self._page_idx + self.page_step >= len(self._doc):
            return False
        self.jump_to_page_index(self._page_idx + self.page_step)
        return True

    def prev_page(self) -> bool:
        if self._doc is None or self._page_idx == 0:
            return False
        self.jump_to_page_index(max(0, self._page_idx - self.page_step))
        return True

    def zoom_in(self) -> None:
        self._zoom_to(self.scale_factor * ZOOM_STEP)

    def zoom_out(self) -> None:
        self._zoom_to(self.scale_factor / ZOOM_STEP)

    def _zoom_to(self, factor: float) -> None:
        def change() -> None:
            self._auto_scale = False
            self._scale = _clamp_scale(factor)

        self._with_scale_event(change)

    def cycle_display_mode(self) -> DisplayMode:
        modes = list(DisplayMode)
        self.set_display_mode(modes[(modes.index(self._mode) + 1) % len(modes)])
        return self._mode

    def scroll(self, dx: float, dy: float) -> None:
        """Scroll by page-local points. Continuous modes flow onto adjacent pages."""
        if self._doc is None:
            return
        _, page_h = self.page_size()
        _, visible_h = self._visible_size()
        x, y = self._offset.x + dx, self._offset.y + dy
        continuous = self._mode in (
            DisplayMode.SINGLE_PAGE_CONTINUOUS,
            DisplayMode.TWO_UP_CONTINUOUS,
        )
        if continuous and y > page_h - visible_h and self.next_page():
            self._offset = Point(x, 0.0)
        elif continuous and y < 0 and self.prev_page():
            prev_h = self.page_size()[1]
            self._offset = Point(x, max(0.0, prev_h - visible_h))
        else:
            self._offset = Point(x, y)
        self._clamp_offset()

    def resize(self, width: float, height: float) -> None:
        def change() -> None:
            self._viewport = (max(1.0, width), max(1.0, height))

        self._with_scale_event(change)

    def _clamp_offset(self) -> None:
        if self._doc is None:
            return
        page_w, page_h = self.page_size()
        visible_w, visible_h = self._visible_size()
        x = max(0.0, min(self._offset.x, page_w - visible_w))
        y = max(0.0, min(self._offset.y, page_h - visible_h))
        self._offset = Point(x, y)


def _clamp_scale(value: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, value))
