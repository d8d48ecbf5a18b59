"""Glue between a viewer, the history store and the settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pagekeeper.history.models import (
    ReadingPosition,
    SaveOutcome,
    document_identity,
)
from pagekeeper.history.storage import KeyValueStore, StorageError
from pagekeeper.history.store import HistoryStore
from pagekeeper.settings import RESET_KEY, Settings, consume_reset, load_settings
from pagekeeper.viewer.base import DisplayMode, ViewerEvent
from pagekeeper.viewer.pdf_viewer import PdfViewer
from pagekeeper.viewer.snapshot import apply_defaults, capture_snapshot, restore_position

log = logging.getLogger(__name__)


class ReaderSession:
    """Saves on viewer events and on a timer poll, restores on open.

    All methods are expected to run on the UI event loop.
    """

    def __init__(
        self,
        history: HistoryStore,
        storage: KeyValueStore,
        viewer: PdfViewer,
        default_display_mode: int = DisplayMode.SINGLE_PAGE,
    ) -> None:
        self.history = history
        self.viewer = viewer
        self._storage = storage
        self._default_display_mode = default_display_mode
        self._restoring = False
        viewer.listener = self.handle_event

    @property
    def current_identity(self) -> Optional[str]:
        locator = self.viewer.document_source_locator
        return document_identity(locator) if locator else None

    # ── Lifecycle ──────────────────────────────────

    def activate(self) -> Settings:
        """Apply a pending reset and return the current settings."""
        try:
            if consume_reset(self._storage):
                self.history.reset()
            return load_settings(self._storage)
        except StorageError as e:
            log.warning("settings unavailable: %s", e)
            return Settings()

    def resume(self) -> Optional[ReadingPosition]:
        """Reload history and reopen the latest document if nothing is open."""
        self.history.load()
        if self.viewer.current_document is not None:
            log.debug("resume %s", self.viewer.document_source_locator)
            return self.history.lookup_by_identity(self.current_identity or "")

        latest = self.history.lookup_latest()
        if latest is None or not latest.source_locator:
            return None
        if not Path(latest.source_locator).exists():
            log.info("latest %s is gone: %s", latest.identity, latest.source_locator)
            return None
        log.debug("reload %s", latest.display_name)
        try:
            return self.open_document(latest.source_locator)
        except (OSError, ValueError, RuntimeError) as e:
            # pymupdf.FileDataError and EmptyFileError are RuntimeErrors
            log.warning("cannot reopen %s: %s", latest.source_locator, e)
            return None

    def open_document(self, locator: str) -> Optional[ReadingPosition]:
        """Attach a document and put it back where it was last read.

        Raises whatever the viewer raises for a missing or unreadable file.
        """
        self._restoring = True
        try:
            self.viewer.open(Path(locator))
            self.history.load()
            position = self.history.lookup_by_identity(self.current_identity or "")
            if position is not None and restore_position(
                self.viewer, position, self.viewer.page_count
            ):
                return position
            apply_defaults(self.viewer, self._default_display_mode)
            return None
        finally:
            self._restoring = False

    # ── Saving ─────────────────────────────────────

    def handle_event(self, event: ViewerEvent) -> None:
        if event is ViewerEvent.DOCUMENT_CHANGED:
            log.debug("document changed: %s", self.viewer.document_source_locator)
            return
        if self._restoring:
            return
        self.save_current()

    def save_current(self) -> Optional[SaveOutcome]:
        snapshot = capture_snapshot(self.viewer)
        identity = self.current_identity
        if snapshot is None or identity is None:
            return None
        return self.history.save(identity, snapshot)

    def poll(self) -> Optional[SaveOutcome]:
        """Timer hook: save only if the viewport moved since the last save."""
        if self._restoring:
            return None
        page = self.viewer.current_page_index or 0
        rect = self.viewer.viewport_bounds
        if page == 0 or rect is None or rect.is_empty:
            return None
        if (
            self.history.latest_identity == self.current_identity
            and rect == self.history.last_viewport_rect_for_latest()
        ):
            return None
        log.debug("poll saving page %d", page)
        return self.save_current()

    # ── Settings ───────────────────────────────────

    def request_reset(self) -> None:
        self.update_setting(RESET_KEY, True)

    def update_setting(self, key: str, value: bool | str) -> None:
        try:
            if isinstance(value, bool):
                self._storage.set_bool(key, value)
            else:
                self._storage.set(key, value)
        except StorageError as e:
            log.warning("setting %s not saved: %s", key, e)
