"""Project live viewer state into snapshots, and restore saved positions."""

from __future__ import annotations

import logging
from typing import Optional

from pagekeeper.history.models import (
    ZERO_RECT,
    ReadingPosition,
    Snapshot,
    document_name,
)

from .base import DisplayMode, ViewerCommands, ViewerState

log = logging.getLogger(__name__)


def capture_snapshot(viewer: ViewerState) -> Optional[Snapshot]:
    """Snapshot of the displayed position, or None while the viewer is settling."""
    if viewer.current_document is None:
        return None
    locator = viewer.document_source_locator
    page_index = viewer.current_page_index
    destination = viewer.current_destination
    if locator is None or page_index is None or destination is None:
        return None

    return Snapshot(
        display_name=document_name(locator),
        source_locator=locator,
        page_count=viewer.page_count,
        page_index=page_index,
        display_mode=int(viewer.display_mode),
        destination_point=destination.point,
        destination_zoom=destination.zoom,
        viewport_rect=viewer.viewport_bounds or ZERO_RECT,
        auto_scale=viewer.auto_scale,
        scale_factor=viewer.scale_factor,
        scale_to_fit_factor=viewer.scale_to_fit_factor,
    )


def restore_position(
    commands: ViewerCommands, position: ReadingPosition, page_count: int
) -> bool:
    """Apply a saved position. Scale before destination so the page lands last."""
    if not 0 <= position.page_index < page_count:
        log.debug(
            "restore %s skipped: page %d of %d",
            position.identity,
            position.page_index,
            page_count,
        )
        return False

    commands.set_auto_scale(position.auto_scale)
    commands.set_scale_factor(position.scale_factor)
    commands.set_display_mode(position.display_mode)
    commands.jump_to_destination(
        position.page_index, position.destination_point, position.destination_zoom
    )
    return True


def apply_defaults(
    commands: ViewerCommands, display_mode: int = DisplayMode.SINGLE_PAGE
) -> None:
    commands.set_auto_scale(True)
    commands.set_display_mode(display_mode)
