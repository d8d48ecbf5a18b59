"""Interfaces between the history core and a document viewer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import Any, Optional

from pagekeeper.history.models import Destination, Point, Rect


class DisplayMode(IntEnum):
    SINGLE_PAGE = 0
    SINGLE_PAGE_CONTINUOUS = 1
    TWO_UP = 2
    TWO_UP_CONTINUOUS = 3

    @property
    def is_two_up(self) -> bool:
        return self in (DisplayMode.TWO_UP, DisplayMode.TWO_UP_CONTINUOUS)

    @classmethod
    def coerce(cls, value: int) -> DisplayMode:
        try:
            return cls(value)
        except ValueError:
            return cls.SINGLE_PAGE


class ViewerEvent(Enum):
    DOCUMENT_CHANGED = "document_changed"
    PAGE_CHANGED = "page_changed"
    SCALE_CHANGED = "scale_changed"


class ViewerState(ABC):
    """Read-only view of what the viewer currently shows."""

    @property
    @abstractmethod
    def current_document(self) -> Optional[Any]:
        """Opaque document handle, or None when nothing is attached."""

    @property
    @abstractmethod
    def document_source_locator(self) -> Optional[str]:
        """Path or URL the current document was opened from."""

    @property
    @abstractmethod
    def page_count(self) -> int: ...

    @property
    @abstractmethod
    def current_page_index(self) -> Optional[int]: ...

    @property
    @abstractmethod
    def current_destination(self) -> Optional[Destination]: ...

    @property
    @abstractmethod
    def display_mode(self) -> int: ...

    @property
    @abstractmethod
    def viewport_bounds(self) -> Optional[Rect]:
        """Visible area in the current page's coordinates."""

    @property
    @abstractmethod
    def auto_scale(self) -> bool: ...

    @property
    @abstractmethod
    def scale_factor(self) -> float: ...

    @property
    @abstractmethod
    def scale_to_fit_factor(self) -> float: ...


class ViewerCommands(ABC):
    """Commands used to put a viewer back at a saved position."""

    @abstractmethod
    def jump_to_page_index(self, index: int) -> None: ...

    @abstractmethod
    def jump_to_destination(self, page_index: int, point: Point, zoom: float) -> None: ...

    @abstractmethod
    def set_display_mode(self, mode: int) -> None: ...

    @abstractmethod
    def set_auto_scale(self, enabled: bool) -> None: ...

    @abstractmethod
    def set_scale_factor(self, factor: float) -> None: ...
