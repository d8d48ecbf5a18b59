"""Data models for the reading-position history."""

from __future__ import annotations

import hashlib
import unicodedata
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Optional
from urllib.parse import unquote, urlparse


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


ZERO_RECT = Rect()


@dataclass(frozen=True)
class Destination:
    """A page-relative scroll point plus zoom level."""

    page_index: int
    point: Point = field(default_factory=Point)
    zoom: float = 1.0


class SaveOutcome(Enum):
    ACCEPTED = "accepted"
    SKIPPED_ZERO_INDEX = "skipped_zero_index"


def document_name(locator: str) -> str:
    """Base name of a path or file URL with the final extension stripped."""
    path = locator
    if "://" in locator:
        path = unquote(urlparse(locator).path)
    name = PurePosixPath(path.replace("\\", "/").rstrip("/")).stem
    return unicodedata.normalize("NFC", name)


def document_identity(locator: str) -> str:
    """Run-stable fingerprint of a document, keyed on its name only.

    Two documents with the same base name share an identity.
    """
    name = document_name(locator)
    return hashlib.md5(name.encode("utf-8"), usedforsecurity=False).hexdigest()


@dataclass
class Snapshot:
    """Viewer state captured at one instant."""

    display_name: str
    source_locator: Optional[str]
    page_count: int = 0
    page_index: int = 0
    display_mode: int = 0  # opaque viewer tag
    destination_point: Point = field(default_factory=Point)
    destination_zoom: float = 1.0
    viewport_rect: Rect = field(default_factory=Rect)
    auto_scale: bool = True
    scale_factor: float = 1.0
    scale_to_fit_factor: float = 1.0


@dataclass
class ReadingPosition:
    identity: str  # document_identity() of the source
    display_name: str
    source_locator: Optional[str] = None
    page_count: int = 0
    page_index: int = 0
    display_mode: int = 0
    destination_point: Point = field(default_factory=Point)
    destination_zoom: float = 1.0
    viewport_rect: Rect = field(default_factory=Rect)
    auto_scale: bool = True
    scale_factor: float = 1.0
    scale_to_fit_factor: float = 1.0

    @classmethod
    def from_snapshot(cls, identity: str, snapshot: Snapshot) -> ReadingPosition:
        return cls(
            identity=identity,
            **{f.name: getattr(snapshot, f.name) for f in fields(Snapshot)},
        )

    def update_from(self, snapshot: Snapshot) -> None:
        for f in fields(Snapshot):
            setattr(self, f.name, getattr(snapshot, f.name))

    def to_dict(self) -> dict[str, Any]:
        p, r = self.destination_point, self.viewport_rect
        return {
            "identity": self.identity,
            "display_name": self.display_name,
            "source_locator": self.source_locator,
            "page_count": self.page_count,
            "page_index": self.page_index,
            "display_mode": self.display_mode,
            "destination_point": {"x": p.x, "y": p.y},
            "destination_zoom": self.destination_zoom,
            "viewport_rect": {
                "x": r.x,
                "y": r.y,
                "width": r.width,
                "height": r.height,
            },
            "auto_scale": self.auto_scale,
            "scale_factor": self.scale_factor,
            "scale_to_fit_factor": self.scale_to_fit_factor,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReadingPosition:
        """Build from a decoded record. Raises KeyError/TypeError/ValueError."""
        point = _field(data, "destination_point", dict, {})
        rect = _field(data, "viewport_rect", dict, {})
        return cls(
            identity=_field(data, "identity", str),
            display_name=_field(data, "display_name", str),
            source_locator=_field(data, "source_locator", str, None),
            page_count=_field(data, "page_count", int, 0),
            page_index=_field(data, "page_index", int, 0),
            display_mode=_field(data, "display_mode", int, 0),
            destination_point=Point(
                _number(point, "x", 0.0), _number(point, "y", 0.0)
            ),
            destination_zoom=_number(data, "destination_zoom", 1.0),
            viewport_rect=Rect(
                _number(rect, "x", 0.0),
                _number(rect, "y", 0.0),
                _number(rect, "width", 0.0),
                _number(rect, "height", 0.0),
            ),
            auto_scale=_field(data, "auto_scale", bool, True),
            scale_factor=_number(data, "scale_factor", 1.0),
            scale_to_fit_factor=_number(data, "scale_to_fit_factor", 1.0),
        )


_REQUIRED = object()


def _field(data: dict[str, Any], key: str, kind: type, default: Any = _REQUIRED) -> Any:
    """Typed lookup. A missing key, or a null where None is the default, gives default."""
    if key not in data or (data[key] is None and default is None):
        if default is _REQUIRED:
            raise KeyError(key)
        return default
    value = data[key]
    # bool is an int subclass
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"{key}: expected {kind.__name__}, got {type(value).__name__}")
    return value


def _number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key}: expected a number, got {type(value).__name__}")
    return float(value)


@dataclass
class HistoryCollection:
    """Positions in insertion order plus the most recently saved identity."""

    positions: list[ReadingPosition] = field(default_factory=list)
    latest: str = ""

    def __len__(self) -> int:
        return len(self.positions)

    def find(self, identity: str) -> Optional[ReadingPosition]:
        for position in self.positions:
            if position.identity == identity:
                return position
        return None

    def upsert(self, identity: str, snapshot: Snapshot) -> ReadingPosition:
        existing = self.find(identity)
        if existing is not None:
            existing.update_from(snapshot)
            return existing
        position = ReadingPosition.from_snapshot(identity, snapshot)
        self.positions.append(position)
        return position

    def clear(self) -> None:
        self.positions = []
        self.latest = ""
