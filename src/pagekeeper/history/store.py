"""Reading-position history persisted in a key-value store.

The whole collection is re-serialized on every accepted save. Callers run on
a single event loop, so there is no locking here; code that saves from
several threads must serialize calls per identity itself.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Callable, Optional

from .models import (
    ZERO_RECT,
    HistoryCollection,
    ReadingPosition,
    Rect,
    SaveOutcome,
    Snapshot,
)
from .storage import KeyValueStore, StorageError

log = logging.getLogger(__name__)

HISTORY_KEY = "history"
LATEST_KEY = "latest"


class HistoryDecodeError(ValueError):
    """The stored history record is not a valid list of positions."""


def encode_positions(positions: list[ReadingPosition]) -> str:
    return json.dumps([p.to_dict() for p in positions], ensure_ascii=False)


def decode_positions(raw: str) -> list[ReadingPosition]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HistoryDecodeError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise HistoryDecodeError(f"expected a list, got {type(data).__name__}")

    positions: list[ReadingPosition] = []
    seen: set[str] = set()
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise HistoryDecodeError(f"entry {i} is not an object")
        try:
            position = ReadingPosition.from_dict(item)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise HistoryDecodeError(f"entry {i}: {e!r}") from e
        if position.identity in seen:
            raise HistoryDecodeError(f"duplicate identity {position.identity}")
        seen.add(position.identity)
        positions.append(position)
    return positions


class HistoryStore:
    def __init__(
        self, storage: KeyValueStore, clock: Callable[[], float] = time.time
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._collection = HistoryCollection()
        self.last_saved_at: Optional[float] = None

    @property
    def collection(self) -> HistoryCollection:
        return self._collection

    @property
    def latest_identity(self) -> str:
        return self._collection.latest

    def load(self) -> HistoryCollection:
        """Replace the in-memory collection with the stored one.

        Missing or malformed records yield an empty collection.
        """
        collection = HistoryCollection()
        try:
            collection.latest = self._storage.get(LATEST_KEY) or ""
            raw = self._storage.get(HISTORY_KEY)
        except StorageError as e:
            log.warning("history unreadable, starting empty: %s", e)
            raw = None
        if raw:
            try:
                collection.positions = decode_positions(raw)
            except HistoryDecodeError as e:
                log.warning("history record discarded: %s", e)
        self._collection = collection
        log.debug(
            "load %d positions, latest %s", len(collection), collection.latest or "-"
        )
        return collection

    def save(self, identity: str, snapshot: Snapshot) -> SaveOutcome:
        if snapshot.page_index == 0:
            log.debug("save %s ignored at page 0", identity)
            return SaveOutcome.SKIPPED_ZERO_INDEX

        self._collection.upsert(identity, snapshot)
        self._collection.latest = identity
        self.last_saved_at = self._clock()
        self._persist()
        log.info("save %s page %d", identity, snapshot.page_index)
        return SaveOutcome.ACCEPTED

    def _persist(self) -> None:
        try:
            self._storage.set(HISTORY_KEY, encode_positions(self._collection.positions))
            self._storage.set(LATEST_KEY, self._collection.latest)
        except StorageError as e:
            log.warning("history write failed: %s", e)

    def lookup_by_identity(self, identity: str) -> Optional[ReadingPosition]:
        return self._collection.find(identity)

    def lookup_latest(self) -> Optional[ReadingPosition]:
        if not self._collection.latest:
            return None
        return self._collection.find(self._collection.latest)

    def last_viewport_rect_for_latest(self) -> Rect:
        position = self.lookup_latest()
        return position.viewport_rect if position else ZERO_RECT

    def reset(self) -> None:
        self._collection.clear()
        self.last_saved_at = None
        try:
            self._storage.remove(HISTORY_KEY)
            self._storage.remove(LATEST_KEY)
        except StorageError as e:
            log.warning("history reset incomplete: %s", e)
        log.info("history reset")
