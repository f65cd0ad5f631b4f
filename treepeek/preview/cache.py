"""Rendered-output cache keyed by ``(path, mode)``.

The preview panel redraws every frame; the cache guarantees the highlighter
and markdown renderer run once per live key. The default capacity of one
keeps only the active file/mode: computing a new key evicts the previous one.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .styles import StyledLine

logger = logging.getLogger(__name__)


class RenderMode(Enum):
    RAW = "raw"
    RENDERED = "rendered"


@dataclass(frozen=True)
class CacheEntry:
    path: Path
    mode: RenderMode
    lines: tuple[StyledLine, ...]
    truncated: bool


class StyledLineCache:
    """Bounded LRU map of rendered previews (capacity 1 by default)."""

    def __init__(self, capacity: int = 1) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._entries: OrderedDict[tuple[Path, RenderMode], CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: Path, mode: RenderMode) -> CacheEntry | None:
        """Return the live entry for ``(path, mode)`` without computing."""
        entry = self._entries.get((path, mode))
        if entry is not None:
            self._entries.move_to_end((path, mode))
        return entry

    def get_or_compute(
        self,
        path: Path,
        mode: RenderMode,
        compute_fn: Callable[[], CacheEntry],
    ) -> CacheEntry:
        """Return the cached entry, computing and storing it on a miss.

        ``compute_fn`` runs before any eviction, so an exception leaves the
        current entries untouched.
        """
        key = (path, mode)
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            return entry

        entry = compute_fn()
        while len(self._entries) >= self.capacity:
            evicted_key, _evicted = self._entries.popitem(last=False)
            logger.debug("Evicted preview cache entry %s (%s)", evicted_key[0], evicted_key[1].value)
        self._entries[key] = entry
        return entry

    def invalidate_all(self) -> None:
        self._entries.clear()
