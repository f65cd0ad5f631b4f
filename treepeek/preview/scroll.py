"""Vertical scroll bookkeeping for the preview panel."""

from __future__ import annotations

from dataclasses import dataclass


def clamp(offset: int, content_len: int, viewport_height: int) -> int:
    """Clamp ``offset`` into ``[0, max(0, content_len - viewport_height)]``."""
    max_offset = max(0, content_len - viewport_height)
    return max(0, min(offset, max_offset))


@dataclass
class ScrollState:
    """Scroll offset that is re-clamped after every mutation."""

    offset: int = 0
    content_len: int = 0
    viewport_height: int = 0

    @property
    def max_offset(self) -> int:
        return max(0, self.content_len - self.viewport_height)

    def set_content(self, content_len: int, reset: bool) -> None:
        """Adopt new content length; ``reset`` scrolls back to the top."""
        self.content_len = max(0, content_len)
        self.offset = clamp(0 if reset else self.offset, self.content_len, self.viewport_height)

    def resize(self, viewport_height: int) -> None:
        self.viewport_height = max(0, viewport_height)
        self.offset = clamp(self.offset, self.content_len, self.viewport_height)

    def scroll_by(self, delta: int) -> None:
        self.offset = clamp(self.offset + delta, self.content_len, self.viewport_height)

    def scroll_to(self, offset: int) -> None:
        self.offset = clamp(offset, self.content_len, self.viewport_height)
