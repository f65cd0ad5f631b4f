"""Preview orchestration: selection, mode toggling, caching, and scrolling.

``PreviewPipeline`` is a small state machine over ``ClosedState``,
``DisplayingState`` and ``ErrorState``. Every request resolves to a state;
file problems never surface as exceptions. The draw layer reads ``view()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .cache import CacheEntry, RenderMode, StyledLineCache
from .loader import BinaryContent, ContentLoader, FileHandle, ReadError, TextContent
from .markdown import MarkdownRenderer
from .scroll import ScrollState
from .styles import StyledLine, TextStyle
from .syntax import Highlighter, SyntaxAssets, language_hint_for_path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})
BINARY_PLACEHOLDER = "(binary file)"
EMPTY_PLACEHOLDER = "(empty file)"
PLACEHOLDER_STYLE = TextStyle(fg="7f848e", italic=True)


def is_markdown_path(path: Path) -> bool:
    """Return whether ``path`` is eligible for rendered markdown mode."""
    return path.suffix.lower() in MARKDOWN_SUFFIXES


def _is_toggleable(path: Path, content: TextContent | BinaryContent) -> bool:
    return isinstance(content, TextContent) and bool(content.text) and is_markdown_path(path)


@dataclass(frozen=True)
class ClosedState:
    pass


@dataclass(frozen=True)
class DisplayingState:
    path: Path
    mode: RenderMode


@dataclass(frozen=True)
class ErrorState:
    path: Path
    message: str


PipelineState = Union[ClosedState, DisplayingState, ErrorState]


@dataclass(frozen=True)
class PreviewView:
    """Read-only snapshot handed to the draw layer."""

    path: Path
    mode: RenderMode
    lines: tuple[StyledLine, ...]
    scroll_offset: int
    truncated: bool

    def visible_lines(self, height: int) -> tuple[StyledLine, ...]:
        """Return the rows shown in a viewport of ``height`` rows."""
        if height <= 0:
            return ()
        return self.lines[self.scroll_offset : self.scroll_offset + height]


@dataclass(frozen=True)
class ErrorView:
    path: Path
    message: str


class PreviewPipeline:
    """Turn selected paths into cached, scrollable styled lines."""

    def __init__(
        self,
        assets: SyntaxAssets,
        loader: ContentLoader | None = None,
        cache: StyledLineCache | None = None,
        viewport_height: int = 0,
    ) -> None:
        self.highlighter = Highlighter(assets)
        self.markdown = MarkdownRenderer(self.highlighter)
        self.loader = loader or ContentLoader()
        self.cache = cache or StyledLineCache()
        self.scroll = ScrollState(viewport_height=max(0, viewport_height))
        self.state: PipelineState = ClosedState()
        self._entry: CacheEntry | None = None
        self._handle: FileHandle | None = None
        self._toggleable = False

    @property
    def can_toggle(self) -> bool:
        """Whether ``toggle_mode`` would switch modes in the current state."""
        return isinstance(self.state, DisplayingState) and self._toggleable

    def select(self, path: Path, is_directory: bool = False) -> PipelineState:
        """Show ``path`` in raw mode with scroll reset to the top.

        Directories are not previewed; the state is left unchanged.
        """
        if is_directory:
            logger.debug("Ignoring directory selection %s", path)
            return self.state

        path = Path(path).absolute()
        handle = self.loader.stat(path)
        if handle is not None and handle == self._handle:
            entry = self.cache.get(path, RenderMode.RAW)
            if entry is not None:
                self._show(entry, reset=True)
                return self.state

        content = self.loader.load(path)
        if isinstance(content, ReadError):
            return self._fail(path, content.message)
        return self._show_fresh(path, content)

    def toggle_mode(self) -> PipelineState:
        """Flip raw/rendered for markdown files; a no-op for everything else.

        When the reload finds the file changed on disk, the new content is
        shown in raw mode from the top instead, as a fresh ``select`` would.
        """
        state = self.state
        if not isinstance(state, DisplayingState) or not self._toggleable:
            return state

        path = state.path
        mode = RenderMode.RENDERED if state.mode is RenderMode.RAW else RenderMode.RAW
        entry = self.cache.get(path, mode)
        if entry is None:
            content = self.loader.load(path)
            if isinstance(content, ReadError):
                return self._fail(path, content.message)
            if content.handle != self._handle or not _is_toggleable(path, content):
                logger.debug("%s changed on disk; showing it afresh", path)
                return self._show_fresh(path, content)
            entry = self.cache.get_or_compute(
                path,
                mode,
                lambda: self._build_entry(path, mode, content),
            )
        self._show(entry, reset=False)
        return self.state

    def close(self) -> PipelineState:
        self.state = ClosedState()
        self._reset()
        return self.state

    def scroll_by(self, delta: int) -> None:
        if isinstance(self.state, DisplayingState):
            self.scroll.scroll_by(delta)

    def scroll_to(self, offset: int) -> None:
        if isinstance(self.state, DisplayingState):
            self.scroll.scroll_to(offset)

    def resize(self, viewport_height: int) -> None:
        self.scroll.resize(viewport_height)

    def view(self) -> PreviewView | ErrorView | None:
        state = self.state
        if isinstance(state, DisplayingState) and self._entry is not None:
            return PreviewView(
                path=state.path,
                mode=state.mode,
                lines=self._entry.lines,
                scroll_offset=self.scroll.offset,
                truncated=self._entry.truncated,
            )
        if isinstance(state, ErrorState):
            return ErrorView(path=state.path, message=state.message)
        return None

    def _adopt_handle(self, handle: FileHandle) -> None:
        if handle != self._handle:
            self.cache.invalidate_all()
            self._handle = handle

    def _build_entry(
        self,
        path: Path,
        mode: RenderMode,
        content: TextContent | BinaryContent,
    ) -> CacheEntry:
        if isinstance(content, BinaryContent):
            lines = (StyledLine.plain(BINARY_PLACEHOLDER, PLACEHOLDER_STYLE),)
        elif not content.text:
            lines = (StyledLine.plain(EMPTY_PLACEHOLDER, PLACEHOLDER_STYLE),)
        elif mode is RenderMode.RENDERED:
            lines = tuple(self.markdown.render(content.text))
        else:
            lines = tuple(self.highlighter.highlight(content.text, language_hint_for_path(path)))
        logger.debug("Built %s preview for %s: %d lines", mode.value, path, len(lines))
        return CacheEntry(path=path, mode=mode, lines=lines, truncated=content.truncated)

    def _show_fresh(self, path: Path, content: TextContent | BinaryContent) -> PipelineState:
        """Display newly loaded content in raw mode with scroll reset."""
        self._adopt_handle(content.handle)
        self._toggleable = _is_toggleable(path, content)
        entry = self.cache.get_or_compute(
            path,
            RenderMode.RAW,
            lambda: self._build_entry(path, RenderMode.RAW, content),
        )
        self._show(entry, reset=True)
        return self.state

    def _show(self, entry: CacheEntry, reset: bool) -> None:
        self.state = DisplayingState(path=entry.path, mode=entry.mode)
        self._entry = entry
        self.scroll.set_content(len(entry.lines), reset=reset)

    def _fail(self, path: Path, message: str) -> PipelineState:
        logger.debug("Preview of %s failed: %s", path, message)
        self._reset()
        self.state = ErrorState(path=path, message=f"Error reading: {message}")
        return self.state

    def _reset(self) -> None:
        self.cache.invalidate_all()
        self._entry = None
        self._handle = None
        self._toggleable = False
        self.scroll.set_content(0, reset=True)
