"""Interactive session: key dispatch and the main loop.

``App`` maps key tokens onto browser moves and preview pipeline events
(select, toggle, close, scroll, resize). ``run_app`` owns the terminal.
"""

from __future__ import annotations

import logging
import shutil
import sys
from collections.abc import Callable
from pathlib import Path

from ..preview import ClosedState, PreviewPipeline, load_syntax_assets
from . import config
from .browser import BrowserState
from .keys import read_key
from .screen import body_height, build_frame, preview_viewport_height
from .terminal import TerminalController

logger = logging.getLogger(__name__)

IDLE_POLL_MS = 100
QUIT_KEYS = {"q", "CTRL_C"}
OPEN_KEYS = {"ENTER", "l", "RIGHT"}
PARENT_KEYS = {"h", "LEFT", "BACKSPACE"}


class App:
    """Browser + preview state driven by key tokens."""

    def __init__(
        self,
        browser: BrowserState,
        pipeline: PreviewPipeline,
        columns: int = 80,
        rows: int = 24,
        no_color: bool = False,
        save_show_hidden: Callable[[bool], None] = config.save_show_hidden,
    ) -> None:
        self.browser = browser
        self.pipeline = pipeline
        self.no_color = no_color
        self.columns = columns
        self.rows = rows
        self.dirty = True
        self._save_show_hidden = save_show_hidden
        self.resize(columns, rows)

    @property
    def preview_open(self) -> bool:
        return not isinstance(self.pipeline.state, ClosedState)

    def resize(self, columns: int, rows: int) -> None:
        self.columns = columns
        self.rows = rows
        self.pipeline.resize(preview_viewport_height(rows))
        self.dirty = True

    def frame(self) -> list[str]:
        return build_frame(
            self.browser,
            self.pipeline.view(),
            self.columns,
            self.rows,
            no_color=self.no_color,
        )

    def open_selected(self) -> None:
        target = self.browser.enter()
        if target is not None:
            self.pipeline.select(target)

    def _page_rows(self) -> int:
        if self.preview_open:
            return max(1, self.pipeline.scroll.viewport_height)
        return max(1, body_height(self.rows))

    def _scroll_or_move(self, delta: int) -> None:
        if self.preview_open:
            self.pipeline.scroll_by(delta)
        else:
            self.browser.move(delta)

    def handle_key(self, key: str) -> bool:
        """Apply one key token; returns ``True`` when the session should end."""
        if key in QUIT_KEYS:
            return True
        if key == "ESC":
            if not self.preview_open:
                return True
            self.pipeline.close()
        elif key == "UP":
            self.browser.move(-1)
        elif key == "DOWN":
            self.browser.move(1)
        elif key == "k":
            self._scroll_or_move(-1)
        elif key == "j":
            self._scroll_or_move(1)
        elif key == "PAGE_UP":
            self._scroll_or_move(-self._page_rows())
        elif key == "PAGE_DOWN":
            self._scroll_or_move(self._page_rows())
        elif key == "HOME":
            if self.preview_open:
                self.pipeline.scroll_to(0)
            else:
                self.browser.move(-len(self.browser.entries))
        elif key == "END":
            if self.preview_open:
                self.pipeline.scroll_to(self.pipeline.scroll.max_offset)
            else:
                self.browser.move(len(self.browser.entries))
        elif key in OPEN_KEYS:
            self.open_selected()
        elif key in PARENT_KEYS:
            self.browser.go_parent()
        elif key == "m":
            self.pipeline.toggle_mode()
        elif key == "H":
            self.browser.toggle_hidden()
            self._save_show_hidden(self.browser.show_hidden)
        else:
            return False
        self.dirty = True
        return False


def build_app(start: Path, style_name: str, no_color: bool, columns: int, rows: int) -> App:
    """Create an ``App`` rooted at ``start``; a file ``start`` is previewed immediately."""
    start = start.absolute()
    show_hidden = config.load_show_hidden()
    initial_file: Path | None = None
    if start.is_dir():
        browser = BrowserState(start, show_hidden=show_hidden)
    else:
        browser = BrowserState(start.parent, show_hidden=show_hidden)
        browser.select_name(start.name)
        initial_file = start

    pipeline = PreviewPipeline(load_syntax_assets(style_name))
    app = App(browser, pipeline, columns=columns, rows=rows, no_color=no_color)
    if initial_file is not None:
        pipeline.select(initial_file)
    return app


def run_app(start: Path, style_name: str, no_color: bool = False) -> None:
    """Run the interactive browser until the user quits."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    term = shutil.get_terminal_size((80, 24))
    app = build_app(start, style_name, no_color, term.columns, term.lines)
    terminal = TerminalController(stdin_fd, stdout_fd)
    logger.debug("Starting session in %s", app.browser.cwd)

    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((80, 24))
            if (term.columns, term.lines) != (app.columns, app.rows):
                app.resize(term.columns, term.lines)
            if app.dirty:
                terminal.write_frame(app.frame())
                app.dirty = False
            key = read_key(stdin_fd, timeout_ms=IDLE_POLL_MS)
            if not key:
                continue
            if app.handle_key(key):
                break
