"""Frame composition for the browser and preview panels.

Pure functions: given browser state and a preview view, produce the ANSI text
rows for one frame. No highlighting or caching happens here.
"""

from __future__ import annotations

from ..ansi import clip_plain_text, styled_line_to_ansi
from ..preview import ErrorView, PreviewView, RenderMode, StyledLine, StyleRun, TextStyle
from ..preview.loader import MAX_PREVIEW_BYTES
from .browser import BrowserState

PATH_BAR_STYLE = TextStyle(fg="5fd7d7", bold=True)
SELECTED_STYLE = TextStyle(fg="ffd75f", bold=True)
DIRECTORY_STYLE = TextStyle(fg="5fafff")
TITLE_STYLE = TextStyle(fg="ffd75f", bold=True)
ERROR_STYLE = TextStyle(fg="ff5f5f")
HINT_KEY_STYLE = TextStyle(fg="8a8a8a")
SEPARATOR_STYLE = TextStyle(fg="5c6370")
SEPARATOR = "│"

KEY_HINTS = (
    ("↑/↓", "move"),
    ("Enter/l", "open"),
    ("h", "up"),
    ("H", "hidden"),
    ("m", "markdown"),
    ("j/k", "scroll"),
    ("Esc", "close"),
    ("q", "quit"),
)

# Path bar + key-hint row.
CHROME_ROWS = 2
# Preview title row.
PREVIEW_TITLE_ROWS = 1


def body_height(rows: int) -> int:
    return max(0, rows - CHROME_ROWS)


def preview_viewport_height(rows: int) -> int:
    """Rows available for preview content in a terminal ``rows`` tall."""
    return max(0, body_height(rows) - PREVIEW_TITLE_ROWS)


def split_widths(columns: int) -> tuple[int, int]:
    """Return ``(left, right)`` panel widths around a one-column separator."""
    left = max(1, columns // 2)
    right = max(0, columns - left - len(SEPARATOR))
    return left, right


def fit_line(line: StyledLine, width: int, no_color: bool) -> str:
    """Render ``line`` clipped and space-padded to exactly ``width`` columns."""
    if width <= 0:
        return ""
    _clipped, used = clip_plain_text(line.text, width)
    return styled_line_to_ansi(line, width, no_color=no_color) + " " * (width - used)


def _entry_line(browser: BrowserState, idx: int) -> StyledLine:
    entry = browser.entries[idx]
    label = f"{entry.name}/" if entry.is_dir and entry.name != ".." else entry.name
    if idx == browser.selected:
        return StyledLine.plain(f"> {label}", SELECTED_STYLE)
    style = DIRECTORY_STYLE if entry.is_dir else TextStyle()
    return StyledLine.plain(f"  {label}", style)


def entry_rows(browser: BrowserState, height: int) -> list[StyledLine]:
    """Visible slice of the entry list, scrolled so the selection stays on screen."""
    if height <= 0:
        return []
    start = max(0, browser.selected - height + 1)
    end = min(len(browser.entries), start + height)
    return [_entry_line(browser, idx) for idx in range(start, end)]


def preview_title(view: PreviewView | ErrorView) -> StyledLine:
    name = view.path.name or str(view.path)
    title = f" {name}"
    if isinstance(view, PreviewView):
        if view.mode is RenderMode.RENDERED:
            title += " [rendered]"
        if view.truncated:
            title += f" (first {MAX_PREVIEW_BYTES // 1024} KB)"
    return StyledLine.plain(title, TITLE_STYLE)


def preview_rows(view: PreviewView | ErrorView, height: int) -> list[StyledLine]:
    if height <= 0:
        return []
    rows = [preview_title(view)]
    if isinstance(view, ErrorView):
        rows.append(StyledLine.plain(view.message, ERROR_STYLE))
    else:
        rows.extend(view.visible_lines(height - PREVIEW_TITLE_ROWS))
    return rows[:height]


def path_bar(browser: BrowserState) -> StyledLine:
    text = f" {browser.cwd}"
    if browser.show_hidden:
        text += " • hidden"
    return StyledLine.plain(text, PATH_BAR_STYLE)


def hint_bar() -> StyledLine:
    runs: list[StyleRun] = []
    for key, action in KEY_HINTS:
        runs.append(StyleRun(f" {key} ", HINT_KEY_STYLE))
        runs.append(StyleRun(f"{action} "))
    return StyledLine.from_runs(runs)


def build_frame(
    browser: BrowserState,
    view: PreviewView | ErrorView | None,
    columns: int,
    rows: int,
    no_color: bool = False,
) -> list[str]:
    """Compose all rows of one frame, each exactly ``columns`` wide."""
    if columns <= 0 or rows <= 0:
        return []

    height = body_height(rows)
    out = [fit_line(path_bar(browser), columns, no_color)]

    if view is None:
        entries = entry_rows(browser, height)
        for row_idx in range(height):
            line = entries[row_idx] if row_idx < len(entries) else StyledLine()
            out.append(fit_line(line, columns, no_color))
    else:
        left_width, right_width = split_widths(columns)
        entries = entry_rows(browser, height)
        preview = preview_rows(view, height)
        separator = fit_line(StyledLine.plain(SEPARATOR, SEPARATOR_STYLE), len(SEPARATOR), no_color)
        for row_idx in range(height):
            left = entries[row_idx] if row_idx < len(entries) else StyledLine()
            right = preview[row_idx] if row_idx < len(preview) else StyledLine()
            out.append(
                fit_line(left, left_width, no_color)
                + separator
                + fit_line(right, right_width, no_color)
            )

    if rows > 1:
        out.append(fit_line(hint_bar(), columns, no_color))
    return out[:rows]
