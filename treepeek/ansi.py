"""ANSI-aware text measurement and styled-line encoding.

Converts ``StyledLine`` runs into SGR escape sequences, clipping to a column
budget while expanding tabs and counting wide characters as two columns.
"""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .preview.styles import StyledLine, TextStyle

TAB_STOP = 8
RESET = "\033[0m"

_HEX_COLOR_RE = re.compile(r"^[0-9a-fA-F]{6}$")
_ANSI_COLOR_CODES = {
    "ansiblack": 30,
    "ansired": 31,
    "ansigreen": 32,
    "ansiyellow": 33,
    "ansiblue": 34,
    "ansimagenta": 35,
    "ansicyan": 36,
    "ansigray": 37,
    "ansibrightblack": 90,
    "ansibrightred": 91,
    "ansibrightgreen": 92,
    "ansibrightyellow": 93,
    "ansibrightblue": 94,
    "ansibrightmagenta": 95,
    "ansibrightcyan": 96,
    "ansiwhite": 97,
}


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def plain_display_width(text: str) -> int:
    """Return terminal display width for plain text (tabs measured from column 0)."""
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def _color_params(color: str, background: bool) -> list[str]:
    if _HEX_COLOR_RE.match(color):
        red, green, blue = (int(color[idx : idx + 2], 16) for idx in (0, 2, 4))
        return ["48" if background else "38", "2", str(red), str(green), str(blue)]
    code = _ANSI_COLOR_CODES.get(color)
    if code is None:
        return []
    return [str(code + 10 if background else code)]


def style_sgr(style: TextStyle) -> str:
    """Return the SGR sequence selecting ``style`` from a reset state ("" for default)."""
    params: list[str] = []
    if style.bold:
        params.append("1")
    if style.italic:
        params.append("3")
    if style.underline:
        params.append("4")
    if style.strike:
        params.append("9")
    if style.fg:
        params.extend(_color_params(style.fg, background=False))
    if style.bg:
        params.extend(_color_params(style.bg, background=True))
    if not params:
        return ""
    return f"\033[{';'.join(params)}m"


def clip_plain_text(text: str, max_cols: int, start_col: int = 0) -> tuple[str, int]:
    """Clip plain text to ``max_cols`` columns starting at visual column ``start_col``.

    Tabs are expanded into spaces. Returns ``(clipped_text, columns_used)``.
    """
    out: list[str] = []
    col = start_col
    limit = start_col + max_cols
    for ch in text:
        w = char_display_width(ch, col)
        if col + w > limit:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
    return "".join(out), col - start_col


def styled_line_to_ansi(line: StyledLine, max_cols: int, no_color: bool = False) -> str:
    """Encode a styled line as terminal text clipped to ``max_cols`` columns.

    Each styled run is bracketed by its SGR sequence and a reset, so rows can
    be concatenated without styles bleeding across them.
    """
    if max_cols <= 0:
        return ""

    out: list[str] = []
    col = 0
    for run in line.runs:
        if col >= max_cols:
            break
        clipped, used = clip_plain_text(run.text, max_cols - col, start_col=col)
        if not clipped:
            if used == 0 and run.text:
                break
            continue
        sgr = "" if no_color else style_sgr(run.style)
        if sgr:
            out.append(sgr)
            out.append(clipped)
            out.append(RESET)
        else:
            out.append(clipped)
        col += used
    return "".join(out)
