"""Pygments-backed syntax highlighting into styled lines.

``SyntaxAssets`` is the read-only theme table built once per pygments style.
``Highlighter`` lexes a whole text in one pass and splits the token stream at
newlines, so every line starts in the lexer state the previous line left.
Also neutralizes terminal control bytes to avoid unsafe preview side effects.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.token import Token, _TokenType
from pygments.util import ClassNotFound

from .styles import DEFAULT_STYLE, StyledLine, StyleRun, TextStyle

logger = logging.getLogger(__name__)

DEFAULT_STYLE_NAME = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_LEXER_OPTIONS = {"stripnl": False, "stripall": False, "ensurenl": True, "tabsize": 0}
_ASSETS: dict[str, SyntaxAssets] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def language_hint_for_path(path: Path) -> str:
    """Derive a language hint from the file extension (``"py"`` for ``a.py``)."""
    return path.suffix[1:].lower()


def _style_from_definition(definition: dict) -> TextStyle:
    """Convert one pygments style definition dict into a ``TextStyle``."""
    return TextStyle(
        fg=definition.get("color") or None,
        bg=definition.get("bgcolor") or None,
        bold=bool(definition.get("bold")),
        italic=bool(definition.get("italic")),
        underline=bool(definition.get("underline")),
    )


@dataclass(frozen=True)
class SyntaxAssets:
    """Immutable token-type -> ``TextStyle`` table for one pygments style."""

    style_name: str
    theme: Mapping[_TokenType, TextStyle] = field(repr=False)

    @classmethod
    def build(cls, style_name: str) -> SyntaxAssets:
        """Build a table from a pygments style, falling back to ``monokai``."""
        try:
            style_cls = get_style_by_name(style_name)
        except ClassNotFound:
            logger.debug("Unknown pygments style %r, using %s", style_name, DEFAULT_STYLE_NAME)
            style_name = DEFAULT_STYLE_NAME
            style_cls = get_style_by_name(style_name)

        theme: dict[_TokenType, TextStyle] = {}
        for ttype, definition in style_cls:
            style = _style_from_definition(definition)
            if style != DEFAULT_STYLE:
                theme[ttype] = style
        return cls(style_name=style_name, theme=MappingProxyType(theme))

    def style_for(self, ttype: _TokenType) -> TextStyle:
        """Look up a token type, walking up to parents; the root maps to default."""
        current: _TokenType | None = ttype
        while current is not None:
            style = self.theme.get(current)
            if style is not None:
                return style
            if current is Token:
                break
            current = current.parent
        return DEFAULT_STYLE


def load_syntax_assets(style_name: str = DEFAULT_STYLE_NAME) -> SyntaxAssets:
    """Return the process-wide assets for ``style_name``, building them on first use."""
    assets = _ASSETS.get(style_name)
    if assets is None:
        assets = SyntaxAssets.build(style_name)
        _ASSETS[style_name] = assets
    return assets


def resolve_lexer(language_hint: str) -> Lexer | None:
    """Return a lexer for an alias or extension hint, or ``None`` for plain text."""
    hint = language_hint.strip().lower()
    if not hint:
        return None

    try:
        lexer = get_lexer_by_name(hint, **_LEXER_OPTIONS)
    except ClassNotFound:
        try:
            lexer = get_lexer_for_filename(f"file.{hint}", **_LEXER_OPTIONS)
        except ClassNotFound:
            logger.debug("No lexer for hint %r, using plain text", hint)
            return None

    if isinstance(lexer, TextLexer):
        return None
    return lexer


def plain_lines(text: str) -> list[StyledLine]:
    """Split text into default-styled lines (trailing newline does not add a row)."""
    if not text:
        return []
    rows = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if rows[-1] == "":
        rows.pop()
    return [StyledLine.plain(row) for row in rows]


class Highlighter:
    """Tokenize text with pygments and map token types through ``SyntaxAssets``."""

    def __init__(self, assets: SyntaxAssets) -> None:
        self.assets = assets

    def highlight(self, text: str, language_hint: str) -> list[StyledLine]:
        """Return one ``StyledLine`` per source line of ``text``."""
        text = sanitize_terminal_text(text)
        lexer = resolve_lexer(language_hint)
        if lexer is None:
            return plain_lines(text)
        if not text:
            return []

        lines: list[StyledLine] = []
        current: list[StyleRun] = []
        for ttype, value in lexer.get_tokens(text):
            if not value:
                continue
            style = self.assets.style_for(ttype)
            pieces = value.split("\n")
            for piece_idx, piece in enumerate(pieces):
                if piece_idx > 0:
                    lines.append(StyledLine.from_runs(current))
                    current = []
                if piece:
                    current.append(StyleRun(piece, style))
        if current:
            lines.append(StyledLine.from_runs(current))
        return lines
