"""Markdown to styled-line conversion.

markdown-it-py turns the source into a flat token stream of block open/close
markers with ``inline`` tokens carrying inline children. ``_LineBuilder`` walks
that stream once, keeping a stack of line prefixes (list bullets, quote
markers) and base styles, and emits one ``StyledLine`` per visual row.
Code blocks are delegated to ``Highlighter`` using the fence language tag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ..ansi import plain_display_width
from .styles import DEFAULT_STYLE, StyledLine, StyleRun, TextStyle
from .syntax import Highlighter, sanitize_terminal_text

logger = logging.getLogger(__name__)

LIST_INDENT = 2
RULE_WIDTH = 40
RULE_CHAR = "─"
QUOTE_MARKER = "▎ "
CODE_GUTTER = "│ "
TABLE_COLUMN_SEPARATOR = " │ "
BULLETS = ("•", "◦", "▪")

HEADING_STYLES = (
    TextStyle(fg="ff5f87", bold=True),
    TextStyle(fg="ffaf5f", bold=True),
    TextStyle(fg="ffd75f", bold=True),
    TextStyle(fg="87d75f", bold=True),
    TextStyle(fg="5fafff", bold=True),
    TextStyle(fg="af87ff", bold=True),
)
STRONG_STYLE = TextStyle(bold=True)
EMPHASIS_STYLE = TextStyle(italic=True)
STRIKE_STYLE = TextStyle(strike=True)
INLINE_CODE_STYLE = TextStyle(fg="e06c75", bg="2c313a")
LINK_STYLE = TextStyle(fg="61afef", underline=True)
MUTED_STYLE = TextStyle(fg="7f848e")
QUOTE_TEXT_STYLE = TextStyle(fg="9da5b4", italic=True)
LIST_MARKER_STYLE = TextStyle(fg="e5c07b")
CODE_GUTTER_STYLE = TextStyle(fg="5c6370")
RULE_STYLE = TextStyle(fg="5c6370")
TABLE_HEADER_STYLE = TextStyle(bold=True)

_CLOSE_TYPES = {"strong_close", "em_close", "s_close", "link_close"}


@dataclass
class _Prefix:
    """Line prefix contributed by an open container (list item or blockquote)."""

    first: tuple[StyleRun, ...]
    rest: tuple[StyleRun, ...]
    is_list_item: bool = False
    used: bool = False


@dataclass
class _ListFrame:
    ordered: bool
    next_number: int = 1


@dataclass
class _TableRow:
    cells: list[list[StyleRun]] = field(default_factory=list)
    is_header: bool = False


@dataclass
class _TableFrame:
    rows: list[_TableRow] = field(default_factory=list)
    in_header: bool = False
    current_row: _TableRow | None = None
    current_cell: list[StyleRun] | None = None


class _LineBuilder:
    """Single-use consumer of one token stream."""

    def __init__(self, highlighter: Highlighter, rule_width: int) -> None:
        self.highlighter = highlighter
        self.rule_width = rule_width
        self.lines: list[StyledLine] = []
        self._prefixes: list[_Prefix] = []
        self._base_styles: list[TextStyle] = [DEFAULT_STYLE]
        self._lists: list[_ListFrame] = []
        self._heading_style: TextStyle | None = None
        self._table: _TableFrame | None = None

    @property
    def _base(self) -> TextStyle:
        return self._base_styles[-1]

    def emit(self, runs: list[StyleRun]) -> None:
        """Append one row, prefixed by every open container.

        Only the innermost list item contributes, so nested items are indented
        by their own depth rather than by the sum of their ancestors' markers.
        """
        innermost_item = -1
        for idx, prefix in enumerate(self._prefixes):
            if prefix.is_list_item:
                innermost_item = idx

        prefix_runs: list[StyleRun] = []
        for idx, prefix in enumerate(self._prefixes):
            if prefix.is_list_item and idx != innermost_item:
                prefix.used = True
                continue
            prefix_runs.extend(prefix.rest if prefix.used else prefix.first)
            prefix.used = True
        self.lines.append(StyledLine.from_runs([*prefix_runs, *runs]))

    def feed(self, tokens: list[Token]) -> None:
        for token in tokens:
            self._handle(token)

    def _handle(self, token: Token) -> None:
        kind = token.type
        if kind == "inline":
            self._handle_inline(token)
        elif kind == "heading_open":
            level = _heading_level(token)
            self._heading_style = HEADING_STYLES[level - 1]
        elif kind == "heading_close":
            self._heading_style = None
        elif kind in ("bullet_list_open", "ordered_list_open"):
            ordered = kind == "ordered_list_open"
            self._lists.append(_ListFrame(ordered=ordered, next_number=_list_start(token)))
        elif kind in ("bullet_list_close", "ordered_list_close"):
            if self._lists:
                self._lists.pop()
        elif kind == "list_item_open":
            self._open_list_item()
        elif kind == "list_item_close":
            self._close_container()
        elif kind == "blockquote_open":
            marker = StyleRun(QUOTE_MARKER, MUTED_STYLE)
            self._prefixes.append(_Prefix(first=(marker,), rest=(marker,)))
            self._base_styles.append(self._base.merged(QUOTE_TEXT_STYLE))
        elif kind == "blockquote_close":
            self._close_container()
            if len(self._base_styles) > 1:
                self._base_styles.pop()
        elif kind in ("fence", "code_block"):
            self._code_block(token)
        elif kind == "hr":
            self.emit([StyleRun(RULE_CHAR * self.rule_width, RULE_STYLE)])
        elif kind == "html_block":
            for row in token.content.rstrip("\n").split("\n"):
                self.emit([StyleRun(row, self._base.merged(MUTED_STYLE))])
        elif kind.startswith(("table_", "thead_", "tbody_", "tr_", "th_", "td_")):
            self._table_event(token)

    def _open_list_item(self) -> None:
        if self._lists:
            frame = self._lists[-1]
        else:
            frame = _ListFrame(ordered=False)
        depth = max(0, len(self._lists) - 1)
        if frame.ordered:
            marker = f"{frame.next_number}."
            frame.next_number += 1
        else:
            marker = BULLETS[depth % len(BULLETS)]
        lead = " " * (LIST_INDENT * depth) + marker + " "
        self._prefixes.append(
            _Prefix(
                first=(StyleRun(lead, LIST_MARKER_STYLE),),
                rest=(StyleRun(" " * plain_display_width(lead)),),
                is_list_item=True,
            )
        )

    def _close_container(self) -> None:
        if not self._prefixes:
            return
        prefix = self._prefixes[-1]
        if prefix.is_list_item and not prefix.used:
            # Empty item still shows its bullet.
            self.emit([])
        self._prefixes.pop()

    def _code_block(self, token: Token) -> None:
        language = ""
        if token.type == "fence" and token.info.strip():
            language = token.info.split()[0]
        code_lines = self.highlighter.highlight(token.content, language)
        if not code_lines:
            code_lines = [StyledLine()]
        gutter = StyleRun(CODE_GUTTER, CODE_GUTTER_STYLE)
        for line in code_lines:
            self.emit([gutter, *line.runs])

    def _handle_inline(self, token: Token) -> None:
        table = self._table
        if table is not None and table.current_cell is not None:
            base = self._base.merged(TABLE_HEADER_STYLE) if table.in_header else self._base
            rows = inline_rows(token, base)
            for row_idx, row in enumerate(rows):
                if row_idx:
                    table.current_cell.append(StyleRun(" ", base))
                table.current_cell.extend(row)
            return

        base = self._base
        if self._heading_style is not None:
            base = base.merged(self._heading_style)
        for row in inline_rows(token, base):
            self.emit(row)

    def _table_event(self, token: Token) -> None:
        kind = token.type
        if kind == "table_open":
            self._table = _TableFrame()
            return
        table = self._table
        if table is None:
            return
        if kind == "thead_open":
            table.in_header = True
        elif kind == "thead_close":
            table.in_header = False
        elif kind == "tr_open":
            table.current_row = _TableRow(is_header=table.in_header)
        elif kind in ("th_open", "td_open"):
            table.current_cell = []
        elif kind in ("th_close", "td_close"):
            if table.current_row is not None and table.current_cell is not None:
                table.current_row.cells.append(table.current_cell)
            table.current_cell = None
        elif kind == "tr_close":
            if table.current_row is not None:
                table.rows.append(table.current_row)
            table.current_row = None
        elif kind == "table_close":
            self._table = None
            self._emit_table(table.rows)

    def _emit_table(self, rows: list[_TableRow]) -> None:
        if not rows:
            return
        column_count = max(len(row.cells) for row in rows)
        widths = [0] * column_count
        for row in rows:
            for col_idx, cell in enumerate(row.cells):
                widths[col_idx] = max(widths[col_idx], _runs_width(cell))

        for row in rows:
            runs: list[StyleRun] = []
            for col_idx in range(column_count):
                cell = row.cells[col_idx] if col_idx < len(row.cells) else []
                if col_idx:
                    runs.append(StyleRun(TABLE_COLUMN_SEPARATOR, MUTED_STYLE))
                runs.extend(cell)
                padding = widths[col_idx] - _runs_width(cell)
                if padding > 0 and col_idx < column_count - 1:
                    runs.append(StyleRun(" " * padding))
            self.emit(runs)
            if row.is_header:
                separator = "─┼─".join(RULE_CHAR * width for width in widths)
                self.emit([StyleRun(separator, MUTED_STYLE)])


def _heading_level(token: Token) -> int:
    try:
        level = int(token.tag[1:])
    except ValueError:
        level = 1
    return max(1, min(len(HEADING_STYLES), level))


def _list_start(token: Token) -> int:
    raw = token.attrGet("start")
    if raw is None:
        return 1
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


def _runs_width(runs: list[StyleRun]) -> int:
    return sum(plain_display_width(run.text) for run in runs)


def inline_rows(token: Token, base: TextStyle) -> list[list[StyleRun]]:
    """Convert one ``inline`` token's children into rows of runs.

    Emphasis, strong, strikethrough, and link markers push onto a style stack
    layered over ``base``; soft and hard breaks start a new row.
    """
    rows: list[list[StyleRun]] = [[]]
    stack = [base]
    for child in token.children or []:
        kind = child.type
        if kind == "text":
            rows[-1].append(StyleRun(child.content, stack[-1]))
        elif kind == "code_inline":
            rows[-1].append(StyleRun(child.content, stack[-1].merged(INLINE_CODE_STYLE)))
        elif kind == "strong_open":
            stack.append(stack[-1].merged(STRONG_STYLE))
        elif kind == "em_open":
            stack.append(stack[-1].merged(EMPHASIS_STYLE))
        elif kind == "s_open":
            stack.append(stack[-1].merged(STRIKE_STYLE))
        elif kind == "link_open":
            stack.append(stack[-1].merged(LINK_STYLE))
        elif kind in _CLOSE_TYPES:
            if len(stack) > 1:
                stack.pop()
        elif kind in ("softbreak", "hardbreak"):
            rows.append([])
        elif kind == "image":
            rows[-1].append(StyleRun(f"[image: {child.content}]", stack[-1].merged(MUTED_STYLE)))
        elif kind == "html_inline":
            rows[-1].append(StyleRun(child.content, stack[-1].merged(MUTED_STYLE)))
    return rows


class MarkdownRenderer:
    """Render markdown source into styled lines."""

    def __init__(self, highlighter: Highlighter, rule_width: int = RULE_WIDTH) -> None:
        self.highlighter = highlighter
        self.rule_width = rule_width
        self._parser = MarkdownIt("commonmark").enable(["strikethrough", "table"])

    def parse(self, markdown_text: str) -> list[Token]:
        """Return the flat markdown-it token stream for ``markdown_text``."""
        return self._parser.parse(markdown_text)

    def render(self, markdown_text: str) -> list[StyledLine]:
        builder = _LineBuilder(self.highlighter, self.rule_width)
        builder.feed(self.parse(sanitize_terminal_text(markdown_text)))
        logger.debug("Rendered markdown into %d lines", len(builder.lines))
        return builder.lines
