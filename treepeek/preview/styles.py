"""Terminal style model shared by the highlighter, markdown renderer, and draw layer.

A ``StyledLine`` is one visual row made of ``StyleRun`` spans. Each run carries
a ``TextStyle``: colors plus bold/italic/underline/strike flags.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class TextStyle:
    """Foreground/background colors and attribute flags for one run.

    Colors are 6-digit hex strings (``"f8f8f2"``) or ANSI color names
    (``"ansired"``). ``None`` means the terminal default.
    """

    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False

    def merged(self, overlay: TextStyle) -> TextStyle:
        """Layer ``overlay`` on top: its colors win when set, flags accumulate."""
        return TextStyle(
            fg=overlay.fg if overlay.fg is not None else self.fg,
            bg=overlay.bg if overlay.bg is not None else self.bg,
            bold=self.bold or overlay.bold,
            italic=self.italic or overlay.italic,
            underline=self.underline or overlay.underline,
            strike=self.strike or overlay.strike,
        )


DEFAULT_STYLE = TextStyle()


@dataclass(frozen=True)
class StyleRun:
    text: str
    style: TextStyle = DEFAULT_STYLE


@dataclass(frozen=True)
class StyledLine:
    """One terminal row as an ordered tuple of runs, without line breaks."""

    runs: tuple[StyleRun, ...] = ()

    @classmethod
    def from_runs(cls, runs: Iterable[StyleRun]) -> StyledLine:
        """Build a line, merging adjacent same-style runs and dropping empty ones.

        Stray CR/LF characters are folded to spaces so a line always maps to
        exactly one row.
        """
        merged: list[StyleRun] = []
        for run in runs:
            text = run.text
            if "\n" in text or "\r" in text:
                text = text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
            if not text:
                continue
            if merged and merged[-1].style == run.style:
                merged[-1] = StyleRun(merged[-1].text + text, run.style)
            else:
                merged.append(StyleRun(text, run.style))
        return cls(tuple(merged))

    @classmethod
    def plain(cls, text: str, style: TextStyle = DEFAULT_STYLE) -> StyledLine:
        """Build a single-run line."""
        return cls.from_runs([StyleRun(text, style)])

    @property
    def text(self) -> str:
        """Concatenated run text without styling."""
        return "".join(run.text for run in self.runs)
