"""Public preview API.

Implementation lives in small focused modules; this package file re-exports
the pieces the runtime and CLI compose.
"""

from __future__ import annotations

from .cache import CacheEntry, RenderMode, StyledLineCache
from .loader import (
    MAX_PREVIEW_BYTES,
    BinaryContent,
    ContentLoader,
    FileHandle,
    LoadedContent,
    ReadError,
    TextContent,
)
from .markdown import MarkdownRenderer
from .pipeline import (
    ClosedState,
    DisplayingState,
    ErrorState,
    ErrorView,
    PipelineState,
    PreviewPipeline,
    PreviewView,
    is_markdown_path,
)
from .scroll import ScrollState, clamp
from .styles import DEFAULT_STYLE, StyledLine, StyleRun, TextStyle
from .syntax import Highlighter, SyntaxAssets, language_hint_for_path, load_syntax_assets

__all__ = [
    "MAX_PREVIEW_BYTES",
    "BinaryContent",
    "CacheEntry",
    "ClosedState",
    "ContentLoader",
    "DEFAULT_STYLE",
    "DisplayingState",
    "ErrorState",
    "ErrorView",
    "FileHandle",
    "Highlighter",
    "LoadedContent",
    "MarkdownRenderer",
    "PipelineState",
    "PreviewPipeline",
    "PreviewView",
    "ReadError",
    "RenderMode",
    "ScrollState",
    "StyleRun",
    "StyledLine",
    "StyledLineCache",
    "SyntaxAssets",
    "TextContent",
    "TextStyle",
    "clamp",
    "is_markdown_path",
    "language_hint_for_path",
    "load_syntax_assets",
]
