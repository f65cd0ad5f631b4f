"""Command-line front door for treepeek.

Parses CLI options, configures logging, and resolves the target path.
Then dispatches into the interactive browser or a one-shot preview render.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from .ansi import styled_line_to_ansi
from .preview import ErrorView, PreviewPipeline, RenderMode, load_syntax_assets
from .preview.syntax import DEFAULT_STYLE_NAME
from .runtime import config, run_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_render_width() -> int:
    """Resolve default render width from current terminal size."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.columns)


def configure_logging(log_file: str | None, level: str) -> None:
    """Send log records to ``log_file``; without one, logging stays silent."""
    if not log_file:
        return
    logging.basicConfig(filename=log_file, level=getattr(logging, level), format=LOG_FORMAT)


def render_preview(
    path: Path,
    style: str,
    no_color: bool,
    max_cols: int,
    mode: RenderMode = RenderMode.RAW,
) -> tuple[str, str | None]:
    """Render the preview of ``path`` as text.

    Returns ``(output, error_message)``; ``error_message`` is set when the
    file could not be read. Rendered mode silently falls back to raw for
    files that cannot be toggled.
    """
    pipeline = PreviewPipeline(load_syntax_assets(style))
    pipeline.select(path)
    if mode is RenderMode.RENDERED and pipeline.can_toggle:
        pipeline.toggle_mode()

    view = pipeline.view()
    if view is None:
        return "", None
    if isinstance(view, ErrorView):
        return "", view.message

    out: list[str] = []
    for line in view.lines:
        out.append(styled_line_to_ansi(line, max_cols, no_color=no_color))
        out.append("\n")
    return "".join(out), None


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch treepeek on a file or directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    parser = argparse.ArgumentParser(
        description="Browse directories and preview files with syntax highlighting and rendered markdown."
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory or file to open. Defaults to current directory.")
    parser.add_argument("--style", default=None, help="Pygments style name (default: configured style or monokai).")
    parser.add_argument("--save-style", action="store_true", help="Persist --style as the default style.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--render", metavar="PATH", help="Print the preview of PATH and exit.")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in RenderMode],
        default=RenderMode.RAW.value,
        help="Preview mode for --render (rendered applies to markdown files only).",
    )
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument("--log-file", default=None, help="Write log records to this file.")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Log level for --log-file.")
    args = parser.parse_args()

    configure_logging(args.log_file, args.log_level)
    style = args.style or config.load_style_name() or DEFAULT_STYLE_NAME
    if args.save_style and args.style:
        config.save_style_name(args.style)

    if args.render is not None:
        if args.path is not None:
            raise SystemExit("Cannot combine positional path with --render.")
        render_path = Path(args.render)
        if not render_path.exists():
            raise SystemExit(f"Path not found: {render_path}")
        if render_path.is_dir():
            raise SystemExit(f"Not a file: {render_path}")
        max_cols = args.max_cols if args.max_cols is not None else _default_render_width()
        output, error = render_preview(
            render_path,
            style,
            args.no_color,
            max_cols,
            mode=RenderMode(args.mode),
        )
        if error is not None:
            sys.stderr.write(error + "\n")
            raise SystemExit(1)
        sys.stdout.write(output)
        return

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    run_app(path, style, args.no_color)


if __name__ == "__main__":
    main()
