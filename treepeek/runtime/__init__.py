"""Public runtime entry points.

This package groups the interactive session (`run_app`) with the browser,
key decoding, terminal, and frame-drawing helpers it composes.
"""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the session runner to keep ``termios`` off the import path."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


__all__ = ["run_app"]
