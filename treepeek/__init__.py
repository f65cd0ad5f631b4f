"""Public package surface for treepeek.

Exports ``main`` for programmatic CLI invocation.
Most implementation lives in ``treepeek.preview`` and ``treepeek.runtime``.
"""

from __future__ import annotations

import logging

# The TUI owns the terminal; log records only go where ``--log-file`` points.
logging.getLogger(__name__).addHandler(logging.NullHandler())


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
