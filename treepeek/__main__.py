"""Module entrypoint for ``python -m treepeek``.

All argument parsing and runtime setup happen in ``treepeek.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
