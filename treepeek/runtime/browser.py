"""Directory listing and selection state for the left-hand entry list."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

PARENT_ENTRY = ".."


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_dir: bool


def read_dir_entries(directory: Path, show_hidden: bool) -> list[DirEntry]:
    """List ``directory``: ``..`` first, then directories, then files.

    Each group is sorted case-insensitively. Hidden names (leading ``.``) are
    skipped unless ``show_hidden``. Scan failures yield only ``..``.
    """
    dirs: list[DirEntry] = []
    files: list[DirEntry] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                name = child.name
                if not show_hidden and name.startswith("."):
                    continue
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                (dirs if is_dir else files).append(DirEntry(name=name, is_dir=is_dir))
    except OSError as exc:
        logger.debug("Failed to scan %s: %s", directory, exc)

    dirs.sort(key=lambda entry: (entry.name.casefold(), entry.name))
    files.sort(key=lambda entry: (entry.name.casefold(), entry.name))

    out: list[DirEntry] = []
    if directory.parent != directory:
        out.append(DirEntry(name=PARENT_ENTRY, is_dir=True))
    out.extend(dirs)
    out.extend(files)
    return out


@dataclass
class BrowserState:
    """Current directory, its entries, and the selected row."""

    cwd: Path
    show_hidden: bool = False
    entries: list[DirEntry] = field(default_factory=list)
    selected: int = 0

    def __post_init__(self) -> None:
        self.cwd = self.cwd.absolute()
        self.refresh()

    def refresh(self) -> None:
        """Re-read the directory and clamp the selection."""
        self.entries = read_dir_entries(self.cwd, self.show_hidden)
        self.selected = max(0, min(self.selected, len(self.entries) - 1))

    @property
    def selected_entry(self) -> DirEntry | None:
        if not self.entries:
            return None
        return self.entries[self.selected]

    def selected_path(self) -> Path | None:
        entry = self.selected_entry
        if entry is None:
            return None
        if entry.name == PARENT_ENTRY:
            return self.cwd.parent
        return self.cwd / entry.name

    def move(self, delta: int) -> bool:
        """Move the selection by ``delta`` rows; returns whether it changed."""
        if not self.entries:
            return False
        target = max(0, min(len(self.entries) - 1, self.selected + delta))
        if target == self.selected:
            return False
        self.selected = target
        return True

    def change_directory(self, directory: Path, select_name: str | None = None) -> None:
        self.cwd = directory
        self.selected = 0
        self.refresh()
        if select_name is not None:
            self.select_name(select_name)

    def select_name(self, name: str) -> bool:
        for idx, entry in enumerate(self.entries):
            if entry.name == name:
                self.selected = idx
                return True
        return False

    def go_parent(self) -> bool:
        """Move to the parent directory, keeping the directory just left selected."""
        parent = self.cwd.parent
        if parent == self.cwd:
            return False
        self.change_directory(parent, select_name=self.cwd.name)
        return True

    def enter(self) -> Path | None:
        """Open the selected entry.

        Directories (and ``..``) become the new ``cwd`` and ``None`` is
        returned. For regular files the file's absolute path is returned so the
        caller can preview it; other file types (FIFOs, devices) give ``None``.
        """
        entry = self.selected_entry
        if entry is None:
            return None
        if entry.name == PARENT_ENTRY:
            self.go_parent()
            return None
        target = self.cwd / entry.name
        if entry.is_dir:
            if target.is_dir():
                self.change_directory(target)
            return None
        if not target.is_file():
            return None
        return target

    def toggle_hidden(self) -> None:
        entry = self.selected_entry
        self.show_hidden = not self.show_hidden
        self.refresh()
        if entry is not None:
            self.select_name(entry.name)
