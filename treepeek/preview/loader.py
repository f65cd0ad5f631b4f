"""Bounded file loading with binary classification.

``load`` reads at most ``MAX_PREVIEW_BYTES`` of a file, classifies the prefix
as text or binary, and decodes text as strict UTF-8. Failures never raise:
I/O errors become ``ReadError`` and undecodable bytes become ``BinaryContent``.
"""

from __future__ import annotations

import codecs
import logging
import os
import stat as stat_mod
from dataclasses import dataclass
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

MAX_PREVIEW_BYTES = 512 * 1024
BINARY_THRESHOLD_DIVISOR = 4
NOT_REGULAR_FILE_MESSAGE = "Not a regular file"

# ASCII graphic bytes, common whitespace, and bytes >= 0x80 so non-ASCII UTF-8
# text (CJK, accents) stays text. Invalid sequences fail the strict decode.
_PRINTABLE_BYTES = frozenset(range(0x21, 0x7F)) | frozenset(b" \n\r\t") | frozenset(range(0x80, 0x100))
_NON_PRINTABLE_BYTES = bytes(b for b in range(256) if b not in _PRINTABLE_BYTES)


@dataclass(frozen=True)
class FileHandle:
    """Identity of a loaded file: path, size, and modification stamp."""

    path: Path
    size: int
    mtime_ns: int

    @classmethod
    def from_stat(cls, path: Path, stat: os.stat_result) -> FileHandle:
        return cls(path=path, size=int(stat.st_size), mtime_ns=int(stat.st_mtime_ns))


@dataclass(frozen=True)
class TextContent:
    text: str
    truncated: bool
    handle: FileHandle
    byte_count: int


@dataclass(frozen=True)
class BinaryContent:
    truncated: bool
    handle: FileHandle
    byte_count: int


@dataclass(frozen=True)
class ReadError:
    path: Path
    message: str


LoadedContent = Union[TextContent, BinaryContent, ReadError]


def non_printable_count(data: bytes) -> int:
    """Count bytes outside the printable/whitespace set."""
    if not data:
        return 0
    return len(data) - len(data.translate(None, _NON_PRINTABLE_BYTES))


def looks_binary(data: bytes) -> bool:
    """Return whether strictly more than a quarter of ``data`` is non-printable."""
    return non_printable_count(data) * BINARY_THRESHOLD_DIVISOR > len(data)


def decode_prefix(data: bytes, truncated: bool) -> str | None:
    """Strictly decode UTF-8, returning ``None`` on invalid input.

    For truncated reads an incomplete multi-byte sequence cut by the cap is
    dropped instead of counting as a decode failure.
    """
    decoder = codecs.getincrementaldecoder("utf-8-sig")(errors="strict")
    try:
        return decoder.decode(data, final=not truncated)
    except UnicodeDecodeError:
        return None


def _describe_os_error(exc: OSError) -> str:
    if exc.strerror:
        return exc.strerror
    return str(exc) or exc.__class__.__name__


def load(path: Path, max_bytes: int = MAX_PREVIEW_BYTES) -> LoadedContent:
    """Load and classify the first ``max_bytes`` of ``path``.

    Resolution order:
    1. open/stat/read failure, or not a regular file -> ``ReadError``
    2. more than 25% non-printable bytes in the prefix -> ``BinaryContent``
    3. strict UTF-8 decode failure -> ``BinaryContent``
    4. otherwise ``TextContent``
    """
    try:
        # O_NONBLOCK keeps FIFOs from stalling the open; they are rejected below.
        fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
        with os.fdopen(fd, "rb") as handle:
            stat = os.fstat(handle.fileno())
            if not stat_mod.S_ISREG(stat.st_mode):
                logger.debug("Refusing to preview non-regular file %s", path)
                return ReadError(path=path, message=NOT_REGULAR_FILE_MESSAGE)
            data = handle.read(max_bytes)
            # Pseudo files (procfs) report size 0; read one more byte.
            truncated = stat.st_size > max_bytes or (
                len(data) == max_bytes and bool(handle.read(1))
            )
    except OSError as exc:
        logger.debug("Failed to read %s: %s", path, exc)
        return ReadError(path=path, message=_describe_os_error(exc))

    file_handle = FileHandle.from_stat(path, stat)
    if looks_binary(data):
        logger.debug("Classified %s as binary (non-printable ratio)", path)
        return BinaryContent(truncated=truncated, handle=file_handle, byte_count=len(data))

    text = decode_prefix(data, truncated)
    if text is None:
        logger.debug("Classified %s as binary (invalid UTF-8)", path)
        return BinaryContent(truncated=truncated, handle=file_handle, byte_count=len(data))

    return TextContent(text=text, truncated=truncated, handle=file_handle, byte_count=len(data))


def stat_handle(path: Path) -> FileHandle | None:
    """Return the current ``FileHandle`` for ``path`` or ``None`` on stat failure."""
    try:
        return FileHandle.from_stat(path, path.stat())
    except OSError:
        return None


class ContentLoader:
    """Loader facade with an adjustable cap, consumed by ``PreviewPipeline``."""

    def __init__(self, max_bytes: int = MAX_PREVIEW_BYTES) -> None:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be >= 1")
        self.max_bytes = max_bytes

    def load(self, path: Path) -> LoadedContent:
        return load(path, self.max_bytes)

    def stat(self, path: Path) -> FileHandle | None:
        return stat_handle(path)
