# File: connectvue/utils.py
"""
protoc-gen-connect-vue - Utility Functions & Helpers
=====================================================
Small string, path and file I/O helpers shared across the generation
pipeline.

- Name helpers are pure and cached with ``@lru_cache`` since the same
  method / file names are converted repeatedly while building a view model.
- Path helpers always operate on POSIX paths: proto file names and the
  emitted TypeScript import specifiers are ``/``-separated on every platform.
- File writes go through a temp file + rename so a crash never leaves a
  half-written output file behind.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import posixpath
import tempfile
import time
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.utils")


# ---------------------------------------------------------------------------
# Cached name helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def lower_first(name: str) -> str:
    """
    Lower-case the first character only, leaving the rest untouched.

    Examples:
        >>> lower_first("ListTickets")
        'listTickets'
        >>> lower_first("HTTPStatus")
        'hTTPStatus'
    """
    if not name:
        return ""
    return name[0].lower() + name[1:]


@functools.lru_cache(maxsize=None)
def strip_suffix(name: str, suffix: str) -> str:
    """Remove *suffix* from the end of *name* if present."""
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return name


# ---------------------------------------------------------------------------
# POSIX path helpers
# ---------------------------------------------------------------------------


def relative_dir(from_file: str, to_file: str) -> str:
    """
    Relative directory path from the directory of *from_file* to the
    directory of *to_file*.

    Returns ``""`` when both files live in the same directory.

    Examples:
        >>> relative_dir("tickets/v1/service.proto", "common/v1/page.proto")
        '../../common/v1'
        >>> relative_dir("a.proto", "b.proto")
        ''
    """
    start: str = posixpath.dirname(from_file) or "."
    target: str = posixpath.dirname(to_file) or "."
    rel: str = posixpath.relpath(target, start)
    return "" if rel == "." else rel


def join_import_path(*parts: str) -> str:
    """Join POSIX path segments, skipping empty ones."""
    return posixpath.join(*[p for p in parts if p])


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path* as UTF-8.

    When *atomic* is True, writes to a temporary file in the same directory
    first then renames it over the target.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for the generation steps.

    Usage:
        with Timer("render") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__ = [
    "Timer",
    "count_lines",
    "ensure_directory",
    "join_import_path",
    "lower_first",
    "read_file",
    "relative_dir",
    "sha256_hex",
    "strip_suffix",
    "write_file",
]
