"""Shared helpers for the file readers and writers."""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import IO

# Strand values written by BED, GFF3, and R/Bioconductor tables
_STRAND_VALUES = {
    "1": 1,
    "+1": 1,
    "+": 1,
    "-1": -1,
    "-": -1,
    "2": -1,
    "0": 0,
    ".": 0,
    "*": 0,
}


def parse_strand(value: str | int | None) -> int:
    """Convert a strand value to 1, -1, or 0.

    Args:
        value: Strand as written in a file (``+``, ``-``, ``.``, ``1``, ``-1``,
            ``0``, ``2`` or ``*``).

    Returns:
        Integer strand. Unrecognized values are unstranded (0).
    """
    if value is None:
        return 0
    if isinstance(value, int):
        return (value > 0) - (value < 0)
    return _STRAND_VALUES.get(value.strip(), 0)


def is_gzipped(path: Path | str) -> bool:
    """Check whether a path names a gzip file."""
    return Path(path).suffix.lower() == ".gz"


def base_suffix(path: Path | str) -> str:
    """Get the lowercase file suffix, ignoring a trailing ``.gz``."""
    path = Path(path)
    if is_gzipped(path):
        path = path.with_suffix("")
    return path.suffix.lower()


def open_text(path: Path | str, mode: str = "r") -> IO[str]:
    """Open a plain or gzip-compressed text file.

    Args:
        path: File path. Compression is chosen by the ``.gz`` suffix.
        mode: ``"r"`` or ``"w"``.

    Returns:
        Text file handle.
    """
    if is_gzipped(path):
        return gzip.open(path, mode + "t", newline="")
    return open(path, mode, newline="")
