"""Bounded line reader used by the diff engine and history store."""

from __future__ import annotations

import logging
from itertools import islice
from pathlib import Path

from ew.exceptions import BinaryFileError, FileMissingError

LOGGER = logging.getLogger(__name__)

MAX_LINES = 1000
MAX_LINE_LENGTH = 256

# Bytes inspected for NUL when deciding whether a file is binary.
_BINARY_PROBE = 8192


def exists(path: Path | str) -> bool:
    """Return True if path names an existing regular file."""
    return Path(path).is_file()


def read_lines(
    path: Path | str,
    *,
    max_lines: int = MAX_LINES,
    max_line_length: int = MAX_LINE_LENGTH,
) -> list[str]:
    """
    Read a text file into a bounded list of lines.

    Lines longer than max_line_length characters are truncated and lines
    past max_lines are dropped. Neither case is an error.

    Raises:
        FileMissingError: If the file cannot be opened.
        BinaryFileError: If the file contains NUL bytes.
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            probe = f.read(_BINARY_PROBE)
        if b"\0" in probe:
            raise BinaryFileError(path)

        with open(path, encoding="utf-8", errors="replace") as f:
            lines = []
            for raw in islice(f, max_lines):
                line = raw[:-1] if raw.endswith("\n") else raw
                if len(line) > max_line_length:
                    LOGGER.debug(
                        "Truncating line %d of %s (%d chars)",
                        len(lines) + 1,
                        path,
                        len(line),
                    )
                    line = line[:max_line_length]
                lines.append(line)
            if f.readline():
                LOGGER.debug("%s exceeds %d lines; remainder ignored", path, max_lines)
    except (FileNotFoundError, IsADirectoryError, PermissionError) as e:
        raise FileMissingError(path, e.strerror or "cannot be read") from e
    return lines
