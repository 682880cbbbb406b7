"""Fixed-layout version records and the append-only version log."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from ew.diff.lcs import EditOp, OpKind

LOGGER = logging.getLogger(__name__)

FILENAME_SIZE = 1024
AUTHOR_SIZE = 256
CHANGE_LINE_SIZE = 256
MAX_RECORD_CHANGES = 100

# filename, author, timestamp, version, lines_added, lines_removed,
# num_changes, change types, change lines
RECORD = struct.Struct(
    f"<{FILENAME_SIZE}s{AUTHOR_SIZE}sqiiii"
    f"{MAX_RECORD_CHANGES}s{MAX_RECORD_CHANGES * CHANGE_LINE_SIZE}s"
)


@dataclass
class VersionRecord:
    """Metadata for one saved version of a file.

    changes holds only insert/delete operations and is bounded by
    MAX_RECORD_CHANGES. It is kept for display and never used to rebuild
    file content.
    """

    filename: str
    author: str
    timestamp: int
    version: int
    lines_added: int = 0
    lines_removed: int = 0
    changes: list[EditOp] = field(default_factory=list)


def _encode(text: str, size: int) -> bytes:
    """Encode to UTF-8, cutting on a character boundary to fit size."""
    data = text.encode("utf-8")
    if len(data) > size:
        data = data[:size].decode("utf-8", "ignore").encode("utf-8")
    return data


def _decode(data: bytes) -> str:
    return data.rstrip(b"\0").decode("utf-8", "replace")


def pack_record(record: VersionRecord) -> bytes:
    """
    Serialize a record to its fixed-size binary form.

    Raises:
        ValueError: If the filename does not fit the filename field.
    """
    filename = record.filename.encode("utf-8")
    if len(filename) > FILENAME_SIZE:
        raise ValueError(
            f"Filename too long for version log ({len(filename)} > {FILENAME_SIZE} bytes)"
        )

    changes = [op for op in record.changes if op.is_change][:MAX_RECORD_CHANGES]
    kinds = "".join(op.kind.value for op in changes).encode("ascii")
    lines = b"".join(
        _encode(op.line, CHANGE_LINE_SIZE).ljust(CHANGE_LINE_SIZE, b"\0")
        for op in changes
    )
    return RECORD.pack(
        filename,
        _encode(record.author, AUTHOR_SIZE),
        record.timestamp,
        record.version,
        record.lines_added,
        record.lines_removed,
        len(changes),
        kinds,
        lines,
    )


def unpack_record(data: bytes) -> VersionRecord:
    """Deserialize one fixed-size record."""
    (
        filename,
        author,
        timestamp,
        version,
        lines_added,
        lines_removed,
        num_changes,
        kinds,
        lines,
    ) = RECORD.unpack(data)

    changes = []
    for k in range(min(num_changes, MAX_RECORD_CHANGES)):
        start = k * CHANGE_LINE_SIZE
        changes.append(
            EditOp(
                OpKind(chr(kinds[k])),
                _decode(lines[start : start + CHANGE_LINE_SIZE]),
            )
        )

    return VersionRecord(
        filename=_decode(filename),
        author=_decode(author),
        timestamp=timestamp,
        version=version,
        lines_added=lines_added,
        lines_removed=lines_removed,
        changes=changes,
    )


class VersionLog:
    """Append-only stream of fixed-size version records."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def append(self, record: VersionRecord) -> None:
        """Append one record. Existing records are never rewritten."""
        data = pack_record(record)
        with open(self.path, "ab") as f:
            f.write(data)
        LOGGER.debug(
            "Appended version %d of %s to %s", record.version, record.filename, self.path
        )

    def __iter__(self) -> Iterator[VersionRecord]:
        """Yield records in log order. A trailing partial record is skipped."""
        if not self.path.exists():
            return
        with open(self.path, "rb") as f:
            while True:
                data = f.read(RECORD.size)
                if not data:
                    break
                if len(data) < RECORD.size:
                    LOGGER.warning(
                        "Ignoring partial record (%d bytes) at end of %s",
                        len(data),
                        self.path,
                    )
                    break
                yield unpack_record(data)

    def for_file(self, filename: str) -> Iterator[VersionRecord]:
        """Yield records for one filename in log order."""
        return (record for record in self if record.filename == filename)
