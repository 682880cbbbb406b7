"""Tracking index: which paths participate in versioning."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from ew.exceptions import CorruptIndexError
from ew.storage.base import atomic_write

LOGGER = logging.getLogger(__name__)


@dataclass
class TrackedFile:
    """Index entry for one path."""

    path: str
    tracked: bool
    last_modified: float


class TrackingIndex:
    """JSON-backed list of tracked paths.

    Every write replaces the whole file through a temporary file and an
    atomic rename.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def create(self) -> None:
        """Write an empty index if none exists."""
        if not self.path.exists():
            self._write([])

    def entries(self) -> list[TrackedFile]:
        """
        Load all index entries in insertion order.

        Raises: CorruptIndexError if the file is not a valid index.
        """
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8", errors="replace")
        if not text.strip():
            return []
        try:
            data = json.loads(text)
            return [
                TrackedFile(
                    path=str(item["path"]),
                    tracked=bool(item.get("tracked", True)),
                    last_modified=float(item.get("last_modified", 0)),
                )
                for item in data.get("files", [])
            ]
        except json.JSONDecodeError as e:
            raise CorruptIndexError(self.path, f"invalid JSON: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CorruptIndexError(self.path, f"unexpected structure: {e!r}") from e

    def get(self, path: str) -> TrackedFile | None:
        for entry in self.entries():
            if entry.path == path:
                return entry
        return None

    def is_tracked(self, path: str) -> bool:
        entry = self.get(path)
        return entry is not None and entry.tracked

    def tracked_paths(self) -> list[str]:
        return [entry.path for entry in self.entries() if entry.tracked]

    def track(self, path: str, last_modified: float) -> bool:
        """
        Start tracking path.

        Returns: False if the path was already tracked.
        """
        entries = self.entries()
        for entry in entries:
            if entry.path == path:
                if entry.tracked:
                    return False
                entry.tracked = True
                entry.last_modified = last_modified
                break
        else:
            entries.append(TrackedFile(path, True, last_modified))
        self._write(entries)
        return True

    def untrack(self, path: str) -> bool:
        """
        Remove path from the index.

        Returns: False if the path was not tracked.
        """
        entries = self.entries()
        remaining = [entry for entry in entries if entry.path != path]
        if len(remaining) == len(entries):
            return False
        self._write(remaining)
        return True

    def touch(self, path: str, last_modified: float) -> None:
        """Record a new last-known modification time for path."""
        entries = self.entries()
        for entry in entries:
            if entry.path == path:
                entry.last_modified = last_modified
                self._write(entries)
                return
        LOGGER.debug("touch: %s not in index", path)

    def _write(self, entries: list[TrackedFile]) -> None:
        payload = {"files": [asdict(entry) for entry in entries]}
        with atomic_write(self.path) as f:
            json.dump(payload, f, indent=2)
