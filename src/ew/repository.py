"""High-level repository operations used by the command line."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ew.config import RepositoryConfig
from ew.exceptions import EwError, FileMissingError, HistoryMissingError, NotTrackedError
from ew.exporters import get_exporter
from ew.storage import (
    VCS_DIR,
    RepositoryLayout,
    TrackingIndex,
    VersionHistory,
    VersionRecord,
)

LOGGER = logging.getLogger("ew.repository")


@dataclass
class FileStatus:
    path: str
    state: Literal["unchanged", "modified", "deleted"]


@dataclass
class FoundFile:
    path: str
    tracked: bool


class Repository:
    """A working tree with a .svcs directory at its root."""

    def __init__(self, root: Path | str, config: RepositoryConfig | None = None) -> None:
        self.layout = RepositoryLayout(Path(root))
        self.config = config or RepositoryConfig.load(self.layout.config_file)
        self.index = TrackingIndex(self.layout.index_file)
        self.history = VersionHistory(self.layout, self.index, self.config)

    @property
    def root(self) -> Path:
        return self.layout.root

    @classmethod
    def open(cls, root: Path | str = ".") -> "Repository":
        """
        Open an existing repository.

        Raises: RepositoryMissingError if root has no .svcs directory.
        """
        layout = RepositoryLayout(Path(root))
        layout.require()
        return cls(root)

    @classmethod
    def init(cls, root: Path | str = ".", *, add_all: bool = False) -> tuple["Repository", bool]:
        """
        Create a repository at root.

        With add_all, every regular file directly under root is tracked and
        saved as version 1.

        Returns: (repository, created); created is False if it already existed.
        """
        layout = RepositoryLayout(Path(root))
        if layout.exists():
            LOGGER.info("Repository already exists at %s", layout.vcs_dir)
            return cls(root), False

        layout.create()
        RepositoryConfig().save(layout.config_file)
        repo = cls(root)
        repo.index.create()

        if add_all:
            for entry in sorted(layout.root.iterdir()):
                if entry.name == VCS_DIR or not entry.is_file():
                    continue
                try:
                    repo.track(entry.name)
                except EwError as e:
                    LOGGER.warning("Skipping %s: %s", entry.name, e)
        LOGGER.info("Initialized repository at %s", layout.vcs_dir)
        return repo, True

    def _mtime(self, filename: str) -> float:
        return self.layout.working_path(filename).stat().st_mtime

    def track(self, path: Path | str) -> VersionRecord | None:
        """
        Track a file and save its first version.

        The index entry is removed again if the first save fails.

        Returns: The saved record, or None if the file was already tracked.
        Raises: FileMissingError if path is missing or a directory.
        """
        filename = self.layout.normalize(path)
        working = self.layout.working_path(filename)
        if working.is_dir():
            raise FileMissingError(filename, "cannot track a directory")
        if not working.is_file():
            raise FileMissingError(filename)

        if not self.index.track(filename, self._mtime(filename)):
            LOGGER.warning("Already tracking: %s", filename)
            return None
        try:
            record = self.history.save(filename)
        except Exception:
            self.index.untrack(filename)
            raise
        LOGGER.info("Now tracking: %s", filename)
        return record

    def untrack(self, path: Path | str) -> None:
        """Stop tracking a file. History and snapshots are kept."""
        filename = self.layout.normalize(path)
        if not self.index.untrack(filename):
            raise NotTrackedError(filename)
        LOGGER.info("No longer tracking: %s", filename)

    def save(
        self,
        path: Path | str,
        *,
        author: str | None = None,
        timestamp: int | None = None,
    ) -> VersionRecord:
        filename = self.layout.normalize(path)
        if not self.layout.working_path(filename).is_file():
            raise FileMissingError(filename)
        record = self.history.save(filename, author=author, timestamp=timestamp)
        self.index.touch(filename, self._mtime(filename))
        return record

    def diff(self, path: Path | str, *, context: int | None = None) -> str:
        filename = self.layout.normalize(path)
        if not self.layout.working_path(filename).is_file():
            raise FileMissingError(filename)
        return self.history.diff_against_latest(filename, context=context)

    def revert(self, path: Path | str, version: int | None = None) -> int:
        """
        Restore a saved version over the working file.

        Args:
            path: File to restore.
            version: Version to restore; defaults to the latest.

        Returns: The restored version number.
        """
        filename = self.layout.normalize(path)
        if version is None:
            version = self.history.latest_version(filename)
        self.history.revert(filename, version)
        self.index.touch(filename, self._mtime(filename))
        return version

    def history_records(self, path: Path | str | None = None) -> list[VersionRecord]:
        """
        Return log records, for one file or for the whole repository.

        Raises: HistoryMissingError if the version log file is absent.
        """
        if not self.history.log.exists():
            raise HistoryMissingError()
        if path is None:
            return self.history.records()
        return self.history.list_versions(self.layout.normalize(path))

    def export_history(
        self,
        output_path: Path | str,
        fmt: str = "json",
        path: Path | str | None = None,
    ) -> int:
        """Write history records to output_path. Returns the record count."""
        exporter = get_exporter(fmt)
        count = exporter.export(self.history_records(path), Path(output_path))
        LOGGER.info("Exported %d records to %s", count, output_path)
        return count

    def status(self) -> list[FileStatus]:
        """Report each tracked file as unchanged, modified or deleted."""
        results = []
        for entry in self.index.entries():
            if not entry.tracked:
                continue
            working = self.layout.working_path(entry.path)
            if not working.is_file():
                results.append(FileStatus(entry.path, "deleted"))
            elif working.stat().st_mtime > entry.last_modified:
                results.append(FileStatus(entry.path, "modified"))
            else:
                results.append(FileStatus(entry.path, "unchanged"))
        return results

    def find(self) -> list[FoundFile]:
        """List every regular file under root, skipping .svcs."""
        tracked = set(self.index.tracked_paths())
        found = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d != VCS_DIR)
            for name in sorted(filenames):
                relative = Path(dirpath, name).relative_to(self.root).as_posix()
                found.append(FoundFile(relative, relative in tracked))
        return found
