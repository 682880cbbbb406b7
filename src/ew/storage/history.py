"""Version history store: version log plus per-version snapshots."""

from __future__ import annotations

import logging
from pathlib import Path

from ew.config import RepositoryConfig
from ew.diff.lcs import EditOp, count_changes, edit_script
from ew.diff.lines import read_lines
from ew.diff.patch import render_patch
from ew.exceptions import (
    HistoryMissingError,
    InvalidVersionError,
    NotTrackedError,
    PathTooLongError,
    StorageFailedError,
)
from ew.identity import current_user
from ew.storage.base import RepositoryLayout, now
from ew.storage.index import TrackingIndex
from ew.storage.records import FILENAME_SIZE, MAX_RECORD_CHANGES, VersionLog, VersionRecord
from ew.storage.snapshots import SnapshotStore

LOGGER = logging.getLogger(__name__)


class VersionHistory:
    """Saves, lists, diffs and restores versions of tracked files.

    Version numbers are derived by scanning the log on every call; there is
    no stored counter. save() writes the snapshot before appending the log
    record, so a failed append leaves an orphaned snapshot that the next
    save of the same file overwrites.
    """

    def __init__(
        self,
        layout: RepositoryLayout,
        index: TrackingIndex,
        config: RepositoryConfig | None = None,
    ) -> None:
        self.layout = layout
        self.index = index
        self.config = config or RepositoryConfig()
        self.log = VersionLog(layout.history_file)
        self.snapshots = SnapshotStore(layout.versions_dir)

    def _read(self, path: Path) -> list[str]:
        return read_lines(
            path,
            max_lines=self.config.max_lines,
            max_line_length=self.config.max_line_length,
        )

    def _label(self, path: Path) -> str:
        try:
            return path.relative_to(self.layout.root).as_posix()
        except ValueError:
            return str(path)

    def records(self) -> list[VersionRecord]:
        """Return the whole log in append order."""
        return list(self.log)

    def list_versions(self, filename: str) -> list[VersionRecord]:
        """Return records for filename, oldest first."""
        return list(self.log.for_file(filename))

    def latest_version(self, filename: str) -> int:
        """Return the highest recorded version of filename, or 0."""
        return max((record.version for record in self.log.for_file(filename)), default=0)

    def next_version(self, filename: str) -> int:
        return self.latest_version(filename) + 1

    def save(
        self,
        filename: str,
        *,
        author: str | None = None,
        timestamp: int | None = None,
    ) -> VersionRecord:
        """
        Snapshot the working copy of filename as a new version.

        Args:
            filename: Path relative to the repository root.
            author: Record author; defaults to the current user.
            timestamp: Epoch seconds; defaults to now.

        Returns: The appended record.
        Raises:
            NotTrackedError: If filename is not in the tracking index.
            FileMissingError: If the working file cannot be read.
            PathTooLongError: If filename does not fit a version record.
        """
        if not self.index.is_tracked(filename):
            raise NotTrackedError(filename)
        encoded = len(filename.encode("utf-8"))
        if encoded > FILENAME_SIZE:
            raise PathTooLongError(filename, encoded, FILENAME_SIZE)

        working = self.layout.working_path(filename)
        # Missing or binary files must fail before anything is written.
        self._read(working)

        version = self.next_version(filename)
        snapshot = self.snapshots.write(working, filename, version)
        record = VersionRecord(
            filename=filename,
            author=author if author is not None else current_user(),
            timestamp=timestamp if timestamp is not None else now(),
            version=version,
        )

        if version > 1:
            previous = self.snapshots.path_for(filename, version - 1)
            if previous.exists():
                old = self._read(previous)
            else:
                LOGGER.warning("Snapshot %s is missing; diffing against empty", previous)
                old = []
            script = edit_script(old, self._read(snapshot))
            record.lines_added, record.lines_removed = count_changes(script)
            record.changes = _bounded_changes(script)

        self.log.append(record)
        LOGGER.info("Saved version %d of %s", version, filename)
        return record

    def snapshot_path(self, filename: str, version: int) -> Path:
        """
        Return the snapshot path for a recorded version.

        Raises:
            InvalidVersionError: If version is outside [1, latest], has no
                log record, or its snapshot file is missing.
        """
        latest = 0
        recorded = False
        for record in self.log.for_file(filename):
            latest = max(latest, record.version)
            recorded = recorded or record.version == version

        if not 1 <= version <= latest or not recorded:
            raise InvalidVersionError(filename, version, latest)
        if not self.snapshots.exists(filename, version):
            LOGGER.error("Snapshot for version %d of %s is missing", version, filename)
            raise InvalidVersionError(filename, version, latest)
        return self.snapshots.path_for(filename, version)

    def diff_against_latest(self, filename: str, *, context: int | None = None) -> str:
        """
        Render the patch from the latest snapshot to the working file.

        Returns: Patch text, empty when nothing changed.
        Raises: HistoryMissingError if filename has no versions.
        """
        latest = self.latest_version(filename)
        if latest == 0:
            raise HistoryMissingError(filename)

        snapshot = self.snapshot_path(filename, latest)
        working = self.layout.working_path(filename)
        script = edit_script(self._read(snapshot), self._read(working))
        return render_patch(
            script,
            old_label=self._label(snapshot),
            new_label=filename,
            context=self.config.context_lines if context is None else context,
        )

    def diff_versions(
        self,
        filename: str,
        old_version: int,
        new_version: int,
        *,
        context: int | None = None,
    ) -> str:
        """Render the patch between two stored versions."""
        old_path = self.snapshot_path(filename, old_version)
        new_path = self.snapshot_path(filename, new_version)
        script = edit_script(self._read(old_path), self._read(new_path))
        return render_patch(
            script,
            old_label=self._label(old_path),
            new_label=self._label(new_path),
            context=self.config.context_lines if context is None else context,
        )

    def revert(self, filename: str, version: int) -> Path:
        """
        Overwrite the working file with a stored snapshot.

        The log is not modified.

        Returns: The snapshot path that was restored.
        Raises:
            NotTrackedError: If filename is not tracked.
            InvalidVersionError: If the version cannot be restored.
        """
        if not self.index.is_tracked(filename):
            raise NotTrackedError(filename)

        snapshot = self.snapshot_path(filename, version)
        working = self.layout.working_path(filename)
        try:
            working.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFailedError(working, f"cannot create parent directory: {e}") from e
        self.snapshots.restore(filename, version, working)
        LOGGER.info("Reverted %s to version %d", filename, version)
        return snapshot


def _bounded_changes(script: list[EditOp]) -> list[EditOp]:
    changes = [op for op in script if op.is_change]
    if len(changes) > MAX_RECORD_CHANGES:
        LOGGER.debug(
            "Keeping %d of %d changed lines in version record",
            MAX_RECORD_CHANGES,
            len(changes),
        )
    return changes[:MAX_RECORD_CHANGES]
