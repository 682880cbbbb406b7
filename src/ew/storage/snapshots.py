"""Full-copy snapshot store addressed by (filename, version)."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from urllib.parse import quote

from ew.exceptions import StorageFailedError

LOGGER = logging.getLogger(__name__)


class SnapshotStore:
    """One file per saved version, flat under the versions directory.

    The filename is percent-encoded so nested paths never create
    subdirectories and every (filename, version) pair maps to its own file.
    """

    def __init__(self, versions_dir: Path | str) -> None:
        self.versions_dir = Path(versions_dir)

    def path_for(self, filename: str, version: int) -> Path:
        """Return the snapshot path, e.g. versions/a.txt.3 or versions/src%2Fa.txt.3."""
        return self.versions_dir / f"{quote(filename, safe='')}.{version}"

    def exists(self, filename: str, version: int) -> bool:
        return self.path_for(filename, version).is_file()

    def write(self, source: Path, filename: str, version: int) -> Path:
        """
        Copy source into the store as (filename, version).

        Returns: Path of the new snapshot.
        Raises: StorageFailedError if the copy fails.
        """
        target = self.path_for(filename, version)
        if target.exists():
            LOGGER.warning(
                "Overwriting orphaned snapshot %s (no log record)", target
            )
        try:
            self.versions_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as e:
            raise StorageFailedError(target, f"cannot write snapshot: {e}") from e
        LOGGER.debug("Wrote snapshot %s", target)
        return target

    def restore(self, filename: str, version: int, destination: Path) -> None:
        """Copy a snapshot's bytes over destination."""
        try:
            shutil.copyfile(self.path_for(filename, version), destination)
        except OSError as e:
            raise StorageFailedError(destination, f"cannot restore snapshot: {e}") from e
