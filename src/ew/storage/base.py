"""Repository layout on disk and shared storage helpers."""

from __future__ import annotations

import logging
import os
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import IO, Iterator

from ew.exceptions import FileMissingError, RepositoryMissingError

LOGGER = logging.getLogger(__name__)

VCS_DIR = ".svcs"


def now() -> int:
    """Return the current time as integer epoch seconds."""
    return int(time.time())


def format_timestamp(timestamp: int) -> str:
    """Render epoch seconds in local time, ctime style."""
    return datetime.fromtimestamp(timestamp).strftime("%a %b %d %H:%M:%S %Y")


@dataclass(frozen=True)
class RepositoryLayout:
    """Paths of everything kept under the .svcs marker directory."""

    root: Path

    @property
    def vcs_dir(self) -> Path:
        return self.root / VCS_DIR

    @property
    def history_file(self) -> Path:
        return self.vcs_dir / "history"

    @property
    def versions_dir(self) -> Path:
        return self.vcs_dir / "versions"

    @property
    def index_file(self) -> Path:
        return self.vcs_dir / "index"

    @property
    def config_file(self) -> Path:
        return self.vcs_dir / "config.yaml"

    def exists(self) -> bool:
        return self.vcs_dir.is_dir()

    def require(self) -> None:
        """Raise RepositoryMissingError unless the marker directory exists."""
        if not self.exists():
            raise RepositoryMissingError(self.root)

    def create(self) -> None:
        """Create the marker directory, snapshot directory and empty log."""
        self.versions_dir.mkdir(parents=True, exist_ok=True)
        self.history_file.touch(exist_ok=True)
        LOGGER.debug("Created repository layout at %s", self.vcs_dir)

    def working_path(self, filename: str) -> Path:
        return self.root / filename

    def normalize(self, path: Path | str) -> str:
        """
        Return path relative to the repository root, in posix form.

        Relative paths are taken relative to the root.

        Raises:
            FileMissingError: If path lies outside the root or inside .svcs.
        """
        candidate = Path(os.path.normpath(self.root / path))
        root = self.root.resolve()
        try:
            relative = (candidate.parent.resolve() / candidate.name).relative_to(root)
        except ValueError:
            raise FileMissingError(path, "outside the repository") from None

        name = PurePosixPath(*relative.parts)
        if not name.parts:
            raise FileMissingError(path, "is the repository root")
        if name.parts[0] == VCS_DIR:
            raise FileMissingError(path, "inside the repository metadata")
        return str(name)


@contextmanager
def atomic_write(path: Path, mode: str = "w") -> Iterator[IO]:
    """
    Write to a temporary file beside path, then rename it over path.

    The temporary file is removed if the body raises.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        encoding = None if "b" in mode else "utf-8"
        with os.fdopen(fd, mode, encoding=encoding) as f:
            yield f
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
