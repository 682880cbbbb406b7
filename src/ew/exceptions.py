"""Error kinds reported by ew commands."""

from __future__ import annotations

from pathlib import Path


class EwError(Exception):
    """Base exception for versioning operations."""

    kind = "Error"


class RepositoryMissingError(EwError):
    """No .svcs directory at the repository root."""

    kind = "RepositoryMissing"

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        super().__init__(f"No repository found in {self.root}")


class HistoryMissingError(EwError):
    """File has no saved versions."""

    kind = "HistoryMissing"

    def __init__(self, filename: str | None = None) -> None:
        self.filename = filename
        if filename is None:
            super().__init__("No history found")
        else:
            super().__init__(f"No history found for {filename}")


class FileMissingError(EwError):
    """File does not exist or cannot be read."""

    kind = "FileMissing"

    def __init__(self, path: Path | str, reason: str = "file not found") -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class InvalidVersionError(EwError):
    """Requested version is out of range or has no snapshot."""

    kind = "InvalidVersion"

    def __init__(self, filename: str, version: int, latest: int) -> None:
        self.filename = filename
        self.version = version
        self.latest = latest
        if latest < 1:
            message = f"No versions found for {filename}"
        elif version < 1 or version > latest:
            message = (
                f"Invalid version {version} for {filename}. "
                f"Available versions: 1 to {latest}"
            )
        else:
            message = f"Version {version} does not exist for {filename}"
        super().__init__(message)


class NotTrackedError(EwError):
    """File is not registered in the tracking index."""

    kind = "NotTracked"

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(
            f"File is not tracked. Use 'track' command first: {filename}"
        )


class UnknownCommandError(EwError):
    """Command name not recognized."""

    kind = "UnknownCommand"

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unknown command: {command}")


class BinaryFileError(EwError):
    """Binary content cannot be diffed."""

    kind = "BinaryFile"

    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(f"Binary files are not supported: {self.path}")


class PathTooLongError(EwError):
    """Filename does not fit the fixed-size version record."""

    kind = "PathTooLong"

    def __init__(self, filename: str, size: int, limit: int) -> None:
        self.filename = filename
        self.size = size
        self.limit = limit
        super().__init__(
            f"Filename too long for version log ({size} > {limit} bytes): {filename}"
        )


class InvalidConfigError(EwError):
    """Repository configuration cannot be parsed or holds a bad value."""

    kind = "InvalidConfig"

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class CorruptIndexError(EwError):
    """Tracking index exists but cannot be parsed."""

    kind = "CorruptIndex"

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Tracking index {self.path} is unreadable: {reason}")


class StorageFailedError(EwError):
    """Copying to or from the snapshot store failed."""

    kind = "StorageFailed"

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")
