"""File-backed storage for version history."""

from ew.storage.base import (
    VCS_DIR,
    RepositoryLayout,
    atomic_write,
    format_timestamp,
    now,
)
from ew.storage.history import VersionHistory
from ew.storage.index import TrackedFile, TrackingIndex
from ew.storage.records import (
    MAX_RECORD_CHANGES,
    RECORD,
    VersionLog,
    VersionRecord,
    pack_record,
    unpack_record,
)
from ew.storage.snapshots import SnapshotStore

__all__ = [
    # Base
    "VCS_DIR",
    "RepositoryLayout",
    "atomic_write",
    "format_timestamp",
    "now",
    # History
    "VersionHistory",
    # Index
    "TrackedFile",
    "TrackingIndex",
    # Records
    "MAX_RECORD_CHANGES",
    "RECORD",
    "VersionLog",
    "VersionRecord",
    "pack_record",
    "unpack_record",
    # Snapshots
    "SnapshotStore",
]
