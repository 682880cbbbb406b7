"""Base exporter interface for version history export."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ew.storage.base import format_timestamp

if TYPE_CHECKING:
    from ew.storage import VersionRecord


class Exporter(ABC):
    """Base class for history exporters."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension without dot (e.g., 'json', 'yaml')."""
        ...

    @abstractmethod
    def export(self, records: Iterable[VersionRecord], output_path: Path) -> int:
        """Export records to file.

        Args:
            records: Version records to export, in log order.
            output_path: Path to output file.

        Returns:
            Number of records exported.
        """
        ...

    @staticmethod
    def record_to_dict(record: VersionRecord) -> dict:
        """Convert a version record to an exportable dictionary.

        Args:
            record: The version record to convert.

        Returns:
            Dictionary with all record fields; changes as prefixed lines.
        """
        return {
            "filename": record.filename,
            "version": record.version,
            "author": record.author,
            "timestamp": record.timestamp,
            "saved_at": format_timestamp(record.timestamp),
            "lines_added": record.lines_added,
            "lines_removed": record.lines_removed,
            "changes": [op.render() for op in record.changes],
        }
