"""YAML exporter for version history."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import yaml

from ew.exporters.base import Exporter

if TYPE_CHECKING:
    from ew.storage import VersionRecord


class YamlExporter(Exporter):
    """Export version records to YAML format."""

    @property
    def extension(self) -> str:
        """Return yaml extension."""
        return "yaml"

    def export(self, records: Iterable[VersionRecord], output_path: Path) -> int:
        data = [self.record_to_dict(record) for record in records]
        output = {
            "versions": data,
            "count": len(data),
        }
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(output, f, allow_unicode=True, sort_keys=False)
        return len(data)
