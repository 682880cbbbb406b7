"""JSON exporter for version history."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ew.exporters.base import Exporter

if TYPE_CHECKING:
    from ew.storage import VersionRecord


class JsonExporter(Exporter):
    """Export version records to JSON format."""

    @property
    def extension(self) -> str:
        """Return json extension."""
        return "json"

    def export(self, records: Iterable[VersionRecord], output_path: Path) -> int:
        data = [self.record_to_dict(record) for record in records]
        output = {
            "versions": data,
            "count": len(data),
        }
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2, ensure_ascii=False)
        return len(data)
