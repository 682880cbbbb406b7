"""History exporters for JSON and YAML formats."""

from ew.exporters.base import Exporter
from ew.exporters.json_exporter import JsonExporter
from ew.exporters.yaml_exporter import YamlExporter

EXPORTERS: dict[str, type[Exporter]] = {
    "json": JsonExporter,
    "yaml": YamlExporter,
}


def get_exporter(fmt: str) -> Exporter:
    """Return an exporter instance for a format name."""
    try:
        return EXPORTERS[fmt]()
    except KeyError:
        raise ValueError(f"Unknown export format: {fmt}") from None


__all__ = [
    "EXPORTERS",
    "Exporter",
    "JsonExporter",
    "YamlExporter",
    "get_exporter",
]
