"""Per-repository configuration stored in .svcs/config.yaml."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

from ew.diff.lines import MAX_LINE_LENGTH, MAX_LINES
from ew.diff.patch import DEFAULT_CONTEXT
from ew.exceptions import InvalidConfigError

LOGGER = logging.getLogger(__name__)


MINIMUMS = {"context_lines": 0, "max_lines": 1, "max_line_length": 1}


@dataclass
class RepositoryConfig:
    context_lines: int = DEFAULT_CONTEXT
    max_lines: int = MAX_LINES
    max_line_length: int = MAX_LINE_LENGTH

    @classmethod
    def load(cls, path: Path | str) -> "RepositoryConfig":
        """
        Load config from YAML; a missing file or missing keys use defaults.

        Raises:
            InvalidConfigError: If the file is not a YAML mapping or a value
                is not an integer at or above its minimum.
        """
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise InvalidConfigError(path, f"invalid YAML: {e}") from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidConfigError(path, "expected a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            LOGGER.debug("Ignoring unknown config keys: %s", ", ".join(sorted(map(str, unknown))))

        values = {}
        for key in sorted(known & set(data)):
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(path, f"{key} must be an integer, got {value!r}")
            if value < MINIMUMS[key]:
                raise InvalidConfigError(path, f"{key} must be >= {MINIMUMS[key]}, got {value}")
            values[key] = value
        return cls(**values)

    def save(self, path: Path | str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(asdict(self), f, sort_keys=False)
