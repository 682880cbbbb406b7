"""Shared pytest fixtures for ew tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ew.repository import Repository
from ew.storage import RepositoryLayout, TrackingIndex, VersionHistory


@pytest.fixture
def layout(tmp_path: Path) -> RepositoryLayout:
    """Create an empty repository layout under a temporary root."""
    layout = RepositoryLayout(tmp_path)
    layout.create()
    return layout


@pytest.fixture
def index(layout: RepositoryLayout) -> TrackingIndex:
    index = TrackingIndex(layout.index_file)
    index.create()
    return index


@pytest.fixture
def history(layout: RepositoryLayout, index: TrackingIndex) -> VersionHistory:
    return VersionHistory(layout, index)


@pytest.fixture
def repo(tmp_path: Path) -> Repository:
    """Initialize a repository in a temporary directory.

    Returns:
        Repository rooted at tmp_path with no tracked files.
    """
    repository, _ = Repository.init(tmp_path)
    return repository


@pytest.fixture
def write_lines():
    """Return a helper that writes newline-terminated lines to a path."""

    def _write(path: Path, lines: list[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write
