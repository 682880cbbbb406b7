"""Tests for the version history store."""

from pathlib import Path

import pytest

from ew.config import RepositoryConfig
from ew.diff import EditOp, OpKind, edit_script, read_lines
from ew.exceptions import (
    FileMissingError,
    HistoryMissingError,
    InvalidVersionError,
    NotTrackedError,
    PathTooLongError,
    StorageFailedError,
)
from ew.storage import (
    MAX_RECORD_CHANGES,
    RepositoryLayout,
    TrackingIndex,
    VersionHistory,
    VersionRecord,
)


@pytest.fixture
def tracked(layout: RepositoryLayout, index: TrackingIndex, write_lines):
    """Create and track a.txt; returns its working path."""
    path = write_lines(layout.root / "a.txt", ["one", "two", "three"])
    index.track("a.txt", 0)
    return path


class TestVersionNumbering:
    def test_empty_history(self, history: VersionHistory):
        assert history.latest_version("a.txt") == 0
        assert history.next_version("a.txt") == 1
        assert history.list_versions("a.txt") == []

    def test_monotonic_versions(self, history: VersionHistory, tracked: Path, write_lines):
        versions = []
        for k in range(5):
            write_lines(tracked, [f"revision {k}"])
            versions.append(history.save("a.txt").version)
        assert versions == [1, 2, 3, 4, 5]
        assert history.latest_version("a.txt") == 5

    def test_versions_are_per_file(
        self, history: VersionHistory, index: TrackingIndex, tracked: Path, write_lines
    ):
        write_lines(tracked.parent / "b.txt", ["b"])
        index.track("b.txt", 0)
        history.save("a.txt")
        history.save("a.txt")
        assert history.save("b.txt").version == 1
        assert history.next_version("a.txt") == 3

    def test_next_version_ignores_missing_numbers(self, history: VersionHistory):
        history.log.append(VersionRecord("a.txt", "x", 0, 1))
        history.log.append(VersionRecord("a.txt", "x", 0, 3))
        assert history.latest_version("a.txt") == 3
        assert history.next_version("a.txt") == 4


class TestSave:
    def test_untracked_rejected(self, history: VersionHistory, layout, write_lines):
        write_lines(layout.root / "loose.txt", ["x"])
        with pytest.raises(NotTrackedError):
            history.save("loose.txt")

    def test_missing_file_rejected(self, history: VersionHistory, index: TrackingIndex):
        index.track("gone.txt", 0)
        with pytest.raises(FileMissingError):
            history.save("gone.txt")
        assert history.latest_version("gone.txt") == 0

    def test_three_saves_scenario(self, history: VersionHistory, tracked: Path, write_lines):
        history.save("a.txt")
        write_lines(tracked, ["one", "TWO", "three", "four"])
        history.save("a.txt")
        write_lines(tracked, ["one", "TWO", "four"])
        history.save("a.txt")

        records = history.list_versions("a.txt")
        assert [r.version for r in records] == [1, 2, 3]
        assert records[0].lines_added == 0
        assert records[0].lines_removed == 0
        assert records[0].changes == []

    def test_change_summary(self, history: VersionHistory, tracked: Path, write_lines):
        history.save("a.txt")
        write_lines(tracked, ["one", "TWO", "three", "four"])
        record = history.save("a.txt")

        assert record.lines_added == 2
        assert record.lines_removed == 1
        assert record.changes == [
            EditOp(OpKind.DELETE, "two"),
            EditOp(OpKind.INSERT, "TWO"),
            EditOp(OpKind.INSERT, "four"),
        ]
        assert history.list_versions("a.txt")[1] == record

    def test_snapshot_is_full_copy(self, history: VersionHistory, tracked: Path):
        history.save("a.txt")
        snapshot = history.snapshot_path("a.txt", 1)
        assert snapshot.name == "a.txt.1"
        assert snapshot.read_bytes() == tracked.read_bytes()

    def test_snapshots_survive_later_edits(
        self, history: VersionHistory, tracked: Path, write_lines
    ):
        history.save("a.txt")
        write_lines(tracked, ["changed"])
        history.save("a.txt")
        assert read_lines(history.snapshot_path("a.txt", 1)) == ["one", "two", "three"]
        assert read_lines(history.snapshot_path("a.txt", 2)) == ["changed"]

    def test_injected_author_and_timestamp(self, history: VersionHistory, tracked: Path):
        record = history.save("a.txt", author="bob", timestamp=1234)
        assert record.author == "bob"
        assert record.timestamp == 1234
        assert history.list_versions("a.txt")[0].author == "bob"

    def test_default_author_from_environment(
        self, history: VersionHistory, tracked: Path, monkeypatch
    ):
        monkeypatch.setenv("USER", "carol")
        assert history.save("a.txt").author == "carol"

    def test_author_falls_back_to_unknown(
        self, history: VersionHistory, tracked: Path, monkeypatch
    ):
        monkeypatch.delenv("USER", raising=False)
        monkeypatch.delenv("USERNAME", raising=False)
        assert history.save("a.txt").author == "unknown"

    def test_embedded_changes_bounded(
        self, history: VersionHistory, tracked: Path, write_lines
    ):
        write_lines(tracked, [])
        history.save("a.txt")
        write_lines(tracked, [f"line {k}" for k in range(MAX_RECORD_CHANGES + 50)])
        record = history.save("a.txt")

        stored = history.list_versions("a.txt")[-1]
        assert record.lines_added == MAX_RECORD_CHANGES + 50
        assert stored.lines_added == MAX_RECORD_CHANGES + 50
        assert len(stored.changes) == MAX_RECORD_CHANGES

    def test_orphaned_snapshot_overwritten(
        self, history: VersionHistory, layout: RepositoryLayout, tracked: Path
    ):
        orphan = layout.versions_dir / "a.txt.1"
        orphan.write_text("left over from an interrupted save\n")
        record = history.save("a.txt")
        assert record.version == 1
        assert orphan.read_bytes() == tracked.read_bytes()

    def test_nested_path(self, history: VersionHistory, layout, index, write_lines):
        write_lines(layout.root / "src" / "mod.py", ["pass"])
        index.track("src/mod.py", 0)
        history.save("src/mod.py")
        assert history.snapshot_path("src/mod.py", 1) == layout.versions_dir / "src%2Fmod.py.1"
        assert [p.name for p in layout.versions_dir.iterdir()] == ["src%2Fmod.py.1"]

    def test_snapshot_names_do_not_collide(
        self, history: VersionHistory, layout, index, write_lines
    ):
        write_lines(layout.root / "a", ["top"])
        write_lines(layout.root / "a.1" / "x", ["nested"])
        index.track("a", 0)
        index.track("a.1/x", 0)
        history.save("a")
        history.save("a.1/x")
        assert history.snapshot_path("a", 1).read_text() == "top\n"
        assert history.snapshot_path("a.1/x", 1).read_text() == "nested\n"

    def test_filename_too_long(self, history: VersionHistory, layout, index):
        filename = "d/" * 512 + "f"
        index.track(filename, 0)
        with pytest.raises(PathTooLongError) as exc_info:
            history.save(filename)
        assert exc_info.value.limit == 1024
        assert list(layout.versions_dir.iterdir()) == []
        assert history.records() == []

    def test_snapshot_copy_failure(self, history: VersionHistory, tracked: Path, monkeypatch):
        def fail(source, target):
            raise PermissionError(13, "Permission denied", str(target))

        monkeypatch.setattr("ew.storage.snapshots.shutil.copyfile", fail)
        with pytest.raises(StorageFailedError):
            history.save("a.txt")
        assert history.records() == []


class TestSnapshotPath:
    def test_out_of_range(self, history: VersionHistory, tracked: Path):
        history.save("a.txt")
        for version in (0, -1, 2):
            with pytest.raises(InvalidVersionError):
                history.snapshot_path("a.txt", version)

    def test_no_versions(self, history: VersionHistory):
        with pytest.raises(InvalidVersionError) as exc_info:
            history.snapshot_path("a.txt", 1)
        assert exc_info.value.latest == 0

    def test_missing_snapshot_file(self, history: VersionHistory, tracked: Path):
        history.save("a.txt")
        history.snapshot_path("a.txt", 1).unlink()
        with pytest.raises(InvalidVersionError):
            history.snapshot_path("a.txt", 1)


class TestDiffAgainstLatest:
    def test_no_history(self, history: VersionHistory, tracked: Path):
        with pytest.raises(HistoryMissingError):
            history.diff_against_latest("a.txt")

    def test_unchanged_is_empty(self, history: VersionHistory, tracked: Path):
        history.save("a.txt")
        assert history.diff_against_latest("a.txt") == ""

    def test_renders_patch(self, history: VersionHistory, tracked: Path, write_lines):
        history.save("a.txt")
        write_lines(tracked, ["one", "TWO", "three", "four"])
        patch = history.diff_against_latest("a.txt")
        assert patch.splitlines() == [
            "--- .svcs/versions/a.txt.1",
            "+++ a.txt",
            "@@ -1,3 +1,4 @@",
            " one",
            "-two",
            "+TWO",
            " three",
            "+four",
        ]

    def test_context_from_config(self, layout, index, write_lines):
        lines = [f"l{k}" for k in range(10)]
        path = write_lines(layout.root / "a.txt", lines)
        index.track("a.txt", 0)
        history = VersionHistory(layout, index, RepositoryConfig(context_lines=1))
        history.save("a.txt")
        write_lines(path, lines[:5] + ["new"] + lines[5:])
        patch = history.diff_against_latest("a.txt")
        assert "@@ -5,2 +5,3 @@" in patch
        assert "@@ -3,6 +3,7 @@" in history.diff_against_latest("a.txt", context=3)

    def test_diff_versions(self, history: VersionHistory, tracked: Path, write_lines):
        history.save("a.txt")
        write_lines(tracked, ["one", "three"])
        history.save("a.txt")
        patch = history.diff_versions("a.txt", 1, 2)
        assert "-two" in patch.splitlines()


class TestRevert:
    def test_revert_fidelity(self, history: VersionHistory, tracked: Path, write_lines):
        history.save("a.txt")
        write_lines(tracked, ["entirely", "different"])
        history.save("a.txt")

        history.revert("a.txt", 1)

        script = edit_script(read_lines(tracked), read_lines(history.snapshot_path("a.txt", 1)))
        assert all(not op.is_change for op in script)
        assert tracked.read_text() == "one\ntwo\nthree\n"

    def test_revert_does_not_touch_log(
        self, history: VersionHistory, layout: RepositoryLayout, tracked: Path, write_lines
    ):
        history.save("a.txt")
        write_lines(tracked, ["x"])
        history.save("a.txt")
        before = layout.history_file.read_bytes()
        history.revert("a.txt", 1)
        assert layout.history_file.read_bytes() == before
        assert history.latest_version("a.txt") == 2

    def test_missing_middle_version(self, history: VersionHistory, tracked: Path):
        """Reverting to a version absent from the log fails even when in range."""
        history.log.append(VersionRecord("a.txt", "x", 0, 1))
        history.log.append(VersionRecord("a.txt", "x", 0, 3))
        with pytest.raises(InvalidVersionError):
            history.revert("a.txt", 2)

    def test_untracked_rejected(self, history: VersionHistory, index, tracked: Path):
        history.save("a.txt")
        index.untrack("a.txt")
        with pytest.raises(NotTrackedError):
            history.revert("a.txt", 1)

    def test_restores_deleted_file(self, history: VersionHistory, tracked: Path):
        history.save("a.txt")
        tracked.unlink()
        history.revert("a.txt", 1)
        assert read_lines(tracked) == ["one", "two", "three"]
