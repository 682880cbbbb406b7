"""Command-line interface for ew."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ew.exceptions import EwError, UnknownCommandError
from ew.repository import Repository
from ew.storage import VersionRecord, format_timestamp

LOGGER = logging.getLogger("ew.cli")

COMMANDS = ("init", "track", "untrack", "status", "find", "diff", "save", "revert", "history")
LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def non_negative_int(value: str) -> int:
    """argparse type for counts that may be zero but not negative."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ew", description="ew - simple version control")
    parser.add_argument("--root", default=".", help="Repository root directory")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create new repository")
    init_parser.add_argument(
        "--all", dest="add_all", action="store_true", help="Track and save every top-level file"
    )

    track_parser = subparsers.add_parser("track", help="Start tracking a file")
    track_parser.add_argument("file")

    untrack_parser = subparsers.add_parser("untrack", help="Stop tracking a file")
    untrack_parser.add_argument("file")

    subparsers.add_parser("status", help="List tracked files")
    subparsers.add_parser("find", help="Find files in repository")

    diff_parser = subparsers.add_parser("diff", help="Show changes since the latest version")
    diff_parser.add_argument("file")
    diff_parser.add_argument(
        "-C", "--context", type=non_negative_int, default=None, help="Context lines per hunk"
    )

    save_parser = subparsers.add_parser("save", help="Save changes")
    save_parser.add_argument("file")
    save_parser.add_argument("--author", default=None, help="Override the recorded author")

    revert_parser = subparsers.add_parser("revert", help="Revert to version")
    revert_parser.add_argument("file")
    revert_parser.add_argument("version", nargs="?", type=int, default=None, help="Defaults to latest")

    history_parser = subparsers.add_parser("history", help="Show history")
    history_parser.add_argument("file", nargs="?", default=None, help="Limit to one file")
    history_parser.add_argument("--export", default=None, help="Write history to this path")
    history_parser.add_argument("--format", choices=["json", "yaml"], default=None, help="Export format")

    return parser


def print_record(record: VersionRecord, root: Path) -> None:
    state = "(exists)" if (root / record.filename).is_file() else "(deleted)"
    print(f"\nVersion {record.version} - File: {record.filename} {state}")
    print(f"By: {record.author} at {format_timestamp(record.timestamp)}")
    if record.version > 1:
        print(f"Changes: +{record.lines_added}, -{record.lines_removed} lines")
        if record.changes:
            print("Modified lines:")
            for op in record.changes:
                print(op.render())


def run(args: argparse.Namespace) -> None:
    root = Path(args.root)

    if args.command == "init":
        repo, created = Repository.init(root, add_all=args.add_all)
        if not created:
            print("Repository already exists!")
            return
        tracked = repo.index.tracked_paths()
        for path in tracked:
            print(f" + {path}")
        if tracked:
            print(f"Initialized repository with {len(tracked)} files")
        else:
            print("Initialized empty repository")
        return

    repo = Repository.open(root)

    if args.command == "track":
        record = repo.track(args.file)
        if record is None:
            print(f"Already tracking: {args.file}")
        else:
            print(f"Now tracking: {record.filename}")
            print(f"Saved version {record.version} of {record.filename}")
    elif args.command == "untrack":
        repo.untrack(args.file)
        print(f"No longer tracking: {args.file}")
    elif args.command == "status":
        statuses = repo.status()
        if not statuses:
            print("No tracked files")
            return
        print("Tracked files:")
        for item in statuses:
            suffix = "" if item.state == "unchanged" else f" ({item.state})"
            print(f" {item.path}{suffix}")
    elif args.command == "find":
        for item in repo.find():
            suffix = "" if item.tracked else " (untracked)"
            print(f" {item.path}{suffix}")
    elif args.command == "diff":
        patch = repo.diff(args.file, context=args.context)
        print(patch, end="" if patch else f"No changes in {args.file}\n")
    elif args.command == "save":
        record = repo.save(args.file, author=args.author)
        print(f"Saved version {record.version} of {record.filename}")
    elif args.command == "revert":
        version = repo.revert(args.file, args.version)
        print(f"Reverted {args.file} to version {version}")
    elif args.command == "history":
        if args.export:
            fmt = args.format or ("yaml" if args.export.endswith((".yaml", ".yml")) else "json")
            count = repo.export_history(args.export, fmt, args.file)
            print(f"Exported {count} versions to {args.export}")
            return
        records = repo.history_records(args.file)
        if not records:
            print("No history found")
            return
        print("Version History:")
        for record in records:
            print_record(record, repo.root)


def _command_name(argv: list[str]) -> str | None:
    """Return the first positional argument, skipping global options."""
    expects_value = False
    for arg in argv:
        if expects_value:
            expects_value = False
        elif arg == "--root":
            expects_value = True
        elif not arg.startswith("-"):
            return arg
    return None


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    if not argv:
        parser.print_help()
        return 1

    command = _command_name(argv)
    try:
        if command is not None and command not in COMMANDS:
            raise UnknownCommandError(command)
        try:
            args = parser.parse_args(argv)
        except SystemExit as e:
            return 0 if e.code in (0, None) else 1
        logging.basicConfig(
            level=LOG_LEVELS[min(args.verbose, len(LOG_LEVELS) - 1)],
            format="%(asctime)s %(levelname)s %(message)s",
        )
        run(args)
    except EwError as e:
        LOGGER.debug("%s failed", command, exc_info=True)
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
