"""Line-level difference engine."""

from ew.diff.lcs import (
    EditOp,
    OpKind,
    count_changes,
    edit_script,
    lcs_table,
    new_lines,
    old_lines,
)
from ew.diff.lines import MAX_LINE_LENGTH, MAX_LINES, exists, read_lines
from ew.diff.patch import (
    DEFAULT_CONTEXT,
    Hunk,
    format_hunk,
    group_hunks,
    render_patch,
)

__all__ = [
    # Line store
    "MAX_LINES",
    "MAX_LINE_LENGTH",
    "exists",
    "read_lines",
    # LCS
    "EditOp",
    "OpKind",
    "count_changes",
    "edit_script",
    "lcs_table",
    "new_lines",
    "old_lines",
    # Patch
    "DEFAULT_CONTEXT",
    "Hunk",
    "format_hunk",
    "group_hunks",
    "render_patch",
]
