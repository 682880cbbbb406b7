"""Longest-common-subsequence edit scripts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence


class OpKind(str, Enum):
    """Edit operation tag; the value is its patch prefix."""

    CONTEXT = " "
    INSERT = "+"
    DELETE = "-"


@dataclass(frozen=True)
class EditOp:
    """A single line of an edit script."""

    kind: OpKind
    line: str

    @property
    def is_change(self) -> bool:
        return self.kind is not OpKind.CONTEXT

    def render(self) -> str:
        return f"{self.kind.value}{self.line}"


def lcs_table(old: Sequence[str], new: Sequence[str]) -> list[list[int]]:
    """
    Build the LCS length table for two line sequences.

    table[i][j] is the LCS length of old[:i] and new[:j]. The table is
    sized (len(old) + 1) x (len(new) + 1).
    """
    m, n = len(old), len(new)
    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = table[i], table[i - 1]
        old_line = old[i - 1]
        for j in range(1, n + 1):
            if old_line == new[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = prev[j] if prev[j] > row[j - 1] else row[j - 1]
    return table


def edit_script(old: Sequence[str], new: Sequence[str]) -> list[EditOp]:
    """
    Compute the forward-ordered edit script turning old into new.

    Context lines are exactly an LCS of the inputs. When an insert and a
    delete are equally good, the insert is emitted first while
    backtracking, so deletes precede inserts in the forward script.
    """
    table = lcs_table(old, new)
    i, j = len(old), len(new)
    ops: list[EditOp] = []

    while i > 0 or j > 0:
        if i > 0 and j > 0 and old[i - 1] == new[j - 1]:
            ops.append(EditOp(OpKind.CONTEXT, old[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            ops.append(EditOp(OpKind.INSERT, new[j - 1]))
            j -= 1
        else:
            ops.append(EditOp(OpKind.DELETE, old[i - 1]))
            i -= 1

    ops.reverse()
    return ops


def count_changes(script: Iterable[EditOp]) -> tuple[int, int]:
    """Return (lines_added, lines_removed) for a script."""
    added = removed = 0
    for op in script:
        if op.kind is OpKind.INSERT:
            added += 1
        elif op.kind is OpKind.DELETE:
            removed += 1
    return added, removed


def old_lines(script: Iterable[EditOp]) -> list[str]:
    """Reconstruct the old sequence from context and delete operations."""
    return [op.line for op in script if op.kind is not OpKind.INSERT]


def new_lines(script: Iterable[EditOp]) -> list[str]:
    """Reconstruct the new sequence from context and insert operations."""
    return [op.line for op in script if op.kind is not OpKind.DELETE]
