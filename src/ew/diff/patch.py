"""Hunk grouping and unified-diff rendering for edit scripts."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ew.diff.lcs import EditOp, OpKind

DEFAULT_CONTEXT = 3


@dataclass
class Hunk:
    """A context-bounded region of an edit script.

    old_start and new_start are 0-based indices of the first line covered.
    """

    old_start: int
    new_start: int
    ops: list[EditOp] = field(default_factory=list)

    @property
    def old_length(self) -> int:
        return sum(1 for op in self.ops if op.kind is not OpKind.INSERT)

    @property
    def new_length(self) -> int:
        return sum(1 for op in self.ops if op.kind is not OpKind.DELETE)

    def header(self) -> str:
        """Render the @@ range line with 1-based starts."""
        return "@@ -{} +{} @@".format(
            _format_range(self.old_start, self.old_length),
            _format_range(self.new_start, self.new_length),
        )


def _format_range(start: int, length: int) -> str:
    # An empty range names the line before it, as in GNU diff.
    first = start + 1 if length else start
    return f"{first},{length}"


def group_hunks(
    script: Iterable[EditOp], context: int = DEFAULT_CONTEXT
) -> list[Hunk]:
    """
    Group an edit script into hunks.

    Changes separated by fewer than 2 * context unchanged lines share a
    hunk. A longer unchanged run closes the open hunk after `context`
    trailing lines and seeds the next hunk with its last `context` lines.
    A hunk still open when the script ends keeps whatever trailing context
    is available.
    """
    if context < 0:
        raise ValueError(f"context must be >= 0, got {context}")

    hunks: list[Hunk] = []
    leading: deque[EditOp] = deque(maxlen=context)
    gap: list[EditOp] = []
    current: Hunk | None = None
    old_index = new_index = 0

    for op in script:
        if op.kind is OpKind.CONTEXT:
            if current is None:
                leading.append(op)
            else:
                gap.append(op)
                if len(gap) >= 2 * context:
                    current.ops.extend(gap[:context])
                    hunks.append(current)
                    current = None
                    leading.clear()
                    leading.extend(gap[len(gap) - context :])
                    gap = []
            old_index += 1
            new_index += 1
            continue

        if current is None:
            current = Hunk(
                old_start=old_index - len(leading),
                new_start=new_index - len(leading),
                ops=list(leading),
            )
            leading.clear()
        else:
            current.ops.extend(gap)
            gap = []
        current.ops.append(op)

        if op.kind is OpKind.INSERT:
            new_index += 1
        else:
            old_index += 1

    if current is not None:
        current.ops.extend(gap[:context])
        hunks.append(current)
    return hunks


def format_hunk(hunk: Hunk) -> list[str]:
    """Render a hunk as its header followed by prefixed operation lines."""
    return [hunk.header()] + [op.render() for op in hunk.ops]


def render_patch(
    script: Sequence[EditOp],
    *,
    old_label: str,
    new_label: str,
    context: int = DEFAULT_CONTEXT,
) -> str:
    """
    Render an edit script as unified-diff text.

    Returns an empty string when the script holds no changes.
    """
    hunks = group_hunks(script, context)
    if not hunks:
        return ""

    lines = [f"--- {old_label}", f"+++ {new_label}"]
    for hunk in hunks:
        lines.extend(format_hunk(hunk))
    return "\n".join(lines) + "\n"
