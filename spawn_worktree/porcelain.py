"""Parser for ``git worktree list --porcelain`` output."""

from __future__ import annotations

from .models import WorktreeRecord

_WORKTREE = "worktree "
_HEAD = "HEAD "
_BRANCH = "branch "


def parse_worktree_porcelain(text: str | None) -> list[WorktreeRecord]:
    """Turn porcelain stanzas into records, in the order git emitted them.

    A pending record is flushed on a blank line, on the next ``worktree``
    line, or at end of input, whichever comes first. Fields seen before the
    first ``worktree`` line have nothing to attach to and are dropped, as are
    fields this parser does not know about.
    """
    records: list[WorktreeRecord] = []
    if not text:
        return records

    current: WorktreeRecord | None = None
    # Only "\n" separates lines; paths may legally contain other line breaks.
    for raw in text.split("\n"):
        line = raw.removesuffix("\r")
        if line.startswith(_WORKTREE):
            if _pending(current):
                records.append(current)
            current = WorktreeRecord(path=line[len(_WORKTREE):])
        elif line == "":
            if _pending(current):
                records.append(current)
                current = None
        elif current is None:
            continue
        elif line.startswith(_HEAD):
            current.head = line[len(_HEAD):]
        elif line.startswith(_BRANCH):
            current.branch = line[len(_BRANCH):]
        elif line == "bare":
            current.is_bare = True
        elif line.startswith("detached"):
            current.is_detached = True
        elif line == "prunable":
            current.is_prunable = True

    if _pending(current):
        records.append(current)
    return records


def _pending(record: WorktreeRecord | None) -> bool:
    return record is not None and bool(record.path)


__all__ = ["parse_worktree_porcelain"]
