"""Shared dataclasses used throughout the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

HEADS_PREFIX = "refs/heads/"


@dataclass(slots=True)
class WorktreeRecord:
    """A single worktree as reported by ``git worktree list --porcelain``."""

    path: str
    head: str | None = None
    branch: str | None = None
    is_bare: bool = False
    is_detached: bool = False
    is_prunable: bool = False

    @property
    def short_branch(self) -> str | None:
        if not self.branch:
            return None
        return self.branch.replace(HEADS_PREFIX, "", 1)

    @property
    def name(self) -> str:
        return PurePath(self.path).name

    @property
    def branch_label(self) -> str:
        if self.short_branch:
            return self.short_branch
        if self.is_detached:
            return "detached HEAD"
        return "no branch"


@dataclass(slots=True)
class AheadBehind:
    ahead: int = 0
    behind: int = 0


__all__ = ["HEADS_PREFIX", "WorktreeRecord", "AheadBehind"]
