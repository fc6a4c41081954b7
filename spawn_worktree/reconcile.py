"""Pair branch names with the worktrees that have them checked out.

Everything here is a pure function of its inputs so that menu construction
and removal decisions can be tested without a git process.
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable, Sequence

from .models import HEADS_PREFIX, WorktreeRecord

PROTECTED_BRANCHES = ("main", "master")


def worktree_dir_name(repo_root: Path | str, branch_name: str) -> str:
    """Directory name this tool gives to a new worktree for ``branch_name``.

    Slashes are flattened so ``feature/login`` lands in a single
    ``<repo>-feature-login`` directory beside the repository.
    """
    return f"{PurePath(repo_root).name}-{branch_name.replace('/', '-')}"


def find_worktree_for_branch(
    branch_name: str,
    worktrees: Iterable[WorktreeRecord],
    repo_root: Path | str,
) -> WorktreeRecord | None:
    expected_dirs = {
        f"{PurePath(repo_root).name}-{branch_name}",
        worktree_dir_name(repo_root, branch_name),
    }
    for worktree in worktrees:
        if worktree.short_branch == branch_name or worktree.name in expected_dirs:
            return worktree
    return None


def worktree_for_branch_ref(branch_name: str, worktrees: Iterable[WorktreeRecord]) -> WorktreeRecord | None:
    for worktree in worktrees:
        if worktree.branch and worktree.short_branch == branch_name:
            return worktree
    return None


def partition_branches(
    branches: Sequence[str],
    worktrees: Iterable[WorktreeRecord],
) -> tuple[list[str], list[str]]:
    """Split branches into (has a worktree, worktree-less).

    ``main`` and ``master`` never land in the worktree-less half so menus do
    not offer to spin up worktrees for the integration branches.
    """
    checked_out = {worktree.branch for worktree in worktrees if worktree.branch}
    with_worktree: list[str] = []
    without_worktree: list[str] = []
    for branch in branches:
        if f"{HEADS_PREFIX}{branch}" in checked_out:
            with_worktree.append(branch)
        elif branch not in PROTECTED_BRANCHES:
            without_worktree.append(branch)
    return with_worktree, without_worktree


def branches_without_worktrees(branches: Sequence[str], worktrees: Iterable[WorktreeRecord]) -> list[str]:
    return partition_branches(branches, worktrees)[1]


__all__ = [
    "PROTECTED_BRANCHES",
    "worktree_dir_name",
    "find_worktree_for_branch",
    "worktree_for_branch_ref",
    "partition_branches",
    "branches_without_worktrees",
]
