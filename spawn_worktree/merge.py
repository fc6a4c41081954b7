"""Merge another branch into the current one, with a preview first."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from rich.text import Text

from . import git
from .exceptions import GitCommandError, MergeConflictError, ValidationError
from .interactive import CANCEL, Choice, confirm, select, with_cancel
from .models import AheadBehind, WorktreeRecord
from .reconcile import worktree_for_branch_ref
from .worktrees import WorktreeService

logger = logging.getLogger(__name__)

DIFF_PREVIEW_LINES = 500
CONFLICT_MARKER = "CONFLICT"


@dataclass(slots=True)
class MergeCandidate:
    branch: str
    counts: AheadBehind
    worktree_name: str | None = None

    @property
    def label(self) -> str:
        parts = [self.branch]
        status = []
        if self.counts.ahead > 0:
            status.append(f"↑{self.counts.ahead}")
        if self.counts.behind > 0:
            status.append(f"↓{self.counts.behind}")
        if status:
            parts.append(f"({' '.join(status)})")
        if self.worktree_name:
            parts.append(f"[{self.worktree_name}]")
        return " ".join(parts)


def build_merge_candidates(
    branches: Sequence[str],
    current_branch: str,
    worktrees: Sequence[WorktreeRecord],
    repo_root: Path,
    counts: dict[str, AheadBehind],
) -> list[MergeCandidate]:
    """Candidates for the merge menu, most commits ahead first."""
    candidates = []
    for branch in branches:
        if branch == current_branch:
            continue
        worktree = worktree_for_branch_ref(branch, worktrees)
        worktree_name = worktree.name if worktree and Path(worktree.path) != repo_root else None
        candidates.append(MergeCandidate(branch, counts.get(branch, AheadBehind()), worktree_name))
    candidates.sort(key=lambda candidate: candidate.counts.ahead, reverse=True)
    return candidates


def truncate_diff(diff: str, limit: int = DIFF_PREVIEW_LINES) -> tuple[str, int]:
    """Return at most ``limit`` lines of ``diff`` and how many were cut."""
    lines = diff.split("\n")
    if len(lines) <= limit:
        return diff, 0
    return "\n".join(lines[:limit]), len(lines) - limit


def perform_merge(service: WorktreeService, branch: str, current_branch: str) -> bool:
    console = service.console
    root = service.repo_root
    console.print(f"\n[blue]Merging [white]{branch}[/white] into [white]{current_branch}[/white]...[/blue]\n")

    if branch not in service.list_branches():
        raise ValidationError(f"Branch '{branch}' does not exist")

    if git.has_uncommitted_changes(root):
        console.print("[yellow]Please commit or stash your changes before merging.[/yellow]")
        console.print("[dim]\nCurrent status:[/dim]")
        git.run_passthrough(["git", "status", "--short"], cwd=root)
        raise ValidationError("You have uncommitted changes.")

    counts = git.ahead_behind(branch, current_branch, root)
    if counts.ahead == 0:
        console.print(f"[yellow]Branch '{branch}' has no new commits to merge.[/yellow]")
        return True

    console.print(f"[dim]Branch '{branch}' is {counts.ahead} commit(s) ahead of '{current_branch}'.[/dim]")
    _show_preview(service, branch, current_branch)

    if not confirm(f"Do you want to merge '{branch}' into '{current_branch}'?", default=True):
        console.print("[dim]Merge cancelled.[/dim]")
        return False

    console.print("[yellow]\nPerforming merge...[/yellow]")
    result = git.merge(branch, f"Merge branch '{branch}' into {current_branch}", cwd=root)
    if result.stdout:
        console.print(Text(result.stdout.rstrip()))
    if not result.ok:
        if CONFLICT_MARKER in result.stdout:
            raise MergeConflictError(branch, git.conflicted_files(root))
        raise GitCommandError(result.command, result.returncode, stdout=result.stdout, stderr=result.stderr)

    logger.debug("Merged %s into %s", branch, current_branch)
    console.print(f"[green]\n✅ Successfully merged '{branch}' into '{current_branch}'[/green]")
    console.print("[blue]\nMerge summary:[/blue]")
    git.run_passthrough(["git", "--no-pager", "log", "--oneline", "--color=always", "-1"], cwd=root)

    if confirm(f"Do you want to remove the branch '{branch}' and its worktree?", default=True):
        console.print(f"[yellow]\nRemoving branch '{branch}' and its worktree...[/yellow]")
        service.remove_branch(branch)
    return True


def _show_preview(service: WorktreeService, branch: str, current_branch: str) -> None:
    console = service.console
    root = service.repo_root
    console.print("[blue]\nCommits to be merged:[/blue]")
    git.run_passthrough(
        ["git", "--no-pager", "log", "--oneline", "--color=always", f"{current_branch}..{branch}"],
        cwd=root,
    )
    console.print("[blue]\nFiles to be changed:[/blue]")
    git.run_passthrough(
        ["git", "--no-pager", "diff", "--stat", "--color=always", f"{current_branch}...{branch}"],
        cwd=root,
    )
    console.print("[blue]\nChanges preview:[/blue]")
    diff = git.diff_preview(current_branch, branch, cwd=root)
    if diff is None:
        console.print("[yellow]Could not generate diff preview[/yellow]")
        return
    shown, hidden = truncate_diff(diff)
    console.print(Text.from_ansi(shown))
    if hidden:
        console.print(f"[yellow]\n... diff truncated ({hidden} more lines) ...[/yellow]")


def interactive_merge(service: WorktreeService, current_branch: str) -> bool:
    console = service.console
    console.print("[bold cyan]\n🔀 Git Merge Tool\n[/bold cyan]")
    console.print(f"[dim]Current branch: [/dim]{current_branch}")

    branches = [branch for branch in service.list_branches() if branch != current_branch]
    if not branches:
        console.print("[yellow]No other branches available to merge.[/yellow]")
        return True

    counts = {branch: git.ahead_behind(branch, current_branch, service.repo_root) for branch in branches}
    candidates = build_merge_candidates(
        branches, current_branch, service.list_worktrees(), service.repo_root, counts
    )
    choices = with_cancel([Choice(value=candidate.branch, name=candidate.label) for candidate in candidates])
    selection = select("Select a branch to merge into current branch:", choices)
    if selection == CANCEL:
        console.print("[dim]Cancelled.[/dim]")
        return True
    return perform_merge(service, selection, current_branch)


__all__ = [
    "MergeCandidate",
    "build_merge_candidates",
    "truncate_diff",
    "perform_merge",
    "interactive_merge",
]
