"""Core business logic for worktree operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.table import Table

from . import git
from .branches import normalize_branches, require_valid_branch_name
from .config import SpawnConfig
from .exceptions import NotAGitRepositoryError, ValidationError
from .interactive import confirm
from .models import WorktreeRecord
from .porcelain import parse_worktree_porcelain
from .reconcile import find_worktree_for_branch, worktree_dir_name

logger = logging.getLogger(__name__)


def open_repository(cwd: Path | None = None) -> Path:
    """Return the top-level directory of the repository containing ``cwd``."""
    if not git.is_git_repository(cwd):
        raise NotAGitRepositoryError()
    root = git.git_root_directory(cwd)
    if root is None:
        raise NotAGitRepositoryError("Could not determine git root directory")
    return root


def worktree_status(record: WorktreeRecord) -> str:
    if record.is_bare:
        return "bare"
    if not Path(record.path).exists():
        return "missing"
    if record.is_prunable:
        return "prunable"
    return "active"


@dataclass
class WorktreeService:
    repo_root: Path
    config: SpawnConfig
    console: Console

    def list_worktrees(self) -> list[WorktreeRecord]:
        return parse_worktree_porcelain(git.worktree_porcelain(self.repo_root))

    def list_branches(self) -> list[str]:
        listing = git.branch_listing(self.repo_root) or ""
        return normalize_branches(listing.splitlines())

    def current_branch(self) -> str | None:
        return git.current_branch(self.repo_root)

    def is_current(self, record: WorktreeRecord) -> bool:
        return Path(record.path) == self.repo_root

    def target_path(self, branch: str) -> Path:
        return self.config.worktree_parent(self.repo_root) / worktree_dir_name(self.repo_root, branch)

    def create_worktree(self, branch: str, *, overwrite: bool = False) -> Path:
        require_valid_branch_name(branch)
        target = self.target_path(branch)
        if target.exists():
            if not overwrite:
                raise ValidationError(f"Worktree already exists at {target}")
            self.console.print("[yellow]Removing existing worktree...[/yellow]")
            git.worktree_remove(target, cwd=self.repo_root, force=True)

        self.console.print(f"\n[blue]Creating worktree for branch '{branch}'...[/blue]")
        self.console.print(f"[dim]Repository: {self.repo_root}[/dim]")
        self.console.print(f"[dim]Worktree path: {target}[/dim]")

        if git.local_branch_exists(branch, self.repo_root):
            git.worktree_add(self.repo_root, target, branch, create_branch=False)
        elif git.remote_branch_exists(branch, self.repo_root):
            git.worktree_add(self.repo_root, target, branch, create_branch=True, start_point=f"origin/{branch}")
        else:
            git.worktree_add(self.repo_root, target, branch, create_branch=True)

        logger.debug("Created worktree %s for %s", target, branch)
        self.console.print("\n[green]Worktree created successfully![/green]")
        return target

    def remove_worktree(self, worktree: WorktreeRecord) -> None:
        if self.is_current(worktree):
            raise ValidationError("Cannot remove the current worktree")
        self.console.print(f"[yellow]Removing worktree at {worktree.path}...[/yellow]")
        git.worktree_remove(worktree.path, cwd=self.repo_root, force=True)
        _cleanup_empty_dirs(Path(worktree.path), stop=self.config.worktree_parent(self.repo_root))
        self.console.print("[green]✅ Worktree removed successfully[/green]")

    def remove_branch(self, branch: str) -> WorktreeRecord | None:
        """Remove the worktree for ``branch`` and offer to delete the branch itself."""
        worktree = find_worktree_for_branch(branch, self.list_worktrees(), self.repo_root)
        if worktree is not None:
            self.remove_worktree(worktree)

        if branch in self.list_branches():
            if confirm(f"Do you also want to delete the branch '{branch}'?", default=True):
                self.console.print(f"[yellow]Deleting branch {branch}...[/yellow]")
                git.delete_branch(branch, cwd=self.repo_root)
                self.console.print("[green]✅ Branch deleted successfully[/green]")
        return worktree


def _cleanup_empty_dirs(path: Path, stop: Path) -> None:
    """Remove empty directories from ``path`` up to, but not including, ``stop``."""
    resolved_path = path.resolve()
    resolved_stop = stop.resolve()
    if resolved_path == resolved_stop or resolved_stop not in resolved_path.parents:
        return
    current = resolved_path
    while current != resolved_stop:
        try:
            current.rmdir()
        except FileNotFoundError:
            pass
        except OSError:
            break
        current = current.parent


def render_worktrees_table(service: WorktreeService, records: Sequence[WorktreeRecord]) -> None:
    table = Table(title="Git Worktrees", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Name", no_wrap=True, style="bold")
    table.add_column("Branch", no_wrap=True)
    table.add_column("Path")
    table.add_column("Status", no_wrap=True)
    for index, record in enumerate(records, start=1):
        branch = record.branch_label
        if service.is_current(record):
            branch = f"{branch} [green]← current[/green]"
        table.add_row(str(index), record.name, branch, record.path, worktree_status(record))
    service.console.print(table)


def render_worktrees_json(service: WorktreeService, records: Sequence[WorktreeRecord]) -> None:
    payload = [
        {
            "name": record.name,
            "path": record.path,
            "head": record.head,
            "branch": record.short_branch,
            "bare": record.is_bare,
            "detached": record.is_detached,
            "prunable": record.is_prunable,
            "current": service.is_current(record),
        }
        for record in records
    ]
    service.console.print_json(data=payload)


__all__ = [
    "open_repository",
    "worktree_status",
    "WorktreeService",
    "render_worktrees_table",
    "render_worktrees_json",
]
