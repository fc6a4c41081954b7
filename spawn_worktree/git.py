"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .exceptions import GitCommandError
from .models import AheadBehind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    """Captured outcome of a command that is never allowed to raise."""

    command: list[str]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str | None:
        """Standard output on success, ``None`` on any failure."""
        return self.stdout if self.ok else None


def execute(args: Sequence[str], *, cwd: Path | str | None = None) -> CommandResult:
    command = list(args)
    logger.debug("Running command: %s (cwd=%s)", " ".join(command), cwd or ".")
    try:
        proc = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.debug("Could not spawn %s: %s", command[0], exc)
        return CommandResult(command=command, returncode=None, error=str(exc))
    if proc.returncode != 0:
        logger.debug("Command exited with %s: %s", proc.returncode, proc.stderr.strip())
    return CommandResult(
        command=command,
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
    )


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    check: bool = True,
) -> CommandResult:
    result = execute(["git", *args], cwd=cwd)
    if check and not result.ok:
        raise GitCommandError(
            result.command,
            result.returncode,
            stdout=result.stdout,
            stderr=result.stderr or result.error,
        )
    return result


def run_passthrough(args: Sequence[str], *, cwd: Path | str | None = None) -> int:
    """Run a command with inherited stdio and return its exit code."""
    command = list(args)
    logger.debug("Running command: %s (cwd=%s)", " ".join(command), cwd or ".")
    try:
        return subprocess.run(command, cwd=str(cwd) if cwd else None, check=False).returncode
    except OSError as exc:
        logger.debug("Could not spawn %s: %s", command[0], exc)
        return 127


def _stripped(result: CommandResult) -> str | None:
    output = result.output
    return output.strip() if output is not None else None


def is_git_repository(cwd: Path | str | None = None) -> bool:
    return _stripped(execute(["git", "rev-parse", "--is-inside-work-tree"], cwd=cwd)) == "true"


def git_root_directory(cwd: Path | str | None = None) -> Path | None:
    root = _stripped(execute(["git", "rev-parse", "--show-toplevel"], cwd=cwd))
    return Path(root) if root else None


def current_branch(cwd: Path | str | None = None) -> str | None:
    # Empty output when in detached HEAD state.
    return _stripped(execute(["git", "branch", "--show-current"], cwd=cwd)) or None


def worktree_porcelain(cwd: Path | str | None = None) -> str | None:
    return execute(["git", "worktree", "list", "--porcelain"], cwd=cwd).output


def branch_listing(cwd: Path | str | None = None, *, include_remote: bool = True) -> str | None:
    args = ["git", "branch"]
    if include_remote:
        args.append("-a")
    return execute(args, cwd=cwd).output


def local_branch_exists(branch: str, cwd: Path | str | None = None) -> bool:
    return execute(["git", "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"], cwd=cwd).ok


def remote_branch_exists(branch: str, cwd: Path | str | None = None, remote: str = "origin") -> bool:
    return execute(
        ["git", "rev-parse", "--verify", "--quiet", f"refs/remotes/{remote}/{branch}"],
        cwd=cwd,
    ).ok


def has_uncommitted_changes(cwd: Path | str | None = None) -> bool:
    status = _stripped(execute(["git", "status", "--porcelain"], cwd=cwd))
    return bool(status)


def ahead_behind(branch: str, base: str, cwd: Path | str | None = None) -> AheadBehind:
    counts = _stripped(execute(["git", "rev-list", "--left-right", "--count", f"{base}...{branch}"], cwd=cwd))
    if not counts:
        return AheadBehind()
    try:
        behind, ahead = (int(value) for value in counts.split())
    except ValueError:
        return AheadBehind()
    return AheadBehind(ahead=ahead, behind=behind)


def conflicted_files(cwd: Path | str | None = None) -> list[str]:
    output = execute(["git", "diff", "--name-only", "--diff-filter=U"], cwd=cwd).output or ""
    return [line.strip() for line in output.splitlines() if line.strip()]


def worktree_add(
    root: Path,
    target: Path,
    branch: str,
    *,
    create_branch: bool,
    start_point: str | None = None,
) -> None:
    args = ["git", "-C", str(root), "worktree", "add", str(target)]
    if create_branch:
        args.extend(["-b", branch])
        if start_point:
            args.append(start_point)
    else:
        args.append(branch)
    returncode = run_passthrough(args, cwd=root)
    if returncode != 0:
        raise GitCommandError(args, returncode)


def worktree_remove(target: Path | str, *, cwd: Path | str | None = None, force: bool = True) -> None:
    args = ["worktree", "remove", str(target)]
    if force:
        args.append("--force")
    run_git(args, cwd=cwd)


def delete_branch(branch: str, *, cwd: Path | str | None = None) -> None:
    run_git(["branch", "-D", branch], cwd=cwd)


def merge(branch: str, message: str, *, cwd: Path | str | None = None) -> CommandResult:
    return run_git(["merge", branch, "-m", message], cwd=cwd, check=False)


def diff_preview(base: str, branch: str, *, cwd: Path | str | None = None) -> str | None:
    return execute(
        ["git", "--no-pager", "diff", "--color=always", "--unified=3", f"{base}...{branch}"],
        cwd=cwd,
    ).output


__all__ = [
    "CommandResult",
    "execute",
    "run_git",
    "run_passthrough",
    "is_git_repository",
    "git_root_directory",
    "current_branch",
    "worktree_porcelain",
    "branch_listing",
    "local_branch_exists",
    "remote_branch_exists",
    "has_uncommitted_changes",
    "ahead_behind",
    "conflicted_files",
    "worktree_add",
    "worktree_remove",
    "delete_branch",
    "merge",
    "diff_preview",
]
