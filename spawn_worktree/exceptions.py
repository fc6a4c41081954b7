"""Custom error hierarchy for spawn-worktree."""

from __future__ import annotations


class SpawnError(RuntimeError):
    """Base error for the CLI."""


class NotAGitRepositoryError(SpawnError):
    """Raised when the working directory is not inside a git repository."""

    def __init__(self, message: str = "Not in a git repository"):
        super().__init__(message)


class MissingEnvError(SpawnError):
    """Raised when a configured environment path is missing or invalid."""


class GitCommandError(SpawnError):
    """Raised when an underlying git command fails."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        message = f"git command failed (exit {returncode}): {' '.join(command)}"
        details = "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


class ValidationError(SpawnError):
    """Raised when user input fails validation."""


class UserAbort(SpawnError):
    """Raised when the user declines a confirmation or cancels a prompt."""


class MergeConflictError(SpawnError):
    """Raised when a merge stops on conflicts that need manual resolution."""

    def __init__(self, branch: str, conflicted_files: list[str] | None = None):
        self.branch = branch
        self.conflicted_files = conflicted_files or []
        super().__init__(f"Merge conflict detected while merging '{branch}'")


__all__ = [
    "SpawnError",
    "NotAGitRepositoryError",
    "MissingEnvError",
    "GitCommandError",
    "ValidationError",
    "UserAbort",
    "MergeConflictError",
]
