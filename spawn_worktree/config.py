"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import MissingEnvError

DEFAULT_EDITOR = "claude"

EDITOR_ENV = "SPAWN_EDITOR"
WORKTREE_ROOT_ENV = "SPAWN_WORKTREE_ROOT"


@dataclass(slots=True)
class SpawnConfig:
    editor: str = DEFAULT_EDITOR
    worktree_root: Path | None = None

    def worktree_parent(self, repo_root: Path) -> Path:
        """Directory that new worktrees are created in."""
        return self.worktree_root or repo_root.parent


def load_config() -> SpawnConfig:
    editor = os.getenv(EDITOR_ENV, "").strip() or DEFAULT_EDITOR
    return SpawnConfig(editor=editor, worktree_root=_optional_dir(WORKTREE_ROOT_ENV))


def _optional_dir(var_name: str) -> Path | None:
    raw = os.environ.get(var_name)
    if not raw:
        return None
    path = Path(raw).expanduser().resolve()
    if not path.is_dir():
        raise MissingEnvError(
            f"Path from {var_name} does not exist: {path}. Create it or update the variable."
        )
    return path


__all__ = ["DEFAULT_EDITOR", "SpawnConfig", "load_config"]
