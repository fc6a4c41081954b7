"""Branch-name normalization and validation."""

from __future__ import annotations

import re
from typing import Iterable, Literal

from .exceptions import ValidationError

BRANCH_NAME_OK: Literal[True] = True

_CURRENT_MARKER_RE = re.compile(r"^\*?\s+")
_WORKTREE_MARKER_RE = re.compile(r"^[+-]\s+")
_REMOTE_PREFIX = "remotes/origin/"

_INVALID_CHARS_RE = re.compile(r"[\s~^:?*\[\\]")
_INVALID_SEQUENCES = ("..", "@{", "\\")


def normalize_branch_line(line: str) -> str:
    name = _CURRENT_MARKER_RE.sub("", line, count=1).strip()
    name = _WORKTREE_MARKER_RE.sub("", name, count=1)
    if name.startswith(_REMOTE_PREFIX):
        name = name[len(_REMOTE_PREFIX):]
    return name


def normalize_branches(lines: Iterable[str]) -> list[str]:
    """Normalize ``git branch -a`` lines into unique names, first occurrence wins.

    Local and remote-tracking branches sharing a short name collapse into a
    single entry, so a returned name is not guaranteed to have a local ref.
    Symbolic refs (``HEAD -> origin/main``) and the detached-HEAD pseudo
    entry are skipped. This goes beyond a plain strip-and-dedupe of
    the listing.
    """
    seen: set[str] = set()
    names: list[str] = []
    for line in lines:
        name = normalize_branch_line(line)
        if not name or name in seen:
            continue
        if " -> " in name or name.startswith("("):
            continue
        seen.add(name)
        names.append(name)
    return names


def validate_branch_name(name: str) -> Literal[True] | str:
    """Return ``True`` for an acceptable name, otherwise the reason it is rejected.

    This is a conservative subset of git's ref-name rules, meant to catch the
    common mistakes before ``git worktree add`` is attempted.
    """
    if not name:
        return "Branch name cannot be empty"
    if _INVALID_CHARS_RE.search(name):
        return "Branch name contains invalid characters"
    if name.startswith(("-", "+")) or name.endswith((".", ".lock")):
        return "Invalid branch name format"
    if any(sequence in name for sequence in _INVALID_SEQUENCES):
        return "Branch name contains invalid sequences"
    return BRANCH_NAME_OK


def require_valid_branch_name(name: str) -> str:
    verdict = validate_branch_name(name)
    if verdict is not BRANCH_NAME_OK:
        raise ValidationError(str(verdict))
    return name


__all__ = [
    "BRANCH_NAME_OK",
    "normalize_branch_line",
    "normalize_branches",
    "validate_branch_name",
    "require_valid_branch_name",
]
