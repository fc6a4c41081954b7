"""Launch an editor inside a worktree and label the terminal tab."""

from __future__ import annotations

import logging
import shlex
import sys
from pathlib import Path

from rich.console import Console

from .git import run_passthrough

logger = logging.getLogger(__name__)


def set_terminal_tab_name(name: str) -> None:
    # OSC 1 sets the tab title; terminals that do not understand it ignore it.
    if not sys.stdout.isatty():
        return
    sys.stdout.write(f"\033]1;{name}\007")
    sys.stdout.flush()


def launch_editor(editor: str, worktree_path: Path, console: Console) -> bool:
    """Run ``editor`` with the worktree as its working directory.

    A failure to launch is reported as a warning and never aborts the command.
    """
    console.print(f"\n[cyan]Launching {editor}...[/cyan]")
    returncode = run_passthrough(shlex.split(editor), cwd=worktree_path)
    if returncode != 0:
        logger.debug("Editor %s exited with %s", editor, returncode)
        console.print(
            f"[yellow]Warning: Could not launch {editor}. Make sure it's installed and in your PATH.[/yellow]"
        )
        return False
    return True


__all__ = ["set_terminal_tab_name", "launch_editor"]
