"""Typer CLI entrypoint for spawn-worktree."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.console import Console
from typer.core import TyperGroup

from . import __version__
from .branches import BRANCH_NAME_OK, require_valid_branch_name, validate_branch_name
from .config import DEFAULT_EDITOR, load_config
from .editor import launch_editor, set_terminal_tab_name
from .exceptions import MergeConflictError, SpawnError, UserAbort, ValidationError
from .interactive import CANCEL, Choice, Separator, confirm, select, text_input, with_cancel
from .logging_config import configure_logging
from .merge import interactive_merge, perform_merge
from .models import WorktreeRecord
from .reconcile import branches_without_worktrees
from .worktrees import (
    WorktreeService,
    open_repository,
    render_worktrees_json,
    render_worktrees_table,
    worktree_status,
)

DEFAULT_COMMAND = "create"

EDITOR_CHOICES = [
    Choice(value="claude", name="Claude"),
    Choice(value="code", name="VS Code"),
    Choice(value=None, name="None"),
]


class SpawnGroup(TyperGroup):
    """Route ``spawn [BRANCH] [OPTIONS]`` to the default command.

    Anything that is not a known subcommand (a branch name, ``--list``, or
    nothing at all) is handed to ``create``.
    """

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        passthrough = {"--verbose", "--version", *ctx.help_option_names}
        index = 0
        while index < len(args) and args[index] in passthrough:
            index += 1
        leading = set(args[:index])
        wants_group_output = "--version" in leading or bool(leading & set(ctx.help_option_names))
        if not wants_group_output and (index == len(args) or args[index] not in self.commands):
            args = [*args[:index], DEFAULT_COMMAND, *args[index:]]
        return super().parse_args(ctx, args)


app = typer.Typer(
    cls=SpawnGroup,
    add_completion=False,
    help="Git worktree management tool: create, list, merge and remove worktrees.",
)
console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"spawn {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the spawn version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    configure_logging(verbose)


@app.command(help="Create a worktree for BRANCH (interactive when omitted).")
def create(
    branch_name: Optional[str] = typer.Argument(None, metavar="[BRANCH]", help="Name of the branch to create."),
    editor: Optional[str] = typer.Option(None, "--editor", "-e", help="Editor to launch (default: $SPAWN_EDITOR or claude)."),
    no_editor: bool = typer.Option(False, "--no-editor", "-n", help="Do not launch any editor."),
    from_existing: bool = typer.Option(False, "--from-existing", "-x", help="Choose from existing branches."),
    list_: bool = typer.Option(False, "--list", "-l", help="List all worktrees."),
) -> None:
    with _handle_errors():
        service = _build_service()
        if list_:
            _list(service, as_json=False)
            return
        if branch_name:
            require_valid_branch_name(branch_name)
        else:
            branch_name, editor, no_editor = _interactive_create(service, editor, no_editor, from_existing)
            if branch_name is None:
                return
        _create(service, branch_name, editor=editor, no_editor=no_editor)


@app.command(name="list", help="List all worktrees.")
def list_command(
    json_: bool = typer.Option(False, "--json", help="Output JSON instead of a table."),
) -> None:
    with _handle_errors():
        _list(_build_service(), as_json=json_)


@app.command(help="Remove a worktree and optionally its branch.")
def remove(
    branch_name: Optional[str] = typer.Argument(None, metavar="[BRANCH]", help="Branch whose worktree to remove."),
) -> None:
    with _handle_errors():
        service = _build_service()
        if branch_name:
            service.remove_branch(branch_name)
            return
        _interactive_remove(service)


@app.command(help="Merge another branch into the current branch.")
def merge(
    branch_name: Optional[str] = typer.Argument(None, metavar="[BRANCH]", help="Branch to merge."),
) -> None:
    with _handle_errors():
        service = _build_service()
        current = service.current_branch()
        if not current:
            raise ValidationError("Could not determine current branch")
        if branch_name:
            perform_merge(service, branch_name, current)
        else:
            interactive_merge(service, current)


def _build_service() -> WorktreeService:
    root = open_repository()
    return WorktreeService(repo_root=root, config=load_config(), console=console)


def _list(service: WorktreeService, *, as_json: bool) -> None:
    records = service.list_worktrees()
    if as_json:
        render_worktrees_json(service, records)
        return
    if not records:
        console.print("[yellow]No worktrees found.[/yellow]")
        return
    render_worktrees_table(service, records)


def _create(service: WorktreeService, branch_name: str, *, editor: str | None, no_editor: bool) -> None:
    target = service.target_path(branch_name)
    overwrite = False
    if target.exists():
        err_console.print(f"[red]Error: Worktree already exists at {target}[/red]")
        if not confirm("Do you want to remove the existing worktree and create a new one?", default=False):
            raise UserAbort("Existing worktree kept; nothing was created.")
        overwrite = True

    path = service.create_worktree(branch_name, overwrite=overwrite)
    set_terminal_tab_name(branch_name)
    console.print(f"Worktree directory: {path}")
    if not no_editor:
        launch_editor(editor or service.config.editor, path, console)


def _interactive_create(
    service: WorktreeService,
    editor: str | None,
    no_editor: bool,
    from_existing: bool,
) -> tuple[str | None, str | None, bool]:
    console.print("[bold cyan]Welcome to Git Worktree Spawner![/bold cyan]")
    current = service.current_branch()
    if current:
        console.print(f"Current branch: {current}")

    records = service.list_worktrees()
    if len(records) <= 1:
        console.print("\nNo additional worktrees found for this repository.")
    else:
        console.print("\nExisting worktrees:")
        for record in records:
            console.print(f"  {record.path}  [dim]({record.branch_label})[/dim]")

    if from_existing:
        branches = [branch for branch in service.list_branches() if branch != current]
        if not branches:
            raise ValidationError("No existing branches available.")
        branch_name = select("Select an existing branch:", branches)
    else:
        branch_name = _prompt_branch_name()

    if not confirm(f"Create worktree for branch '{branch_name}'?", default=True):
        console.print("Operation cancelled")
        return None, editor, no_editor

    if not no_editor and not editor:
        editor = select(
            "Which editor would you like to launch?",
            EDITOR_CHOICES,
            default=_default_editor_choice(service.config.editor),
        )
        no_editor = editor is None
    return branch_name, editor, no_editor


def _default_editor_choice(configured: str) -> str:
    if any(choice.value == configured for choice in EDITOR_CHOICES):
        return configured
    return DEFAULT_EDITOR


def _prompt_branch_name() -> str:
    while True:
        candidate = text_input("Enter the branch name for the new worktree:")
        verdict = validate_branch_name(candidate)
        if verdict is BRANCH_NAME_OK:
            return candidate
        console.print(f"[red]{verdict}[/red]")


def _interactive_remove(service: WorktreeService) -> None:
    records = service.list_worktrees()
    removable = [record for record in records if not service.is_current(record)]
    if not removable:
        console.print("[yellow]No worktrees available to remove.[/yellow]")
        return
    orphans = branches_without_worktrees(service.list_branches(), records)
    selection = select("Select a worktree or branch to remove:", build_remove_choices(removable, orphans))
    if selection == CANCEL:
        console.print("[dim]Cancelled.[/dim]")
        return
    if isinstance(selection, WorktreeRecord):
        service.remove_worktree(selection)
    else:
        service.remove_branch(selection)


def build_remove_choices(removable: list[WorktreeRecord], orphans: list[str]) -> list[Choice | Separator]:
    """Menu entries for removal: worktrees first, then branches with no worktree.

    Worktrees without a branch carry the record itself as their value.
    """
    choices: list[Choice | Separator] = [Separator("── Worktrees ──")]
    for record in removable:
        status = worktree_status(record)
        suffix = f" [{status}]" if status in {"missing", "prunable"} else ""
        value = record.short_branch or record
        choices.append(Choice(value=value, name=f"{record.name} ({record.branch_label}){suffix}"))
    if orphans:
        choices.append(Separator("── Branches Without Worktrees ──"))
        for branch in orphans:
            choices.append(Choice(value=branch, name=f"{branch} (branch only)"))
    return with_cancel(choices)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report SpawnError as a red message and exit with status 1."""
    try:
        yield
    except SpawnError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        if isinstance(exc, MergeConflictError):
            _print_conflict_help(exc)
        raise typer.Exit(1) from exc


def _print_conflict_help(exc: MergeConflictError) -> None:
    err_console.print("[yellow]\nTo resolve:[/yellow]")
    err_console.print("[dim]1. Fix the conflicts in the listed files[/dim]")
    err_console.print("[dim]2. Stage the resolved files: git add <file>[/dim]")
    err_console.print("[dim]3. Complete the merge: git commit[/dim]")
    err_console.print("[dim]4. Or abort the merge: git merge --abort[/dim]")
    if exc.conflicted_files:
        err_console.print("[red]\nConflicted files:[/red]")
        for path in exc.conflicted_files:
            err_console.print(f"  {path}")


__all__ = ["app", "build_remove_choices"]
