"""Interactive prompt helpers built on InquirerPy."""

from __future__ import annotations

import sys
from typing import Any, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice
from InquirerPy.separator import Separator

from .exceptions import UserAbort, ValidationError

CANCEL = "__cancel__"


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise ValidationError(
            "Interactive mode requires a TTY. Provide the missing arguments to run non-interactively."
        )


def select(message: str, choices: Sequence[Choice | Separator | str], default: Any = None) -> Any:
    _ensure_tty()
    try:
        return inquirer.select(
            message=message,
            choices=list(choices),
            default=default,
            max_height=15,
        ).execute()
    except KeyboardInterrupt as exc:
        raise UserAbort("User cancelled the prompt.") from exc


def text_input(message: str, default: str = "") -> str:
    _ensure_tty()
    try:
        return inquirer.text(message=message, default=default).execute().strip()
    except KeyboardInterrupt as exc:
        raise UserAbort("User cancelled the prompt.") from exc


def confirm(message: str, default: bool = True) -> bool:
    _ensure_tty()
    try:
        return bool(inquirer.confirm(message=message, default=default).execute())
    except KeyboardInterrupt as exc:
        raise UserAbort("User cancelled the prompt.") from exc


def with_cancel(choices: list[Choice | Separator]) -> list[Choice | Separator]:
    """Append a separator and a Cancel entry whose value is ``CANCEL``."""
    return [*choices, Separator(), Choice(value=CANCEL, name="Cancel")]


__all__ = ["CANCEL", "Choice", "Separator", "select", "text_input", "confirm", "with_cancel"]
