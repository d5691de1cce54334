"""
Interactive REPL Driver.

Runs a read-parse-evaluate loop over a ``typer.Typer`` application used in
multicall style: the first word of each line selects the command, the rest are
its arguments. Commands return ``ControlFlow.EXIT`` to leave the loop; any
other return value keeps it running.

Example:
    >>> import typer
    >>> from utility.repl import ControlFlow, repl
    >>> app = typer.Typer()
    >>>
    >>> @app.command()
    ... def add(name: str, age: int) -> None:
    ...     print(f"Added person: {name} ({age})")
    >>>
    >>> @app.command(name="exit")
    ... def exit_() -> ControlFlow:
    ...     return ControlFlow.EXIT
    >>>
    >>> repl(app)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import shlex
import sys
from enum import Enum
from typing import Any, Callable

import click
import typer

from .constants import LOGGER_NAME

try:  # typer >= 0.27 ships its own copy of click
    from typer._click.exceptions import ClickException as _TyperClickException
except ImportError:  # older typer builds commands on click itself
    _TyperClickException = click.ClickException
try:
    from typer.exceptions import Abort as _TyperAbort
except ImportError:
    _TyperAbort = click.Abort

logger = logging.getLogger(LOGGER_NAME)

# Errors raised by the parser of either click, or by commands using click directly
USAGE_ERRORS: tuple[type[Exception], ...] = (click.ClickException, _TyperClickException)
ABORTS: tuple[type[BaseException], ...] = (click.Abort, _TyperAbort)

MALFORMED_INPUT = "error: malformed input"


class ControlFlow(Enum):
    """Tells the REPL whether to keep reading lines."""

    CONTINUE = "continue"
    EXIT = "exit"


def split_line(line: str) -> list[str] | None:
    """
    Split a command line into words with shell quoting rules.

    Returns:
        The words, or None if the line is malformed (e.g. unbalanced quotes).
    """
    try:
        return shlex.split(line.strip())
    except ValueError:
        return None


def evaluate(command: Any, words: list[str]) -> ControlFlow:
    """
    Parse ``words`` against ``command`` and run the selected callback.

    Usage errors are printed and treated as ``ControlFlow.CONTINUE``.
    ``--help`` prints the help text and also continues.

    Args:
        command: Click command built from the typer application.
        words: Already split input line, command name first.

    Returns:
        ControlFlow.EXIT if the callback returned it, CONTINUE otherwise.
    """
    try:
        result = command.main(args=words, prog_name="", standalone_mode=False)
    except USAGE_ERRORS as e:
        e.show(file=sys.stdout)
        return ControlFlow.CONTINUE
    except ABORTS:
        return ControlFlow.CONTINUE

    if result is ControlFlow.EXIT:
        return ControlFlow.EXIT
    return ControlFlow.CONTINUE


def repl(
    app: typer.Typer,
    *,
    read_line: Callable[[str], str] = input,
    prompt: str = "> ",
) -> None:
    """
    Run the REPL until a command returns ``ControlFlow.EXIT`` or input ends.

    Args:
        app: Typer application; register at least two commands so typer
            dispatches on the first word.
        read_line: Function printing the prompt and returning one line
            (``input`` by default). Raising EOFError ends the loop.
        prompt: Prompt shown before each line.
    """
    command = typer.main.get_command(app)
    control_flow = ControlFlow.CONTINUE

    while control_flow is not ControlFlow.EXIT:
        try:
            line = read_line(prompt)
        except EOFError:
            logger.debug("REPL input closed")
            break

        words = split_line(line)
        if words is None:
            print(MALFORMED_INPUT)
            continue
        if not words:
            continue

        control_flow = evaluate(command, words)

