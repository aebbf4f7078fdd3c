"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from ghrelease.core.errors import ErrorCode
from ghrelease.core.result import Err, Result
from ghrelease.output.console import Style

if TYPE_CHECKING:
    from ghrelease.output.console import ConsoleProtocol


T = TypeVar("T")
E = TypeVar("E")


def exit_on_error[T, E](
    result: Result[T, E],
    console: ConsoleProtocol,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the Ok value, or print the error and exit.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        console.error(message)
        if hint:
            console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))
    return result.value


def split_values(values: list[str] | None) -> tuple[str, ...]:
    """Flatten repeated and comma-separated option values.

    CI plugin settings arrive as one comma-separated environment variable,
    while the command line repeats the option.
    """
    out: list[str] = []
    for value in values or []:
        out.extend(part.strip() for part in value.split(",") if part.strip())
    return tuple(out)


def exit_with_code(code: int) -> NoReturn:
    """Exit with the given process code."""
    raise typer.Exit(code=code)
