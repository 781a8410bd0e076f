"""Map errors onto CLI output and exit codes."""

from typing import NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console

from realincome.domain.exceptions import ErrorKind, RealIncomeError

console = Console(stderr=True)

# Input errors exit with 2 (usage), everything else with 1.
INPUT_ERROR_KINDS = frozenset(
    {
        ErrorKind.INVALID_DATE_FORMAT,
        ErrorKind.INVALID_RANGE,
        ErrorKind.GRANULARITY_MISMATCH,
        ErrorKind.INVALID_COUNTRY_CODE,
    }
)


def exit_code_for(kind: ErrorKind) -> int:
    return 2 if kind in INPUT_ERROR_KINDS else 1


def report_failure(kind: ErrorKind, message: str, context: str = "") -> NoReturn:
    """Print a typed failure and exit with the code for its kind."""
    prefix = f"{context}: " if context else ""
    console.print(f"[bold red]✗ {prefix}{message}[/bold red] [dim]({kind.value})[/dim]")
    raise typer.Exit(exit_code_for(kind))


def handle_cli_error(error: Exception, context: str = "") -> NoReturn:
    """Print a rich-formatted error and exit non-zero."""
    if isinstance(error, RealIncomeError):
        report_failure(error.kind, error.message, context)
    prefix = f"{context}: " if context else ""
    if isinstance(error, ValidationError):
        for item in error.errors():
            field = ".".join(str(part) for part in item["loc"]) or "input"
            console.print(f"[bold red]✗ {prefix}{field}: {item['msg']}[/bold red]")
        raise typer.Exit(2)
    console.print(f"[bold red]✗ {prefix}Unexpected error: {error}[/bold red]")
    raise typer.Exit(1)
