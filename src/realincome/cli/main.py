"""real-income command-line entry point."""

import click
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from realincome import __version__
from realincome.application.use_cases.real_income import ComputeRealIncomeRequest
from realincome.cli.error_handler import handle_cli_error, report_failure
from realincome.cli.utils import async_command, fmt_money
from realincome.domain.exceptions import ErrorKind, RealIncomeError
from realincome.domain.models.computation import ComputationResult
from realincome.domain.models.source import SourceMode
from realincome.infrastructure.config import get_settings
from realincome.infrastructure.containers import get_container
from realincome.infrastructure.logging import configure_logging

app = typer.Typer(
    name="real-income",
    help="Convert a nominal amount into real purchasing power using IMF inflation data.",
    no_args_is_help=True,
)
console = Console()

_FORMULAS = {
    SourceMode.SDMX: "real = nominal × CPI(start) / CPI(latest)",
    SourceMode.DATAMAPPER: "real = nominal / Π (1 + rate/100)",
}


def _setup_logging(verbose: bool) -> None:
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, json=settings.log_json)


def _prompt_mode() -> SourceMode:
    console.print("Data source:")
    console.print(f"  1. {SourceMode.SDMX.label} (monthly CPI index, YYYY-MM)")
    console.print(f"  2. {SourceMode.DATAMAPPER.label} (annual inflation rates, YYYY)")
    choice = typer.prompt("Enter choice", default="1", type=click.Choice(["1", "2"]))
    return SourceMode.DATAMAPPER if choice == "2" else SourceMode.SDMX


def _render_result(result: ComputationResult) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Source", result.mode.label)
    table.add_row("Country", result.country)
    table.add_row("Range", f"{result.start_period} → {result.latest_period}")
    table.add_row("Nominal amount", fmt_money(result.nominal_amount))
    table.add_row("Real amount", f"[bold]{fmt_money(result.real_amount)}[/bold]")
    table.add_row("Purchasing power lost", f"{fmt_money(result.loss)} ({result.loss_pct:.2f}%)")
    table.add_row("Cumulative deflator", f"{result.deflator:.4f}")
    console.print(Panel(table, title="Real income", border_style="green"))

    if result.latest_period != result.date_range.end:
        console.print(
            f"[yellow]Latest available data is {result.latest_period}, "
            f"requested end was {result.date_range.end}[/yellow]"
        )

    observations = Table(title=result.mode.indicator)
    observations.add_column("Period")
    observations.add_column("Value", justify="right")
    for point in result.observations:
        observations.add_row(str(point.period), f"{point.value:.4f}")
    console.print(observations)
    console.print(f"[dim]{_FORMULAS[result.mode]}[/dim]")


@app.command("compute")
@async_command
async def compute(
    mode: SourceMode | None = typer.Option(
        None, "--mode", "-m", case_sensitive=False, help="Data source"
    ),
    country: str | None = typer.Option(None, "--country", "-c", help="ISO3 country code"),
    start: str | None = typer.Option(
        None, "--start", "-s", help="Start period (YYYY-MM for sdmx, YYYY for datamapper)"
    ),
    end: str | None = typer.Option(
        None, "--end", "-e", help="End period (defaults to the current period)"
    ),
    amount: float | None = typer.Option(None, "--amount", "-a", help="Nominal amount"),
    cache: bool = typer.Option(True, "--cache/--no-cache", help="Use the local series cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Compute the real value of a nominal amount over a date range."""
    _setup_logging(verbose)

    if mode is None:
        mode = _prompt_mode()
    if amount is None:
        amount = typer.prompt("Nominal amount", type=float)
    if start is None:
        fmt = "YYYY-MM" if mode is SourceMode.SDMX else "YYYY"
        start = typer.prompt(f"Start period ({fmt})")
    if country is None:
        country = typer.prompt("Country ISO3 code", default="USA")

    container = get_container()
    use_case = container.compute_real_income_use_case()
    try:
        request = ComputeRealIncomeRequest(
            mode=mode,
            country=country,
            start=start,
            end=end,
            nominal_amount=amount,
            use_cache=cache,
        )
    except ValidationError as e:
        handle_cli_error(e)

    try:
        with console.status(f"Fetching {mode.label} data..."):
            response = await use_case.execute(request)
    finally:
        await container.provider_registry().close()

    if not response.success or response.result is None:
        kind = response.error_kind or ErrorKind.SOURCE_UNAVAILABLE
        report_failure(kind, response.error or "Computation failed")
    _render_result(response.result)


@app.command("countries")
@async_command
async def countries(
    mode: SourceMode = typer.Option(
        SourceMode.SDMX, "--mode", "-m", case_sensitive=False, help="Data source"
    ),
    cache: bool = typer.Option(True, "--cache/--no-cache", help="Use the cached country list"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """List the countries a data source knows about."""
    _setup_logging(verbose)

    container = get_container()
    use_case = container.list_countries_use_case()
    try:
        result = await use_case.execute(mode, use_cache=cache)
    except RealIncomeError as e:
        handle_cli_error(e, context="Failed to list countries")
    finally:
        await container.provider_registry().close()

    table = Table(title=f"{mode.label} countries ({len(result)})")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    for entry in result:
        table.add_row(entry.code, entry.name)
    console.print(table)


@app.callback(invoke_without_command=True)
def _root(
    version: bool = typer.Option(False, "--version", help="Show the version and exit"),
) -> None:
    if version:
        console.print(f"real-income {__version__}")
        raise typer.Exit()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
