"""Operator command line.

Thin layer over the reconciliation engine: parse arguments, call one
operation, render the result. No reconciliation logic lives here.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from adapters.json_exporter import dumps_record, export_record_json
from cli import doctor
from cli.ui_components import build_kinds_table, build_record_table, print_banner
from core.config import load_settings
from core.domain.kinds import ResourceKind
from core.domain.models import LocalRecord, RecordState
from core.errors import ReconcileError
from core.logging import setup_logging
from core.services.provider import Provider

app = typer.Typer(
    no_args_is_help=True,
    help="Inspect and manage automation platform resources.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _parse_kind(value: str) -> ResourceKind:
    try:
        return ResourceKind.from_name(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _provider(api_token: str | None, base_url: str | None) -> Provider:
    settings = load_settings()
    setup_logging(settings)
    return Provider.from_settings(settings, api_token=api_token, base_url=base_url)


def _fail(exc: ReconcileError) -> NoReturn:
    _console.print(f"[red]Error:[/red] {escape(str(exc))}")
    raise typer.Exit(code=1)


@app.command()
def kinds() -> None:
    """List the resource kinds and their fields."""

    print_banner(_console)
    _console.print(build_kinds_table())


@app.command()
def show(
    kind: str = typer.Argument(..., help="Resource kind (scenario, connection, webhook, ...)."),
    identifier: str = typer.Argument(..., help="Remote identifier."),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Also write the record to a JSON file."),
    api_token: str | None = typer.Option(None, "--token", envvar="MAKE_API_TOKEN", help="API token."),
    base_url: str | None = typer.Option(None, "--base-url", help="API base URL."),
) -> None:
    """Fetch one remote object and render it the way it would be stored."""

    resource_kind = _parse_kind(kind)
    try:
        reconciler = _provider(api_token, base_url).reconciler(resource_kind)
        record: LocalRecord = asyncio.run(reconciler.lookup(identifier))
    except ReconcileError as exc:
        _fail(exc)

    if as_json:
        typer.echo(dumps_record(record))
    else:
        _console.print(build_record_table(record))
    if output is not None:
        path = export_record_json(record=record, output_path=output)
        _console.print(f"[green]Saved:[/green] {path}")


@app.command()
def delete(
    kind: str = typer.Argument(..., help="Resource kind."),
    identifier: str = typer.Argument(..., help="Remote identifier."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    api_token: str | None = typer.Option(None, "--token", envvar="MAKE_API_TOKEN", help="API token."),
    base_url: str | None = typer.Option(None, "--base-url", help="API base URL."),
) -> None:
    """Delete one remote object (an already absent object is not an error)."""

    resource_kind = _parse_kind(kind)
    if not yes:
        typer.confirm(f"Delete {resource_kind.label()} {identifier}?", abort=True)

    record = LocalRecord(kind=resource_kind, id=identifier, state=RecordState.SYNCED)
    try:
        reconciler = _provider(api_token, base_url).reconciler(resource_kind)
        record = asyncio.run(reconciler.delete(record))
    except ReconcileError as exc:
        _fail(exc)

    _console.print(f"[green]Gone:[/green] {resource_kind.label()} {record.id}")


def run() -> None:
    app()
