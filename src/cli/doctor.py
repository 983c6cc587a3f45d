"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adapters.http_client import HttpxTransport
from core.config import (
    DEFAULT_BASE_URL,
    ClientConfig,
    get_user_env_file,
    load_settings,
    read_user_env_vars,
    write_user_env_vars,
)
from core.domain.kinds import ResourceKind
from core.domain.schema import get_schema
from core.errors import ConfigurationError, TransportError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_api(config: ClientConfig) -> tuple[bool, str]:
    """Authenticated GET against the organizations collection."""

    path = get_schema(ResourceKind.ORGANIZATION).collection_path
    try:
        response = await HttpxTransport(config).send("GET", path)
    except TransportError as exc:
        return False, str(exc)
    if response.status_code in (401, 403):
        return False, f"HTTP {response.status_code} (token rejected)"
    return True, f"HTTP {response.status_code}"


def _fail_table(table: Table, check: str, exc: ConfigurationError) -> NoReturn:
    table.add_row(check, "FAIL", escape(str(exc)))
    _console.print(table)
    _console.print("\n[yellow]Hint:[/yellow] run `make-reconciler doctor configure`.")
    raise typer.Exit(code=1)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    table = Table(title="make-reconciler doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    stored = read_user_env_vars()
    table.add_row("User config", "OK", f"{get_user_env_file()} ({len(stored)} stored)")

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        _fail_table(table, "Settings", exc)
    table.add_row("Base URL", "OK", settings.base_url)

    try:
        config = ClientConfig.from_settings(settings)
    except ConfigurationError as exc:
        _fail_table(table, "API token", exc)

    table.add_row("API token", "OK", "set")
    ok_api, detail_api = asyncio.run(_check_api(config))
    table.add_row("API connectivity", "OK" if ok_api else "FAIL", escape(detail_api))

    _console.print(table)
    if not ok_api:
        raise typer.Exit(code=1)


@app.command()
def configure() -> None:
    """Interactive setup (stores token and base URL in the user config .env)."""

    try:
        default_url = load_settings().base_url
    except ConfigurationError as exc:
        _console.print(f"[yellow]Warning:[/yellow] {escape(str(exc))}")
        default_url = DEFAULT_BASE_URL

    base_url = typer.prompt("API base URL", default=default_url, show_default=True).strip()
    api_token = typer.prompt("API token", hide_input=True, confirmation_prompt=False).strip()

    if not api_token:
        raise typer.BadParameter("api token is required")

    env_path = write_user_env_vars(
        {
            "MAKE_BASE_URL": base_url or None,
            "MAKE_API_TOKEN": api_token,
        }
    )

    _console.print(f"[green]Saved configuration to:[/green] {env_path}")
