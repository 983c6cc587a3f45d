"""CLI UI components (Rich).

Keeps command logic apart from presentation so tables can be reused across
commands.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.kinds import ResourceKind
from core.domain.models import LocalRecord, is_unknown
from core.domain.schema import SCHEMAS


def print_banner(console: Console) -> None:
    title = Text("make-reconciler", style="bold cyan")
    subtitle = Text(" • ".join(f"{kind.label().capitalize()}s" for kind in ResourceKind), style="dim")
    console.print(Panel(Text.assemble(title, "\n", subtitle), border_style="cyan", padding=(0, 2)))


def _render(value: object) -> Text:
    if value is None:
        return Text("null", style="dim")
    if is_unknown(value):
        return Text("(known after apply)", style="yellow")
    if isinstance(value, bool):
        return Text("true" if value else "false", style="green" if value else "red")
    if isinstance(value, dict):
        return Text("\n".join(f"{k} = {v}" for k, v in sorted(value.items())))
    return Text(str(value))


def build_record_table(record: LocalRecord) -> Table:
    table = Table(title=f"{record.kind.label().title()} {record.id or ''}".strip())
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("id", _render(record.id))
    for name, value in record.values.items():
        table.add_row(name, _render(value))
    table.add_row("state", Text(record.state.value, style="magenta"))
    return table


def build_kinds_table() -> Table:
    table = Table(title="Resource kinds")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Path", style="magenta")
    table.add_column("Required", style="green")
    table.add_column("Optional", style="white")
    table.add_column("Computed", style="dim")
    for kind, schema in SCHEMAS.items():
        by_role: dict[str, list[str]] = {"required": [], "optional": [], "computed": ["id"]}
        for descriptor in schema.fields:
            by_role[descriptor.role.value].append(descriptor.name)
        table.add_row(
            kind.value,
            schema.collection_path,
            ", ".join(by_role["required"]),
            ", ".join(by_role["optional"]) or "-",
            ", ".join(by_role["computed"]),
        )
    return table
