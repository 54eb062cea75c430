from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pgdba.domain.models import ColumnMetadata, ForeignKeyConstraint, Record, TableInfo


def format_value(value: Any) -> str:
    """
    Render one cell as rich markup.

    Database text is escaped so brackets print literally. NULL is shown
    dimmed; a hydrated foreign key shows the referenced table and id followed
    by the referenced row's remaining columns.
    """
    if value is None:
        return "[dim]NULL[/dim]"
    if isinstance(value, Record):
        details = ", ".join(
            f"{escape(column)}={escape(str(inner))}"
            for column, inner in value.as_dict().items()
            if column.lower() != "id"
        )
        label = escape(f"{value.table_schema}.{value.table_name}#{value.id}")
        return f"[cyan]{label}[/cyan] {details}" if details else f"[cyan]{label}[/cyan]"
    return escape(str(value))


def _render(table: Table, console: Optional[Console]) -> None:
    (console or Console()).print(table)


def print_schemas(schemas: Iterable[str], console: Optional[Console] = None) -> None:
    table = Table(title="Schemas", box=box.ROUNDED)
    table.add_column("Schema", style="cyan", no_wrap=True)
    for name in schemas:
        table.add_row(escape(name))
    _render(table, console)


def print_tables(tables: List[TableInfo], console: Optional[Console] = None) -> None:
    table = Table(title="Tables", box=box.ROUNDED)
    table.add_column("Schema", style="cyan", no_wrap=True)
    table.add_column("Table", style="bold")
    table.add_column("Type", style="magenta")
    for info in tables:
        table.add_row(escape(info.table_schema), escape(info.table_name), escape(info.table_type))
    _render(table, console)


def print_columns(columns: List[ColumnMetadata], console: Optional[Console] = None) -> None:
    title = "Columns"
    if columns:
        title = escape(f"Columns of {columns[0].table_schema}.{columns[0].table_name}")
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Column", style="cyan", no_wrap=True)
    table.add_column("Type", style="green")
    table.add_column("Nullable", justify="center")
    table.add_column("Default", style="yellow")
    for column in columns:
        table.add_row(
            str(column.ordinal_position),
            escape(column.column_name),
            escape(column.data_type),
            "yes" if column.is_nullable else "no",
            escape(column.column_default or ""),
        )
    _render(table, console)


def print_records(
    records: List[Record],
    title: str = "Records",
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    if not records:
        console.print("[yellow]No records to display.[/yellow]")
        return

    table = Table(title=escape(title), box=box.ROUNDED, caption=f"{len(records)} row(s)")
    for column in records[0].columns:
        table.add_column(escape(column), style="cyan" if column.lower() == "id" else None)
    for record in records:
        table.add_row(*(format_value(value) for value in record.values))
    console.print(table)


def print_foreign_keys(
    foreign_keys: List[ForeignKeyConstraint], console: Optional[Console] = None
) -> None:
    console = console or Console()
    if not foreign_keys:
        console.print("[yellow]No foreign keys.[/yellow]")
        return
    table = Table(title="Foreign keys", box=box.ROUNDED)
    table.add_column("Column", style="cyan", no_wrap=True)
    table.add_column("References", style="green")
    for fk in foreign_keys:
        table.add_row(
            escape(fk.column_name),
            escape(f"{fk.foreign_table_schema}.{fk.foreign_table_name}({fk.foreign_column_name})"),
        )
    console.print(table)


def print_foreign_records(
    foreign_records: Dict[str, List[Dict[str, Any]]], console: Optional[Console] = None
) -> None:
    console = console or Console()
    if not foreign_records:
        console.print("[yellow]No foreign keys.[/yellow]")
        return
    for column, rows in foreign_records.items():
        if not rows:
            console.print(f"[yellow]No candidate rows for {escape(column)}.[/yellow]")
            continue
        table = Table(title=f"Candidates for {escape(column)}", box=box.ROUNDED)
        for name in rows[0]:
            table.add_column(escape(name))
        for row in rows:
            table.add_row(*(format_value(value) for value in row.values()))
        console.print(table)


def to_json(payload: Any) -> str:
    """Serialize Records (and anything holding them) for `--json` output."""

    def _default(value: Any) -> Any:
        if isinstance(value, Record):
            return value.as_dict()
        return str(value)

    return json.dumps(payload, indent=2, default=_default)


__all__ = [
    "format_value",
    "print_columns",
    "print_foreign_keys",
    "print_foreign_records",
    "print_records",
    "print_schemas",
    "print_tables",
    "to_json",
]
