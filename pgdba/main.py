from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, TypeVar

import typer

from pgdba import reporter
from pgdba.config import Settings, get_settings, load_connection_profile
from pgdba.domain.models import Record
from pgdba.errors import ConfigurationError, DataAccessError
from pgdba.service import DataAccess
from pgdba.utils.logging import configure_logging

T = TypeVar("T")

app = typer.Typer(help="Browse and edit any PostgreSQL table from the command line.")


def _parse_assignments(assignments: List[str], nulls: List[str]) -> Dict[str, Optional[str]]:
    """Turn `--set col=value` and `--null col` options into a column mapping."""
    values: Dict[str, Optional[str]] = {}
    for item in assignments:
        column, sep, value = item.partition("=")
        if not sep or not column:
            raise typer.BadParameter(f"expected COLUMN=VALUE, got {item!r}", param_hint="--set")
        values[column] = value
    for column in nulls:
        values[column] = None
    return values


def _run(ctx: typer.Context, operation: Callable[[DataAccess], Awaitable[T]]) -> T:
    settings: Settings = ctx.obj

    async def runner() -> T:
        async with DataAccess.connect(settings) as dba:
            return await operation(dba)

    try:
        return asyncio.run(runner())
    except DataAccessError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def configure(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a dba.config.json file with named connection profiles.",
    ),
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Connection profile to use (default: the file's `connection` entry).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL (e.g., DEBUG to print every statement).",
    ),
) -> None:
    """
    Resolve settings once for every command.
    """
    try:
        settings = get_settings()
        path = config or settings.config_file
        if profile and path is None:
            raise ConfigurationError("--profile needs --config or DBA_CONFIG_FILE.")
        if path is not None and (config is not None or profile is not None):
            settings = settings.with_profile(load_connection_profile(path, profile))
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    configure_logging(level=log_level or settings.log_level, json_logs=settings.log_json)
    ctx.obj = settings


@app.command()
def info(ctx: typer.Context) -> None:
    """
    Show effective connection settings.
    """
    settings: Settings = ctx.obj
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"sslmode={settings.db_sslmode} | "
        f"pool=({settings.pool_min_size},{settings.pool_max_size}) timeout={settings.pool_timeout}s"
    )


@app.command()
def schemas(ctx: typer.Context) -> None:
    """List every schema."""
    reporter.print_schemas(_run(ctx, lambda dba: dba.list_schemas()))


@app.command()
def tables(ctx: typer.Context, schema: str = typer.Argument(..., help="Schema name.")) -> None:
    """List the tables of SCHEMA."""
    reporter.print_tables(_run(ctx, lambda dba: dba.list_tables(schema)))


@app.command()
def columns(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
) -> None:
    """Describe the columns of SCHEMA.TABLE."""
    reporter.print_columns(_run(ctx, lambda dba: dba.list_columns(schema, table)))


@app.command()
def records(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
    hydrate: bool = typer.Option(False, "--hydrate", help="Resolve foreign keys into nested rows."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """Print every row of SCHEMA.TABLE."""
    rows = _run(ctx, lambda dba: dba.get_records(schema, table, hydrate=hydrate))
    if as_json:
        typer.echo(reporter.to_json(rows))
    else:
        reporter.print_records(rows, title=f"{schema}.{table}")


@app.command()
def record(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
    record_id: int = typer.Argument(..., metavar="ID", help="Value of the id column."),
    hydrate: bool = typer.Option(False, "--hydrate", help="Resolve foreign keys into nested rows."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """Print the row of SCHEMA.TABLE whose id is ID."""
    row = _run(ctx, lambda dba: dba.get_record(schema, table, record_id, hydrate=hydrate))
    if row is None:
        typer.echo(f"No record with id {record_id} in {schema}.{table}.", err=True)
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(reporter.to_json(row))
    else:
        reporter.print_records([row], title=f"{schema}.{table}")


@app.command("foreign-keys")
def foreign_keys(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
) -> None:
    """List the foreign-key constraints of SCHEMA.TABLE."""
    reporter.print_foreign_keys(_run(ctx, lambda dba: dba.get_foreign_keys(schema, table)))


@app.command("foreign-records")
def foreign_records(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
) -> None:
    """Show every row a foreign-key column of SCHEMA.TABLE may point to."""
    reporter.print_foreign_records(_run(ctx, lambda dba: dba.get_foreign_records(schema, table)))


@app.command()
def insert(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
    assignments: List[str] = typer.Option([], "--set", "-s", help="COLUMN=VALUE, repeatable."),
    nulls: List[str] = typer.Option([], "--null", help="COLUMN to set to NULL, repeatable."),
) -> None:
    """Insert a row into SCHEMA.TABLE and print its new id."""
    new_row = Record.from_row(_parse_assignments(assignments, nulls), schema, table)
    new_id = _run(ctx, lambda dba: dba.insert_record(schema, table, new_row))
    typer.echo(f"Inserted {schema}.{table} id={new_id}")


@app.command()
def update(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
    record_id: int = typer.Argument(..., metavar="ID", help="Value of the id column."),
    assignments: List[str] = typer.Option([], "--set", "-s", help="COLUMN=VALUE, repeatable."),
    nulls: List[str] = typer.Option([], "--null", help="COLUMN to set to NULL, repeatable."),
) -> None:
    """Change columns of the row of SCHEMA.TABLE whose id is ID."""
    changes = _parse_assignments(assignments, nulls)
    if not changes:
        raise typer.BadParameter("nothing to update", param_hint="--set/--null")

    async def apply(dba: DataAccess) -> Optional[int]:
        existing = await dba.get_record(schema, table, record_id)
        if existing is None:
            return None
        for column, value in changes.items():
            try:
                existing.set(column, value)
            except KeyError:
                raise typer.BadParameter(f"{schema}.{table} has no column {column!r}") from None
        return await dba.update_record(schema, table, existing)

    affected = _run(ctx, apply)
    if affected is None:
        typer.echo(f"No record with id {record_id} in {schema}.{table}.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Updated {affected} row(s) in {schema}.{table}")


@app.command()
def delete(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema name."),
    table: str = typer.Argument(..., help="Table name."),
    record_id: int = typer.Argument(..., metavar="ID", help="Value of the id column."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete the row of SCHEMA.TABLE whose id is ID."""
    if not yes:
        typer.confirm(f"Delete {schema}.{table} id={record_id}?", abort=True)
    affected = _run(ctx, lambda dba: dba.delete_record(schema, table, record_id))
    typer.echo(f"Deleted {affected} row(s) from {schema}.{table}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
