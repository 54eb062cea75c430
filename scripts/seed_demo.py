"""
Demo schema seeding script for pgdba.

Creates a small `demo` schema with customers, orders (referencing customers)
and a standalone tags table, so every command of the CLI has something to
show. Also used by the integration tests.
"""

from __future__ import annotations

import sys

import psycopg
import typer

from pgdba.infrastructure.db_factory import build_dsn

app = typer.Typer(help="Create and fill the pgdba demo schema.")

DEMO_SCHEMA = "demo"

SCHEMA_SQL = f"""
DROP SCHEMA IF EXISTS {DEMO_SCHEMA} CASCADE;
CREATE SCHEMA {DEMO_SCHEMA};

CREATE TABLE {DEMO_SCHEMA}.customers (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT
);

CREATE TABLE {DEMO_SCHEMA}.orders (
    id SERIAL PRIMARY KEY,
    customer_id INTEGER REFERENCES {DEMO_SCHEMA}.customers (id),
    product TEXT NOT NULL,
    quantity INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE {DEMO_SCHEMA}.tags (
    id SERIAL PRIMARY KEY,
    label TEXT NOT NULL
);
"""

CUSTOMERS = [
    ("Ada Lovelace", "ada@example.com"),
    ("Grace Hopper", "grace@example.com"),
    ("Edsger Dijkstra", None),
]

# customer_id refers to the SERIAL ids assigned to CUSTOMERS above.
ORDERS = [
    (1, "keyboard", 1),
    (1, "monitor", 2),
    (2, "compiler", 1),
    (None, "gift card", 3),
]

TAGS = ["new", "priority"]


def seed(dsn: str) -> None:
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
            cur.executemany(
                f"INSERT INTO {DEMO_SCHEMA}.customers (name, email) VALUES (%s, %s)", CUSTOMERS
            )
            cur.executemany(
                f"INSERT INTO {DEMO_SCHEMA}.orders (customer_id, product, quantity) "
                "VALUES (%s, %s, %s)",
                ORDERS,
            )
            cur.executemany(f"INSERT INTO {DEMO_SCHEMA}.tags (label) VALUES (%s)", [(t,) for t in TAGS])
        conn.commit()


@app.command()
def main(
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
) -> None:
    """
    Drop and recreate the demo schema.
    """
    seed(dsn or build_dsn())
    typer.echo(
        f"Seeded schema '{DEMO_SCHEMA}': {len(CUSTOMERS)} customers, "
        f"{len(ORDERS)} orders, {len(TAGS)} tags."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
