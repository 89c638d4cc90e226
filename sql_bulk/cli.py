#!/usr/bin/env python3
"""
Command-line interface for SQL Bulk.

Commands:
    benchmark  Compare row-by-row and batched writes on SQLite or PostgreSQL
    plan       Show how a row count is split into batches
    render     Print the statements a CSV import would issue (dry run)
    dialects   List the built-in dialect presets
"""
import sqlite3
import sys
from typing import Optional

import click
import polars as pl
from rich.console import Console
from rich.table import Table

from sql_bulk import __version__
from sql_bulk.adapters.generic import GenericAdapter
from sql_bulk.benchmark import render_results, run_benchmark
from sql_bulk.config import available_dialects, get_dialect, limits_from_env, load_limits
from sql_bulk.exceptions import SQLBulkError
from sql_bulk.models import EncodingMode
from sql_bulk.planner import plan as plan_batches
from sql_bulk.query_collector import QueryCollector
from sql_bulk.utils import parse_column_list, setup_logging
from sql_bulk.writer import BulkWriter

console = Console()

MODE_CHOICE = click.Choice([m.value for m in EncodingMode])


def resolve_limits(dialect: str, config_file: Optional[str], batch_size: Optional[int]):
    """Build dialect limits from a preset, an optional config file and the environment."""
    if config_file:
        limits = load_limits(config_file, dialect)
    else:
        limits = get_dialect(dialect)
    limits = limits_from_env(limits)
    if batch_size is not None:
        limits = limits.with_overrides(batch_size=batch_size)
    return limits


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    SQL Bulk - write many rows with few statements.

    Inserts are batched into multi-row statements that respect the target
    dialect's parameter and statement size limits; updates are staged in a
    temporary table and applied with a single joined UPDATE per batch.
    """
    pass


@cli.command()
@click.option('--rows', '-n', default=10000, type=int, help='Number of synthetic rows (default: 10000)')
@click.option('--batch-size', '-b', type=int, help='Rows per batched statement (default: dialect setting)')
@click.option('--database', default=':memory:', help='SQLite database path (default: in-memory)')
@click.option('--dsn', help='PostgreSQL DSN; benchmarks PostgreSQL instead of SQLite')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='JSON file with dialect overrides')
@click.option('--seed', default=42, type=int, help='Random seed for synthetic data (default: 42)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def benchmark(rows: int, batch_size: Optional[int], database: str, dsn: Optional[str],
              config_file: Optional[str], seed: int, verbose: bool):
    """
    Benchmark row-by-row writes against batched writes.

    Runs row-by-row INSERT, batched INSERT, row-by-row UPDATE and staged bulk
    UPDATE against a fresh table and prints a comparison table.
    """
    logger = setup_logging(verbose)
    try:
        if dsn:
            from sql_bulk.adapters.postgresql import PostgreSQLAdapter
            limits = resolve_limits("postgresql", config_file, batch_size)
            adapter = PostgreSQLAdapter(connection_params={"dsn": dsn})
            target = "PostgreSQL"
        else:
            limits = resolve_limits("sqlite", config_file, batch_size)
            adapter = GenericAdapter(sqlite3.connect(database))
            target = f"SQLite ({database})"

        console.print(f"[bold]Benchmarking {rows:,} rows on {target}[/bold]")
        try:
            with console.status("[bold blue]Running benchmark...[/bold blue]"):
                results = run_benchmark(adapter, limits, rows, seed=seed)
        finally:
            adapter.close()
        render_results(results, console)
    except SQLBulkError as e:
        logger.error(f"Benchmark failed: {str(e)}", exc_info=verbose)
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)


@cli.command()
@click.option('--rows', '-n', required=True, type=int, help='Number of rows to write')
@click.option('--columns', '-c', required=True, type=int, help='Number of columns per row')
@click.option('--dialect', '-d', default='generic', type=click.Choice(available_dialects()),
              help='Target dialect (default: generic)')
@click.option('--mode', '-m', default=EncodingMode.LITERAL_VALUES.value, type=MODE_CHOICE,
              help='Encoding mode (default: literal_values)')
@click.option('--batch-size', '-b', type=int, help='Rows per literal statement')
@click.option('--show-ranges', is_flag=True, help='List every batch range')
def plan(rows: int, columns: int, dialect: str, mode: str, batch_size: Optional[int], show_ranges: bool):
    """Show how ROWS rows of COLUMNS columns are split into batches."""
    try:
        limits = resolve_limits(dialect, None, batch_size)
        batch_plan = plan_batches(rows, columns, limits, EncodingMode(mode))
    except SQLBulkError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)

    console.print(f"[bold]{limits.name}[/bold] {mode}: batch size {batch_plan.batch_size}, "
                  f"{len(batch_plan)} batches")
    if show_ranges:
        table = Table()
        table.add_column("Batch", justify="right")
        table.add_column("Start", justify="right")
        table.add_column("Stop", justify="right")
        table.add_column("Rows", justify="right")
        for batch_range in batch_plan:
            table.add_row(str(batch_range.index + 1), str(batch_range.start),
                          str(batch_range.stop), str(batch_range.size))
        console.print(table)


@cli.command()
@click.option('--csv-file', '-f', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Path to the CSV file')
@click.option('--table-name', '-t', required=True, help='Target table name')
@click.option('--columns', help='Column list with types, e.g. "id,salary:numeric,hired:date" '
                                '(default: every CSV column as text)')
@click.option('--update-key', help='Render a staged UPDATE keyed on this column instead of an INSERT')
@click.option('--delimiter', default=',', help='CSV delimiter (default: comma)')
@click.option('--dialect', '-d', default='generic', type=click.Choice(available_dialects()),
              help='Target dialect (default: generic)')
@click.option('--mode', '-m', default=EncodingMode.LITERAL_VALUES.value, type=MODE_CHOICE,
              help='Encoding mode for inserts (default: literal_values)')
@click.option('--batch-size', '-b', type=int, help='Rows per literal statement')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='JSON file with dialect overrides')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def render(csv_file: str, table_name: str, columns: Optional[str], update_key: Optional[str],
           delimiter: str, dialect: str, mode: str, batch_size: Optional[int],
           config_file: Optional[str], verbose: bool):
    """
    Print the statements an import of CSV_FILE would issue, without a database.
    """
    logger = setup_logging(verbose)
    try:
        limits = resolve_limits(dialect, config_file, batch_size)

        # Read every field as text; the encoder applies the column types
        df = pl.read_csv(csv_file, separator=delimiter, infer_schema_length=0)
        specs = parse_column_list(columns) if columns else parse_column_list(",".join(df.columns))
        df = df.select([spec.name for spec in specs])
        rows = df.rows()
        logger.info(f"Read {len(rows)} rows from {csv_file}")

        collector = QueryCollector()
        writer = BulkWriter(None, limits, EncodingMode(mode), dry_run=True, query_collector=collector)
        if update_key:
            key = next((spec for spec in specs if spec.name == update_key), None)
            if key is None:
                raise click.BadParameter(f"{update_key} is not one of the columns",
                                         param_hint="--update-key")
            changed = [spec for spec in specs if spec.name != update_key]
            ordered = [(row[specs.index(key)],) + tuple(row[specs.index(s)] for s in changed)
                       for row in rows]
            result = writer.update_rows(table_name, key, changed, ordered)
        else:
            result = writer.insert_rows(table_name, specs, rows)
    except (SQLBulkError, pl.exceptions.PolarsError) as e:
        logger.error(f"Error rendering statements: {str(e)}", exc_info=verbose)
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)

    for query in collector.get_queries():
        click.echo(query["query"] + ";")
        if query["params"]:
            click.echo(f"-- params: {list(query['params'])}")
    console.print(f"[bold green]✓[/bold green] {result.rows} rows, {result.batches} batches, "
                  f"{len(collector.queries)} statements", highlight=False)


@cli.command()
def dialects():
    """List the built-in dialect presets."""
    table = Table(title="Dialects")
    table.add_column("Name")
    table.add_column("Max parameters", justify="right")
    table.add_column("Max statement length", justify="right")
    table.add_column("Batch size", justify="right")
    table.add_column("Placeholder")
    table.add_column("Rows")
    table.add_column("Update")
    for name in available_dialects():
        limits = get_dialect(name)
        table.add_row(
            name,
            f"{limits.max_bound_parameters:,}",
            f"{limits.max_statement_length:,}" if limits.max_statement_length else "-",
            str(limits.batch_size),
            limits.placeholder,
            limits.row_style,
            limits.update_style,
        )
    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
