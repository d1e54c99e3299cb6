"""CLI commands for tableseed."""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn

import click
import psycopg

from tableseed.backends.direct import DirectBackend
from tableseed.codec import decode_archive, decode_comment, format_comment, serialize_rows
from tableseed.config import CONFIG_FILENAME, Config
from tableseed.exceptions import TableSeedError
from tableseed.models import DumpOptions, LoadOptions
from tableseed.seeds import SeedManager

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT, force=True)


def load_config(config_path: Path | None) -> Config:
    """Load the given config file, else the nearest tableseed.toml, else defaults."""
    if config_path is not None:
        return Config.from_toml(config_path)
    try:
        return Config.find_and_load()
    except FileNotFoundError:
        return Config()


@contextmanager
def open_backend(config: Config) -> Iterator[DirectBackend]:
    """Connect to the configured database."""
    with psycopg.connect(config.database.url) as conn:
        yield DirectBackend(
            conn,
            schema=config.database.schema_name,
            name=config.database.connection_name,
            timestamp_columns=config.seed.timestamp_columns,
        )


def fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="tableseed")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help=f"Config file (default: nearest {CONFIG_FILENAME})",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """tableseed - save and load table data as compressed seed files."""
    try:
        config = load_config(config_path)
    except ValueError as e:
        fail(str(e))
    configure_logging("DEBUG" if verbose else config.logging.level)
    ctx.obj = config


@cli.command()
@click.pass_obj
def init(config: Config) -> None:
    """Create tableseed.toml and the seeds directory."""
    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists():
        click.echo(f"Using existing {config_path}")
    else:
        config.to_toml(config_path)
        click.echo(f"Created {config_path}")

    try:
        directory = config.get_store().ensure_directory(config.database.connection_name)
    except TableSeedError as e:
        fail(str(e))
    click.echo(f"Seeds directory: {directory}")


@cli.command()
@click.argument("table")
@click.option("--comment", help="Comment written at the top of the seed file")
@click.pass_obj
def dump(config: Config, table: str, comment: str | None) -> None:
    """Dump TABLE to its seed file."""
    try:
        with open_backend(config) as backend:
            path = SeedManager(backend, config=config).dump(table, DumpOptions(comment=comment))
    except (TableSeedError, psycopg.Error, ValueError) as e:
        fail(str(e))
    click.echo(f"✓ Dumped '{table}' to {path}")


@cli.command()
@click.argument("table")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Rows per insert statement")
@click.option(
    "--on-conflict",
    type=click.Choice(["nothing", "update"]),
    help="What to do with rows whose key already exists (default: fail)",
)
@click.option(
    "--conflict-target",
    multiple=True,
    help="Conflict column (repeatable, default: primary key)",
)
@click.option(
    "--overriding-system-value",
    is_flag=True,
    help="Insert explicit values into GENERATED ALWAYS identity columns",
)
@click.pass_obj
def load(
    config: Config,
    table: str,
    chunk_size: int | None,
    on_conflict: str | None,
    conflict_target: tuple[str, ...],
    overriding_system_value: bool,
) -> None:
    """Load TABLE from its seed file."""
    insert_options: dict = {}
    if on_conflict:
        insert_options["on_conflict"] = on_conflict
    if conflict_target:
        insert_options["conflict_target"] = list(conflict_target)
    if overriding_system_value:
        insert_options["overriding_system_value"] = True

    options = LoadOptions(insert_options=insert_options, chunk_size=chunk_size)
    try:
        with open_backend(config) as backend:
            count = SeedManager(backend, config=config).load(table, options)
    except (TableSeedError, psycopg.Error, ValueError) as e:
        fail(str(e))
    click.echo(f"✓ Loaded {count} rows into '{table}'")


@cli.command()
@click.argument("table")
@click.option("--comment-only", is_flag=True, help="Only print the embedded comment")
@click.option("--json", "output_json", is_flag=True, help="Output rows as JSON")
@click.pass_obj
def show(config: Config, table: str, comment_only: bool, output_json: bool) -> None:
    """Print the contents of TABLE's seed file."""
    store = config.get_store()
    try:
        path = store.resolve_path(config.database.connection_name, table)
        if comment_only:
            with store.open(path) as f:
                comment = decode_comment(f, path)
            if comment is not None:
                click.echo(comment)
            return
        archive = decode_archive(store.read(path), path)
    except (TableSeedError, ValueError) as e:
        fail(str(e))

    if output_json:
        click.echo(json.dumps(archive.rows, indent=2, default=str))
    else:
        click.echo(format_comment(archive.comment) + serialize_rows(archive.rows), nl=False)


@cli.command("list")
@click.pass_obj
def list_tables(config: Config) -> None:
    """List tables that have a seed file."""
    store = config.get_store()
    for table in store.list_tables(config.database.connection_name):
        click.echo(table)


if __name__ == "__main__":
    cli()
