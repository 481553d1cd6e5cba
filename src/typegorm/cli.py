"""
Command-line interface for typegorm.

Provides inspect and check commands for looking at the metadata derived from
annotated record classes.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from typegorm import __version__
from typegorm.config import TypegormConfig, import_model, load_config
from typegorm.errors import ConfigError, MetadataError
from typegorm.metadata.registry import MetadataRegistry
from typegorm.models import EntityMetadata

console = Console()
# Log records go to stderr, command output to stdout
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False, level: int = logging.WARNING) -> None:
    """Configure logging with Rich handler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="typegorm")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: typegorm.yaml in ., ~/.typegorm/, /etc/typegorm/)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """
    typegorm - relational metadata from annotated record classes
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(f"failed to load configuration: {e}")

    setup_logging(verbose, config.logging.numeric_level)
    ctx.obj = {"config": config, "registry": MetadataRegistry()}


def _print_entity(meta: EntityMetadata) -> None:
    columns_table = Table(title=f"{meta.name} -> {meta.table_name}")
    columns_table.add_column("Field", style="cyan")
    columns_table.add_column("Column", style="green")
    columns_table.add_column("Type", style="yellow")
    columns_table.add_column("PK", justify="center")
    columns_table.add_column("Null", justify="center")
    columns_table.add_column("Unique", justify="center")
    columns_table.add_column("Default")
    columns_table.add_column("Index")

    for col in meta.columns:
        columns_table.add_row(
            col.field_name,
            col.column_name,
            escape(col.db_type or col.python_type),
            "x" if col.is_primary_key else "",
            "x" if col.is_nullable else "",
            "x" if col.is_unique else "",
            escape(col.default_value or ""),
            col.unique_index_name or col.index_name,
        )

    console.print(columns_table)

    if meta.relations:
        rel_table = Table(title=f"{meta.name} relations")
        rel_table.add_column("Field", style="cyan")
        rel_table.add_column("Kind", style="magenta")
        rel_table.add_column("Target", style="green")
        rel_table.add_column("Side", style="yellow")
        rel_table.add_column("Join")

        for rel in meta.relations:
            if rel.join_table_name:
                join = rel.join_table_name
            elif rel.join_columns:
                join = ",".join(
                    f"{jc.column_name}->{jc.referenced_column_name}" for jc in rel.join_columns
                )
            else:
                join = f"mappedBy {rel.mapped_by_field_name}"
            rel_table.add_row(
                rel.field_name,
                rel.relation_type.value,
                rel.target_entity_name,
                "owning" if rel.is_owning_side else "inverse",
                join,
            )

        console.print(rel_table)


def _parse_references(
    registry: MetadataRegistry,
    references: List[str],
) -> Tuple[List[EntityMetadata], List[Tuple[str, str]]]:
    parsed = []
    failures = []
    for reference in references:
        try:
            parsed.append(registry.parse(import_model(reference)))
        except (ConfigError, MetadataError) as e:
            failures.append((reference, str(e)))
    return parsed, failures


@cli.command()
@click.argument("models", nargs=-1)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "yaml", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def inspect(ctx: click.Context, models: Tuple[str, ...], output_format: str) -> None:
    """
    Show the metadata of record classes.

    MODELS are module:Class references; the configured models are used when
    none are given.

    Examples:

        typegorm inspect myapp.models:User myapp.models:Post

        typegorm inspect myapp.models:User --format yaml
    """
    config: TypegormConfig = ctx.obj["config"]
    references = list(models) or config.models
    if not references:
        raise click.UsageError("no models given and none configured")

    parsed, failures = _parse_references(ctx.obj["registry"], references)

    if output_format == "table":
        for meta in parsed:
            _print_entity(meta)
    else:
        data = {meta.name: meta.to_dict() for meta in parsed}
        if output_format == "yaml":
            click.echo(yaml.safe_dump(data, sort_keys=False))
        else:
            click.echo(json.dumps(data, indent=2))

    for reference, message in failures:
        console.print(f"[red]Error: {reference}: {escape(message)}[/red]")
    if failures:
        sys.exit(1)


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """
    Parse every configured model and report failures.
    """
    config: TypegormConfig = ctx.obj["config"]
    if not config.models:
        raise click.UsageError("no models configured (set 'models' in typegorm.yaml or TYPEGORM_MODELS)")

    parsed, failures = _parse_references(ctx.obj["registry"], config.models)

    table = Table(title="Model Check")
    table.add_column("Model", style="cyan")
    table.add_column("Table", style="green")
    table.add_column("Columns", justify="right")
    table.add_column("Relations", justify="right")

    for meta in parsed:
        table.add_row(meta.name, meta.table_name, str(len(meta.columns)), str(len(meta.relations)))
    console.print(table)

    for reference, message in failures:
        console.print(f"[red]FAILED {reference}: {escape(message)}[/red]")

    if failures:
        console.print(f"[red]{len(failures)} of {len(config.models)} models failed[/red]")
        sys.exit(1)

    console.print(f"[green]All {len(parsed)} models OK[/green]")


if __name__ == "__main__":
    cli()
