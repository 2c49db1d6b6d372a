"""
Command-line interface for vddl.
"""

import asyncio
import logging
import sys
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .catalog import InMemoryCatalog, VersionReference
from .config import LoggingConfig, VddlConfig
from .engine import DDLEngine
from .exceptions import ConfigurationError, VddlError
from .results import CommandResult
from .session import SessionContext
from .statements import SqlAlterTableDropColumn, SqlNode, SqlShowBranches, StatementKind


console = Console()


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except VddlError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(0)
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            if "--debug" in sys.argv:
                import traceback
                traceback.print_exc()
            sys.exit(1)
    return wrapper


def setup_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Configure the root logger from the logging section of the config."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else config.level)
    formatter = logging.Formatter(config.format)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(
            RotatingFileHandler(
                config.file,
                maxBytes=config.max_size,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug mode"
)
@click.pass_context
def main(ctx, debug):
    """vddl: Versioned DDL execution core."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="vddl-config.yaml",
    help="Output configuration file path",
)
@handle_errors
def init(output: str):
    """Initialize a new vddl configuration file."""
    if Path(output).exists():
        if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
            return

    config = _create_default_config()
    config.to_yaml(output)
    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Describe your catalog sources and tables in the file")
    console.print("2. Run: vddl validate-config --config your-config.yaml")


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@handle_errors
def validate_config(config: str):
    """Validate configuration file."""
    console.print(f"Validating configuration: {config}")

    try:
        vddl_config = VddlConfig.from_yaml(config)
        vddl_config.validate_config()

        console.print("[green]✓[/green] Configuration is valid")

        _display_config_summary(vddl_config)

    except ConfigurationError as e:
        console.print(f"[red]✗[/red] Configuration error: {escape(str(e))}")
        sys.exit(1)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path",
)
@handle_errors
def capabilities(config: Optional[str]):
    """List statement kinds and whether this installation supports them."""
    vddl_config = VddlConfig.from_yaml(config) if config else VddlConfig()
    engine = DDLEngine(InMemoryCatalog(), vddl_config)

    table = Table(title="Statement kinds")
    table.add_column("Statement", style="cyan")
    table.add_column("Available", style="green")

    table.add_row(StatementKind.ALTER_TABLE_DROP_COLUMN.label, "core")
    for kind in StatementKind:
        if kind == StatementKind.ALTER_TABLE_DROP_COLUMN:
            continue
        available = "yes" if engine.registry.is_supported(kind) else "[red]no[/red]"
        table.add_row(kind.label, available)

    console.print(table)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@click.option("--branch", help="Session branch for the table's source")
@click.option("--tag", help="Session tag for the table's source")
@click.argument("table")
@click.argument("column")
@click.pass_context
@handle_errors
def drop_column(ctx, config: str, branch: Optional[str], tag: Optional[str], table: str, column: str):
    """Drop COLUMN from TABLE in the configured catalog and show the result."""
    if branch and tag:
        raise click.UsageError("Use either --branch or --tag, not both")

    vddl_config = _load_config(config, ctx.obj.get("debug", False))
    node = SqlAlterTableDropColumn(tuple(table.split(".")), column)

    session = SessionContext()
    source = node.table[0]
    if branch:
        session.set_session_version_for_source(source, VersionReference.branch(branch))
    elif tag:
        session.set_session_version_for_source(source, VersionReference.tag(tag))

    results = _run(vddl_config, node, session)
    _display_results(results)
    if not all(result.ok for result in results):
        sys.exit(1)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@click.argument("source")
@click.pass_context
@handle_errors
def show_branches(ctx, config: str, source: str):
    """List the branches of SOURCE in the configured catalog."""
    vddl_config = _load_config(config, ctx.obj.get("debug", False))
    results = _run(vddl_config, SqlShowBranches(source), SessionContext())
    _display_results(results)


def _load_config(path: str, debug: bool) -> VddlConfig:
    vddl_config = VddlConfig.from_yaml(path)
    vddl_config.validate_config()
    setup_logging(vddl_config.logging, debug or vddl_config.debug)
    return vddl_config


def _run(config: VddlConfig, node: SqlNode, session: SessionContext) -> List[CommandResult]:
    catalog = InMemoryCatalog.from_config(config.catalog)

    async def run_statement():
        engine = DDLEngine(catalog, config)
        try:
            return await engine.execute(node.unparse(), node, session)
        finally:
            await engine.close()

    return asyncio.run(run_statement())


def _create_default_config() -> VddlConfig:
    """Create a default configuration with examples."""
    from .config import CatalogConfig, SourceConfig, TableSeed

    sources = [
        SourceConfig(
            name="lake",
            versioned=True,
            default_branch="main",
            tables=[
                TableSeed(
                    path=["sales", "orders"],
                    columns=[["id", "int"], ["customer", "string"], ["amount", "double"]],
                ),
            ],
        ),
        SourceConfig(
            name="files",
            versioned=False,
            tables=[
                TableSeed(
                    path=["events"],
                    columns=[["id", "int"], ["payload", "string"]],
                    format="parquet",
                ),
            ],
        ),
    ]

    return VddlConfig(catalog=CatalogConfig(sources=sources))


def _display_config_summary(config: VddlConfig):
    """Display a summary of the configuration."""
    console.print("\n[blue]Configuration Summary[/blue]")

    source_table = Table(title="Sources")
    source_table.add_column("Name", style="cyan")
    source_table.add_column("Versioned", style="magenta")
    source_table.add_column("DDL", style="green")
    source_table.add_column("Tables", style="yellow")

    for source in config.catalog.sources:
        source_table.add_row(
            source.name,
            source.default_branch if source.versioned else "no",
            "yes" if source.supports_ddl else "no",
            str(len(source.tables)),
        )

    console.print(source_table)
    console.print(f"Refresh mode: {config.refresh.mode}")
    console.print(f"DDL enabled: {config.ddl.enabled}")


def _display_results(results: List[CommandResult]):
    for result in results:
        mark = "[green]✓[/green]" if result.ok else "[red]✗[/red]"
        console.print(f"{mark} {escape(result.message)}")


if __name__ == "__main__":
    main()
