"""Utility functions for CLI commands."""

from typing import Optional, Tuple
import typer
from rich.console import Console
from rich.table import Table as RichTable

from mvlite.config import Config, ProjectConfig
from mvlite.core.connection import ResultSet
from mvlite.core.database import MatViewDB

console = Console()


def get_config_with_data() -> Tuple[Config, ProjectConfig]:
    """Get config and load data for the current project.

    Returns:
        tuple: (config, config_data)
    """
    config = Config()
    try:
        config_data = config.load()
    except FileNotFoundError:
        console.print("[red]❌ Config file not found. Run 'mvlite init' first.[/red]")
        raise typer.Exit(1)

    return config, config_data


def open_database() -> MatViewDB:
    """Open the current project's database."""
    config, _ = get_config_with_data()
    return MatViewDB.from_config(config)


def render_result(result: ResultSet, title: Optional[str] = None) -> None:
    """Print a result set as a table.

    Args:
        result: Rows to print
        title: Optional table title; defaults to the row count
    """
    table = RichTable(title=title or f"{len(result)} rows", title_justify="left")
    for col in result.columns:
        table.add_column(col, style="cyan")

    for row in result.rows:
        table.add_row(*["NULL" if value is None else str(value) for value in row])

    console.print(table)


def validate_required_arg(
    value: Optional[str], arg_name: str, ctx: typer.Context
) -> str:
    """Validate a required argument and show help if missing.

    Args:
        value: The argument value
        arg_name: Name of the argument (for error message)
        ctx: Typer context

    Returns:
        The validated value

    Raises:
        typer.Exit: If value is None
    """
    if value is None:
        console.print(ctx.get_help())
        console.print(f"\n[red]❌ Error: Missing argument '{arg_name.upper()}'.[/red]")
        raise typer.Exit(1)
    return value
