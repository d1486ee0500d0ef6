"""Main CLI entry point for mvlite."""

import logging
import sqlite3
import typer
from typing import Optional
from pathlib import Path
from rich.table import Table as RichTable

from mvlite.cli.utils import console, open_database, render_result, validate_required_arg
from mvlite.config import Config
from mvlite.core.demo import DEFAULT_EVENTS_TABLE, DEMO_QUERY, seed_events
from mvlite.core.errors import MaterializedViewError

app = typer.Typer(
    name="mvlite",
    help="mvlite - Materialized views for SQLite",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log generated SQL"),
):
    """
    mvlite - Materialized views for SQLite
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        # No subcommand was invoked, show help
        console.print(ctx.get_help())
        raise typer.Exit(0)


def _fail(error: Exception) -> None:
    console.print(f"[red]❌ {error}[/red]")
    raise typer.Exit(1)


@app.command()
def init(
    path: Optional[Path] = typer.Argument(
        None, help="Directory to initialize project in (default: current directory)"
    ),
):
    """Initialize a new mvlite project."""
    config = Config(path)
    try:
        config.init_project()
    except FileExistsError:
        typer.secho(
            f"❌ Project already exists in {config.project_dir}", fg=typer.colors.RED
        )
        raise typer.Exit(1)

    typer.secho(
        f"✅ Initialized mvlite project in {config.project_dir}", fg=typer.colors.GREEN
    )


@app.command()
def create(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Name of the view"),
    sql: Optional[str] = typer.Argument(None, help="SQL query defining the view"),
):
    """Create (or re-create) a materialized view.

    Examples:
        mvlite create recent_events "SELECT * FROM events ORDER BY id DESC LIMIT 5"
    """
    name = validate_required_arg(name, "name", ctx)
    sql = validate_required_arg(sql, "sql", ctx)

    with open_database() as db:
        try:
            result = db.create_view(name, sql)
        except (MaterializedViewError, ValueError) as e:
            _fail(e)

    console.print(
        f"[green]✅ Materialized view '{name}' ({result.rows_affected} rows)[/green]"
    )


@app.command()
def refresh(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Name of the view to refresh"),
):
    """Refresh a materialized view from its stored query."""
    name = validate_required_arg(name, "name", ctx)

    with open_database() as db:
        try:
            result = db.refresh(name)
        except (MaterializedViewError, ValueError) as e:
            _fail(e)

    suffix = " (table recreated)" if result.recreated else ""
    console.print(
        f"[green]✅ Refreshed view '{name}' ({result.rows_affected} rows){suffix}[/green]"
    )


@app.command(name="list")
def list_views():
    """List all materialized views."""
    with open_database() as db:
        views = db.list_views()

    if not views:
        console.print("[yellow]No views found[/yellow]")
        return

    table = RichTable(title="Materialized views", title_justify="left")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Updated", style="yellow")
    table.add_column("Query")

    for view in views:
        updated = view.updated_at.isoformat(sep=" ") if view.updated_at else "-"
        table.add_row(view.name, str(view.id), updated, view.query)

    console.print(table)


@app.command()
def info(
    ctx: typer.Context, name: Optional[str] = typer.Argument(None, help="View name")
):
    """Show the definition and columns of a view."""
    name = validate_required_arg(name, "name", ctx)

    with open_database() as db:
        try:
            view = db.views.get_view(name)
        except MaterializedViewError as e:
            _fail(e)
        columns = db.views.table_columns(name)

    console.print(f"\n[bold]View: {view.name}[/bold]")
    console.print(f"Version: {view.id}")
    console.print(f"Created: {view.created_at}")
    console.print(f"Updated: {view.updated_at}")
    console.print("\n[bold]Columns:[/bold]")
    for col in columns:
        console.print(f"  {col.name} {col.native_type}")
    console.print("\n[bold]SQL:[/bold]")
    console.print(view.query)


@app.command()
def history(
    ctx: typer.Context, name: Optional[str] = typer.Argument(None, help="View name")
):
    """Show every registered definition of a view."""
    name = validate_required_arg(name, "name", ctx)

    with open_database() as db:
        versions = db.registry.history(name)

    if not versions:
        _fail(MaterializedViewError(f"View '{name}' does not exist"))

    table = RichTable(title=f"History of {name}", title_justify="left")
    table.add_column("Version", style="green")
    table.add_column("Created", style="yellow")
    table.add_column("Query")
    for version in versions:
        table.add_row(str(version.id), str(version.created_at), version.query)
    console.print(table)


@app.command()
def drop(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Name of the view to drop"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Force deletion without confirmation"
    ),
):
    """Drop a materialized view and its backing table."""
    name = validate_required_arg(name, "name", ctx)

    if not force:
        confirm = typer.confirm(f"Are you sure you want to drop view '{name}'?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    with open_database() as db:
        try:
            db.drop(name)
        except MaterializedViewError as e:
            _fail(e)

    console.print(f"[green]✅ Dropped view '{name}'[/green]")


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL query to execute"),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", help="Limit number of rows"
    ),
):
    """Execute a SQL query and print the result."""
    with open_database() as db:
        try:
            result = db.query(sql)
        except sqlite3.Error as e:
            _fail(e)

    if limit is not None:
        result.rows = result.rows[:limit]

    if not result.columns:
        console.print("[green]✅ Statement executed[/green]")
        return
    render_result(result, title=f"Query Results ({len(result)} rows)")


@app.command()
def demo(
    rows: int = typer.Option(1000, "--rows", "-n", help="Number of events to seed"),
):
    """Seed a sample events table and materialize a view over it."""
    with open_database() as db:
        inserted = seed_events(db.conn, target=rows)
        console.print(f"Seeded {inserted} events into {DEFAULT_EVENTS_TABLE}")

        try:
            db.create_view("cash_flow_events_mv", DEMO_QUERY)
        except MaterializedViewError as e:
            _fail(e)

        render_result(
            db.query("SELECT * FROM cash_flow_events_mv"), title="cash_flow_events_mv"
        )


@app.command()
def version():
    """Show mvlite version."""
    from mvlite import __version__

    typer.echo(f"mvlite version {__version__}")


if __name__ == "__main__":
    app()
