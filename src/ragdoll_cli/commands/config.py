"""`ragdoll config` commands."""

import typer
import yaml
from rich.markup import escape

from ..config import ConfigurationLoader
from ..context import console, fail, get_app_context

config_app = typer.Typer(help="Configuration commands")


def init_config(loader: ConfigurationLoader) -> None:
    """Write the default configuration unless one already exists."""
    if loader.config_exists():
        console.print(f"[yellow]Configuration already exists at {escape(str(loader.config_path))}[/yellow]")
        return

    try:
        loader.create_default_config()
    except OSError as e:
        fail(f"Could not write configuration: {e}")

    console.print(f"[green]✓ Configuration initialized at {escape(str(loader.config_path))}[/green]")
    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print("  1. Point backend.url at your Ragdoll server:")
    console.print("     ragdoll config set backend.url http://localhost:4567/api/v1")
    console.print("  2. Check the connection:")
    console.print("     ragdoll health")
    console.print("  3. Add your first document:")
    console.print("     ragdoll add path/to/document.pdf")


def _read_or_fail(loader: ConfigurationLoader) -> dict:
    try:
        return loader.read_raw()
    except FileNotFoundError:
        fail(
            f"No configuration file found at {loader.config_path}",
            hint="Run 'ragdoll config init' to create one.",
        )
    except ValueError as e:
        fail(str(e))


@config_app.command("init")
def config_init(ctx: typer.Context):
    """Initialize a configuration file with defaults."""
    init_config(get_app_context(ctx).loader)


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Show the configuration file contents."""
    loader = get_app_context(ctx).loader
    data = _read_or_fail(loader)
    console.print(f"[dim]Configuration file: {escape(str(loader.config_path))}[/dim]")
    console.print()
    typer.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip())


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Dotted key, e.g. backend.url or database_config.host"),
    value: str = typer.Argument(..., help="New value (integers, decimals and true/false are converted)"),
):
    """Set a configuration value."""
    loader = get_app_context(ctx).loader
    _read_or_fail(loader)
    try:
        stored = loader.set_value(key, value)
    except (OSError, ValueError) as e:
        fail(f"Could not update configuration: {e}")
    console.print(f"[green]Set {escape(key)} = {escape(repr(stored))}[/green]")


@config_app.command("get")
def config_get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Dotted key"),
):
    """Get a configuration value."""
    loader = get_app_context(ctx).loader
    _read_or_fail(loader)
    value = loader.get_value(key)
    if value is None:
        fail(f"Configuration key '{key}' not found")
    if isinstance(value, dict):
        typer.echo(yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip())
    else:
        typer.echo(str(value))


@config_app.command("path")
def config_path(ctx: typer.Context):
    """Show the configuration file path."""
    typer.echo(str(get_app_context(ctx).loader.config_path))


@config_app.command("database")
def config_database(ctx: typer.Context):
    """Show the backend database settings."""
    database = get_app_context(ctx).config.database_config
    console.print("[bold]Database Configuration:[/bold]")
    for key in ("adapter", "database", "host", "port", "username"):
        console.print(f"  {key}: {escape(str(database.get(key, 'N/A')))}")
    console.print(f"  auto_migrate: {escape(str(database.get('auto_migrate', False)))}")
