"""`ragdoll analytics` commands."""

import typer
from rich.markup import escape
from rich.table import Table

from ..analytics import format_metric_name, format_metric_value, format_time, resolve_cleanup_dry_run
from ..backend import BackendError
from ..context import check_format, console, fail, get_app_context
from ..formatting import print_json, truncate

analytics_app = typer.Typer(help="Search analytics commands")


@analytics_app.command("overview")
def analytics_overview(
    ctx: typer.Context,
    days: int = typer.Option(30, "--days", "-d", min=1, help="Number of days to analyze"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
):
    """Show search analytics overview."""
    check_format(output_format, ("table", "json"))
    try:
        overview = get_app_context(ctx).backend.search_analytics(days=days)
    except BackendError as e:
        fail(f"Could not get search analytics: {e}")

    if output_format == "json":
        print_json(overview)
        return

    if not overview or not overview.get("total_searches"):
        console.print(f"[yellow]No searches recorded in the last {days} days.[/yellow]")
        return

    table = Table(title=f"Search Analytics (last {days} days)")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="yellow")
    for key, value in overview.items():
        table.add_row(escape(format_metric_name(key)), escape(format_metric_value(key, value)))
    console.print(table)


@analytics_app.command("history")
def analytics_history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Number of searches to show"),
    user_id: str = typer.Option(None, "--user-id", help="Filter by user ID"),
    session_id: str = typer.Option(None, "--session-id", help="Filter by session ID"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
):
    """Show recent search history."""
    check_format(output_format, ("table", "json"))
    try:
        history = get_app_context(ctx).backend.search_history(
            limit=limit, user_id=user_id, session_id=session_id
        )
    except BackendError as e:
        fail(f"Could not get search history: {e}")

    if output_format == "json":
        print_json(history)
        return

    if not history:
        console.print("[yellow]No search history found.[/yellow]")
        return

    table = Table(title=f"Recent searches ({len(history)})")
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Query", style="magenta")
    table.add_column("Type", style="cyan")
    table.add_column("Results", style="yellow", justify="right")
    table.add_column("Time (ms)", style="yellow", justify="right")
    for entry in history:
        table.add_row(
            format_time(entry.get("created_at")),
            escape(truncate(str(entry.get("query") or ""), 40)),
            escape(str(entry.get("search_type") or "-")),
            str(entry.get("results_count", 0)),
            str(entry.get("execution_time_ms", 0)),
        )
    console.print(table)


@analytics_app.command("trending")
def analytics_trending(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", "-l", min=1, help="Number of queries to show"),
    days: int = typer.Option(7, "--days", "-d", min=1, help="Time period in days"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
):
    """Show trending search queries."""
    check_format(output_format, ("table", "json"))
    try:
        trending = get_app_context(ctx).backend.trending_queries(limit=limit, days=days)
    except BackendError as e:
        fail(f"Could not get trending queries: {e}")

    if output_format == "json":
        print_json(trending)
        return

    if not trending:
        console.print(f"[yellow]No trending queries in the last {days} days.[/yellow]")
        return

    table = Table(title=f"Trending queries (last {days} days)")
    table.add_column("Query", style="magenta")
    table.add_column("Count", style="yellow", justify="right")
    table.add_column("Avg Results", style="yellow", justify="right")
    for entry in trending:
        avg = entry.get("avg_results")
        table.add_row(
            escape(truncate(str(entry.get("query") or ""), 50)),
            str(entry.get("count", 0)),
            f"{float(avg):.1f}" if avg is not None else "N/A",
        )
    console.print(table)


@analytics_app.command("cleanup")
def analytics_cleanup(
    ctx: typer.Context,
    days: int = typer.Option(30, "--days", "-d", min=1, help="Remove unused searches older than this many days"),
    dry_run: bool = typer.Option(True, "--dry-run/--no-dry-run", help="Only report what would be removed"),
    force: bool = typer.Option(False, "--force", help="Actually remove searches"),
):
    """Clean up old unused searches."""
    effective_dry_run = resolve_cleanup_dry_run(dry_run, force)
    try:
        result = get_app_context(ctx).backend.cleanup_searches(days=days, dry_run=effective_dry_run)
    except BackendError as e:
        fail(f"Cleanup failed: {e}")

    orphaned = result.get("orphaned_count", 0)
    unused = result.get("unused_count", 0)

    if effective_dry_run:
        console.print("[bold]Dry run:[/bold] no searches were removed.")
        console.print(f"  Orphaned searches: {orphaned}")
        console.print(f"  Unused searches older than {days} days: {unused}")
        console.print("[dim]Run with --force to remove them.[/dim]")
    else:
        console.print("[green]Cleanup completed.[/green]")
        console.print(f"  Orphaned searches removed: {orphaned}")
        console.print(f"  Unused searches removed: {unused}")
