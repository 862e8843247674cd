"""`ragdoll keywords` commands."""

import fnmatch
from typing import List

import typer
from rich.markup import escape
from rich.table import Table

from ..backend import BackendError
from ..context import check_format, console, fail, get_app_context
from ..formatting import print_json, render_keyword_results
from ..search import InvalidRequest, normalize_search_request, resolve_keyword_mode, run_search
from ..search.keywords import KEYWORD_SEARCH_SUGGESTIONS

keywords_app = typer.Typer(help="Keyword commands")


def _clean(keywords: List[str]) -> list[str]:
    return [k.strip() for k in keywords if k and k.strip()]


@keywords_app.command("search")
def keywords_search(
    ctx: typer.Context,
    keywords: List[str] = typer.Argument(..., help="Keywords to search for"),
    match_all: bool = typer.Option(False, "--all", "-a", help="Require ALL keywords (AND) instead of ANY (OR)"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum number of documents to return"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain"),
):
    """Search documents by keywords only."""
    check_format(output_format)

    try:
        request = normalize_search_request({
            "query": "",
            "search_type": "keyword",
            "keywords": _clean(keywords),
            "keywords_all": match_all,
            "limit": limit,
        })
        mode = resolve_keyword_mode(request)
    except InvalidRequest as e:
        fail(str(e))

    if output_format != "json":
        console.print(
            f"[dim]Searching for documents with {mode.label}:[/dim] {escape(', '.join(mode.keywords))}"
        )
        console.print()

    try:
        outcome = run_search(request, get_app_context(ctx).backend)
    except BackendError as e:
        fail(f"Keyword search failed: {e}")

    if outcome.empty:
        if output_format == "json":
            print_json([])
            return
        console.print(f"[yellow]No documents found with keywords: {escape(', '.join(mode.keywords))}[/yellow]")
        console.print()
        console.print("[bold]Suggestions:[/bold]")
        for line in KEYWORD_SEARCH_SUGGESTIONS:
            console.print(f"  - {escape(line)}")
        return

    render_keyword_results(outcome.results, output_format, mode.keywords)


@keywords_app.command("list")
def keywords_list(
    ctx: typer.Context,
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of keywords to show"),
    min_count: int = typer.Option(1, "--min-count", "-m", help="Only keywords used at least this many times"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain"),
):
    """List keywords by frequency."""
    check_format(output_format)
    try:
        frequencies = get_app_context(ctx).backend.keyword_frequencies(limit=limit, min_count=min_count)
    except BackendError as e:
        fail(f"Could not list keywords: {e}")

    if output_format == "json":
        print_json(frequencies)
        return

    if not frequencies:
        console.print("[yellow]No keywords found.[/yellow]")
        return

    if output_format == "plain":
        for keyword, count in frequencies.items():
            console.print(f"{escape(str(keyword))}: {count}")
        return

    table = Table(title=f"Keywords ({len(frequencies)})")
    table.add_column("Keyword", style="cyan")
    table.add_column("Documents", style="yellow", justify="right")
    for keyword, count in frequencies.items():
        table.add_row(escape(str(keyword)), str(count))
    console.print(table)


def _report_keyword_update(action: str, document_id: str, result: dict) -> None:
    if not result.get("success"):
        fail(f"Failed to {action} keywords for document {document_id}.", hint=result.get("message"))
    console.print(f"[green]Keywords {action} for document {escape(document_id)}.[/green]")
    if "keywords" in result:
        console.print(f"[dim]Keywords now: {escape(', '.join(result['keywords'])) or '(none)'}[/dim]")


@keywords_app.command("add")
def keywords_add(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    keywords: List[str] = typer.Argument(..., help="Keywords to add"),
):
    """Add keywords to a document."""
    cleaned = _clean(keywords)
    if not cleaned:
        fail("No keywords provided")
    try:
        result = get_app_context(ctx).backend.add_keywords_to_document(document_id, cleaned)
    except BackendError as e:
        fail(f"Could not add keywords: {e}")
    _report_keyword_update("added", document_id, result)


@keywords_app.command("remove")
def keywords_remove(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    keywords: List[str] = typer.Argument(..., help="Keywords to remove"),
):
    """Remove keywords from a document."""
    cleaned = _clean(keywords)
    if not cleaned:
        fail("No keywords provided")
    try:
        result = get_app_context(ctx).backend.remove_keywords_from_document(document_id, cleaned)
    except BackendError as e:
        fail(f"Could not remove keywords: {e}")
    _report_keyword_update("removed", document_id, result)


@keywords_app.command("set")
def keywords_set(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    keywords: List[str] = typer.Argument(None, help="Replacement keywords (none clears them)"),
):
    """Replace all keywords on a document."""
    try:
        result = get_app_context(ctx).backend.set_document_keywords(document_id, _clean(keywords or []))
    except BackendError as e:
        fail(f"Could not set keywords: {e}")
    _report_keyword_update("set", document_id, result)


@keywords_app.command("show")
def keywords_show(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
):
    """Show keywords for a document."""
    try:
        document = get_app_context(ctx).backend.get_document(document_id)
    except BackendError as e:
        fail(f"Error getting document: {e}")

    keywords = document.get("keywords") or []
    console.print(f"[bold]Keywords for document {escape(document_id)}[/bold] ({escape(str(document.get('title') or 'Untitled'))})")
    if not keywords:
        console.print("  [dim](no keywords)[/dim]")
        return
    for keyword in keywords:
        console.print(f"  - {escape(str(keyword))}")


@keywords_app.command("find")
def keywords_find(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Substring or glob pattern, e.g. 'mach*'"),
    limit: int = typer.Option(50, "--limit", "-l", help="Maximum number of keywords to show"),
):
    """Find keywords matching a pattern."""
    try:
        frequencies = get_app_context(ctx).backend.keyword_frequencies(limit=1000, min_count=1)
    except BackendError as e:
        fail(f"Could not list keywords: {e}")

    needle = pattern.lower()
    if any(ch in needle for ch in "*?["):
        matches = {k: c for k, c in frequencies.items() if fnmatch.fnmatch(str(k).lower(), needle)}
    else:
        matches = {k: c for k, c in frequencies.items() if needle in str(k).lower()}

    if not matches:
        console.print(f"[yellow]No keywords matching '{escape(pattern)}'.[/yellow]")
        return

    console.print(f"[bold]Keywords matching '{escape(pattern)}':[/bold]")
    for keyword, count in list(matches.items())[:limit]:
        console.print(f"  {escape(str(keyword))} ({count})")


@keywords_app.command("stats")
def keywords_stats(
    ctx: typer.Context,
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
):
    """Show keyword usage statistics."""
    check_format(output_format, ("table", "json"))
    try:
        statistics = get_app_context(ctx).backend.keyword_statistics()
    except BackendError as e:
        fail(f"Could not get keyword statistics: {e}")

    if output_format == "json":
        print_json(statistics)
        return

    console.print("[bold]Keyword Statistics[/bold]")
    console.print(f"  Total keywords:            {statistics.get('total_keywords', 0)}")
    console.print(f"  Documents with keywords:   {statistics.get('documents_with_keywords', 0)}")
    average = statistics.get("avg_keywords_per_document") or 0
    console.print(f"  Avg keywords per document: {float(average):.2f}")
    console.print(f"  Used only once:            {statistics.get('singleton_keywords', 0)}")

    top = statistics.get("top_keywords") or []
    if top:
        console.print()
        table = Table(title="Top keywords")
        table.add_column("Keyword", style="cyan")
        table.add_column("Documents", style="yellow", justify="right")
        for keyword, count in top:
            table.add_row(escape(str(keyword)), str(count))
        console.print(table)
