"""Table, JSON and plain renderers for CLI output."""

import json
from typing import Any, Optional, Sequence

import typer
from rich.markup import escape
from rich.table import Table

from .context import console
from .models.search import DiagnosticReport, SearchResult
from .search.engine import SearchOutcome
from .search.keywords import matching_keywords
from .search.projector import execution_time_ms, total_results


def print_json(data: Any) -> None:
    """Emit JSON on stdout unwrapped, so it stays machine-readable."""
    typer.echo(json.dumps(data, indent=2, default=str))


def truncate(text: Optional[str], width: int) -> str:
    if not text:
        return ""
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


def format_score(score: Optional[float]) -> str:
    return f"{score:.3f}" if score is not None else "N/A"


def render_search_results(outcome: SearchOutcome, output_format: str) -> None:
    results = outcome.results
    if output_format == "json":
        print_json(outcome.raw_response)
        return

    if output_format == "plain":
        for index, result in enumerate(results, 1):
            console.print(f"{index}. {escape(result.title or 'Untitled')}")
            console.print(f"   ID: {escape(result.id or '-')}")
            console.print(f"   Score: {format_score(result.score)}")
            console.print(f"   Content: {escape(truncate(result.content, 200))}")
            console.print()
        return

    table = Table(title=f"Found {len(results)} result(s) ({outcome.request.search_type.value})")
    table.add_column("Rank", style="cyan", no_wrap=True)
    table.add_column("Title", style="magenta")
    table.add_column("Score", style="yellow", no_wrap=True)
    table.add_column("Content Preview", style="dim")

    for index, result in enumerate(results, 1):
        table.add_row(
            str(index),
            escape(truncate(result.title or "Untitled", 30)),
            format_score(result.score),
            escape(truncate(result.content, 50)),
        )

    console.print(table)
    elapsed = execution_time_ms(outcome.raw_response)
    if elapsed is not None:
        console.print(f"[dim]Search took {elapsed}ms[/dim]")
    console.print()
    console.print("[dim]Use --format json for complete results or --format plain for detailed view[/dim]")


def render_diagnostics(outcome: SearchOutcome, output_format: str) -> None:
    report: DiagnosticReport = outcome.diagnostics
    if output_format == "json":
        print_json({
            "results": [],
            "response": outcome.raw_response,
            "diagnostics": report.model_dump(mode="json"),
        })
        return

    console.print(f"[yellow]No results found for '{escape(outcome.request.query)}'[/yellow]")
    total = total_results(outcome.raw_response)
    if total:
        console.print(f"[dim](Total documents in system: {total})[/dim]")

    stats = report.statistics
    if stats is not None:
        console.print()
        console.print("[bold]Search statistics:[/bold]")
        if stats.threshold_used is not None:
            console.print(f"  Threshold used:      {stats.threshold_used:.3f}")
        if stats.highest_similarity is not None:
            console.print(f"  Highest similarity:  {stats.highest_similarity:.3f}")
        if stats.lowest_similarity is not None:
            console.print(f"  Lowest similarity:   {stats.lowest_similarity:.3f}")
        if stats.average_similarity is not None:
            console.print(f"  Average similarity:  {stats.average_similarity:.3f}")
        if stats.similarities_above_threshold is not None:
            console.print(f"  Above threshold:     {stats.similarities_above_threshold}")
        if stats.total_embeddings_checked is not None:
            console.print(f"  Embeddings checked:  {stats.total_embeddings_checked}")

    console.print()
    console.print("[bold]Suggestions:[/bold]")
    for line in report.guidance:
        console.print(f"  - {escape(line)}")


def render_keyword_results(results: Sequence[SearchResult], output_format: str, keywords: Sequence[str]) -> None:
    if output_format == "json":
        print_json([result.model_dump(mode="json") for result in results])
        return

    if output_format == "plain":
        for index, result in enumerate(results, 1):
            matches = matching_keywords(result.keywords, keywords)
            console.print(f"{index}. {escape(result.title or 'Untitled')}")
            console.print(f"   ID: {escape(result.id or '-')}")
            console.print(f"   Keywords: {escape(', '.join(result.keywords))}")
            if matches:
                console.print(f"   Matching: {escape(', '.join(matches))}")
            console.print()
        return

    table = Table(title=f"Found {len(results)} document(s)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="magenta")
    table.add_column("Keywords", style="dim")
    table.add_column("Matches", style="yellow")

    for result in results:
        table.add_row(
            escape(result.id or "-"),
            escape(truncate(result.title or "Untitled", 30)),
            escape(truncate(", ".join(result.keywords), 40)),
            str(len(matching_keywords(result.keywords, keywords))),
        )

    console.print(table)


def render_documents(documents: Sequence[dict[str, Any]], output_format: str) -> None:
    if output_format == "json":
        print_json(list(documents))
        return

    if output_format == "plain":
        for doc in documents:
            console.print(f"{escape(str(doc.get('id', '')))}: {escape(str(doc.get('title') or 'Untitled'))}")
        return

    table = Table(title=f"{len(documents)} document(s)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="magenta")
    table.add_column("Status", style="green")
    table.add_column("Embeddings", style="yellow")

    for doc in documents:
        table.add_row(
            escape(str(doc.get("id", ""))[:10]),
            escape(truncate(str(doc.get("title") or "Untitled"), 40)),
            escape(str(doc.get("status") or "unknown")),
            str(doc.get("embeddings_count") or 0),
        )

    console.print(table)


def render_metrics_table(title: str, metrics: dict[str, Any], name_header: str = "Metric") -> None:
    table = Table(title=title)
    table.add_column(name_header, style="cyan")
    table.add_column("Value", style="yellow")
    for key, value in metrics.items():
        table.add_row(escape(str(key)), escape(str(value)))
    console.print(table)
