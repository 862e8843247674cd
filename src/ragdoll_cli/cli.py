"""Typer-based CLI for Ragdoll."""

from typing import List

import typer
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeRemainingColumn

from .backend import BackendError
from .commands.analytics import analytics_app
from .commands.config import config_app, init_config
from .commands.keywords import keywords_app
from .config import ConfigurationLoader, resolve_config_path
from .context import AppContext, check_format, configure_logging, console, fail, get_app_context
from .documents import TYPE_EXTENSIONS, add_documents, collect_files, enrich_with_status
from .formatting import (
    print_json,
    render_diagnostics,
    render_documents,
    render_metrics_table,
    render_search_results,
)
from .models.search import SearchType
from .search import InvalidRequest, keyword_filter_params, normalize_search_request, run_search
from .search.normalizer import split_list_flag

app = typer.Typer(
    name="ragdoll",
    help="Ragdoll - manage and search a document retrieval store",
    add_completion=False,
)
app.add_typer(config_app, name="config")
app.add_typer(keywords_app, name="keywords")
app.add_typer(analytics_app, name="analytics")


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: str = typer.Option(
        None,
        "--config",
        help="Path to config file (default: RAGDOLL_CONFIG env or ~/.ragdoll/config.yml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable debug logging",
    ),
):
    """Load configuration once and hand it to every command."""
    if isinstance(ctx.obj, AppContext):
        configure_logging(ctx.obj.config, verbose)
        return

    loader = ConfigurationLoader(resolve_config_path(config_path))
    try:
        config = loader.load()
    except ValueError as e:
        fail(str(e), hint=f"Fix or remove {loader.config_path}")

    configure_logging(config, verbose)
    ctx.obj = AppContext(config=config, loader=loader)


@app.command()
def version():
    """Show Ragdoll CLI version."""
    from . import __version__
    console.print(f"Ragdoll CLI v{__version__}")


@app.command()
def init(ctx: typer.Context):
    """Initialize Ragdoll configuration (same as 'ragdoll config init')."""
    init_config(get_app_context(ctx).loader)


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum number of results to return"),
    content_type: str = typer.Option(
        None, "--content-type", "-c", help="Filter by content type (text, image, audio)"
    ),
    classification: str = typer.Option(None, "--classification", "-C", help="Filter by classification"),
    keywords: str = typer.Option(None, "--keywords", "-k", help="Filter by keywords (comma-separated)"),
    keywords_all: bool = typer.Option(
        False, "--keywords-all", help="Require ALL keywords to match (default: ANY)"
    ),
    tags: str = typer.Option(None, "--tags", "-T", help="Filter by tags (comma-separated)"),
    search_type: str = typer.Option(
        None, "--search-type", "-s", help="Search type: semantic (default), hybrid or fulltext"
    ),
    threshold: float = typer.Option(None, "--threshold", help="Similarity threshold (0.0-1.0)"),
    semantic_weight: float = typer.Option(
        None, "--semantic-weight", help="Hybrid search: weight of semantic similarity (default 0.7)"
    ),
    text_weight: float = typer.Option(
        None, "--text-weight", help="Hybrid search: weight of full-text relevance (default 0.3)"
    ),
    session_id: str = typer.Option(None, "--session-id", help="Session ID for search tracking"),
    user_id: str = typer.Option(None, "--user-id", help="User ID for search tracking"),
    track_search: bool = typer.Option(
        True, "--track-search/--no-track-search", help="Record this search in analytics"
    ),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain"),
):
    """Search for documents matching the query.

    When nothing matches, similarity statistics from the backend are used
    to suggest a relaxed threshold or a different search mode.
    """
    check_format(output_format)
    app_context = get_app_context(ctx)

    try:
        request = normalize_search_request({
            "query": query,
            "search_type": search_type,
            "limit": limit,
            "threshold": threshold,
            "content_type": content_type,
            "classification": classification,
            "keywords": keywords,
            "keywords_all": keywords_all,
            "tags": tags,
            "semantic_weight": semantic_weight,
            "text_weight": text_weight,
            "session_id": session_id,
            "user_id": user_id,
            "track_search": track_search,
        })
    except InvalidRequest as e:
        fail(str(e))

    if output_format != "json":
        console.print(f"[dim]Searching for:[/dim] {escape(request.query)}")
        details = [f"type={request.search_type.value}", f"limit={request.limit}"]
        if request.session_id:
            details.append(f"session={request.session_id}")
        if request.user_id:
            details.append(f"user={request.user_id}")
        console.print(f"[dim]{escape(', '.join(details))}[/dim]")
        if request.threshold_out_of_range:
            console.print(
                f"[yellow]Note: threshold {request.threshold} is outside 0.0-1.0; "
                "the backend decides how to interpret it[/yellow]"
            )
        if (
            request.search_type == SearchType.HYBRID
            and request.semantic_weight is not None
            and request.text_weight is not None
        ):
            console.print(
                f"[dim]Weights: semantic={request.semantic_weight}, text={request.text_weight}[/dim]"
            )
        console.print()

    try:
        outcome = run_search(request, app_context.backend)
    except BackendError as e:
        fail(f"Search failed: {e}")

    if outcome.empty:
        render_diagnostics(outcome, output_format)
        return

    render_search_results(outcome, output_format)


@app.command("list")
def list_documents(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum number of documents to list"),
    keywords: str = typer.Option(None, "--keywords", "-k", help="Filter by keywords (comma-separated)"),
    keywords_all: bool = typer.Option(
        False, "--keywords-all", help="Require ALL keywords to match (default: ANY)"
    ),
    tags: str = typer.Option(None, "--tags", "-T", help="Filter by tags (comma-separated)"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain"),
):
    """List documents with their processing status."""
    check_format(output_format)
    backend = get_app_context(ctx).backend

    try:
        filters = keyword_filter_params(
            split_list_flag(keywords),
            keywords_all=keywords_all,
            tags=split_list_flag(tags),
        )
    except InvalidRequest as e:
        fail(str(e))

    try:
        documents = backend.list_documents(limit=limit, **filters)
    except BackendError as e:
        fail(f"Could not list documents: {e}")

    if not documents:
        if output_format == "json":
            print_json([])
        else:
            console.print("[yellow]No documents found.[/yellow]")
        return

    enrichment = enrich_with_status(backend, documents)
    render_documents(enrichment.documents, output_format)

    if not enrichment.complete and output_format != "json":
        console.print(
            f"[dim]Status unavailable for {len(enrichment.failures)} document(s); "
            "showing embeddings counts as listed.[/dim]"
        )


@app.command()
def show(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
):
    """Show detailed document information."""
    check_format(output_format, ("table", "json"))
    try:
        document = get_app_context(ctx).backend.get_document(document_id)
    except BackendError as e:
        fail(f"Error getting document: {e}")

    if output_format == "json":
        print_json(document)
        return

    console.print(f"[bold]Document Details for ID:[/bold] {escape(document_id)}")
    console.print(f"  [dim]Title:[/dim]            {escape(str(document.get('title') or 'Untitled'))}")
    console.print(f"  [dim]Status:[/dim]           {escape(str(document.get('status') or 'unknown'))}")
    console.print(f"  [dim]Embeddings Count:[/dim] {document.get('embeddings_count', 0)}")
    console.print(f"  [dim]Content Length:[/dim]   {document.get('content_length', 0)} characters")
    console.print(f"  [dim]Keywords:[/dim]         {escape(', '.join(document.get('keywords') or [])) or '(none)'}")
    console.print(f"  [dim]Created:[/dim]          {document.get('created_at', '-')}")
    console.print(f"  [dim]Updated:[/dim]          {document.get('updated_at', '-')}")

    metadata = document.get("metadata")
    if metadata:
        console.print()
        console.print("[bold]Metadata:[/bold]")
        for key, value in metadata.items():
            console.print(f"  {escape(str(key))}: {escape(str(value))}")


@app.command()
def status(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
):
    """Show document processing status."""
    check_format(output_format, ("table", "json"))
    try:
        status_info = get_app_context(ctx).backend.document_status(document_id)
    except BackendError as e:
        fail(f"Error getting document status: {e}")

    if not status_info:
        console.print("[yellow]Document not found or no status available.[/yellow]")
        return

    if output_format == "json":
        print_json(status_info)
        return

    ready = status_info.get("embeddings_ready")
    console.print(f"[bold]Document Status for ID:[/bold] {escape(document_id)}")
    console.print(f"  [dim]Status:[/dim]           {escape(str(status_info.get('status') or 'N/A'))}")
    console.print(f"  [dim]Embeddings Count:[/dim] {status_info.get('embeddings_count', 'N/A')}")
    console.print(f"  [dim]Embeddings Ready:[/dim] {'Yes' if ready else 'No'}")
    console.print(f"  [dim]Message:[/dim]          {escape(str(status_info.get('message') or 'No message available'))}")


@app.command()
def stats(
    ctx: typer.Context,
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain"),
):
    """Show document and embedding statistics."""
    check_format(output_format)
    try:
        system_stats = get_app_context(ctx).backend.stats()
    except BackendError as e:
        fail(f"Could not retrieve statistics: {e}")

    if not system_stats:
        console.print("[yellow]No statistics available.[/yellow]")
        return

    if output_format == "json":
        print_json(system_stats)
        return

    if output_format == "plain":
        for key, value in system_stats.items():
            console.print(f"{escape(str(key).replace('_', ' ').capitalize())}: {escape(str(value))}")
        return

    scalar = {
        str(key).replace("_", " ").capitalize(): value
        for key, value in system_stats.items()
        if not isinstance(value, dict)
    }
    render_metrics_table("System Statistics", scalar)
    for key, value in system_stats.items():
        if isinstance(value, dict) and value:
            render_metrics_table(f"Documents {str(key).replace('_', ' ')}", value, name_header="Group")


@app.command()
def health(ctx: typer.Context):
    """Check system health."""
    if get_app_context(ctx).backend.healthy():
        console.print("[green]✓ System is healthy[/green]")
        console.print("[green]✓ Backend connection: OK[/green]")
        console.print("[green]✓ Configuration: OK[/green]")
    else:
        console.print("[red]✗ System health check failed[/red]")
        raise typer.Exit(code=1)


@app.command()
def add(
    ctx: typer.Context,
    paths: List[str] = typer.Argument(None, help="Files, directories or glob patterns"),
    recursive: bool = typer.Option(
        True, "--recursive/--no-recursive", "-r", help="Recursively process subdirectories"
    ),
    doc_type: str = typer.Option(
        None, "--type", "-t", help=f"Filter by document type ({', '.join(TYPE_EXTENSIONS)})"
    ),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Number of files to add in parallel"),
):
    """Add documents, directories, or glob patterns."""
    if not paths:
        console.print("[red]Error: No paths provided[/red]")
        console.print("Usage: ragdoll add PATH [PATH2] [PATH3]...")
        console.print("Examples:")
        console.print("  ragdoll add file.pdf")
        console.print("  ragdoll add ../docs")
        console.print("  ragdoll add '../docs/**/*.md'")
        raise typer.Exit(code=1)

    if doc_type and doc_type not in TYPE_EXTENSIONS:
        fail(f"Invalid type '{doc_type}'. Must be one of: {', '.join(TYPE_EXTENSIONS)}")

    backend = get_app_context(ctx).backend
    files, missing = collect_files(paths, recursive=recursive, doc_type=doc_type)

    for path in missing:
        console.print(f"[yellow]Warning: Path not found or not accessible: {escape(path)}[/yellow]")

    if not files:
        console.print("[yellow]No files found to process.[/yellow]")
        return

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Adding documents", total=len(files))

        def advance(outcome):
            progress.console.print(f"[dim]Processed: {escape(outcome.file)}[/dim]")
            progress.advance(task)

        outcomes = add_documents(backend, files, workers=workers, on_progress=advance)

    succeeded = [o for o in outcomes if o.succeeded]
    failed = [o for o in outcomes if not o.succeeded]

    console.print()
    console.print("[bold]Completed:[/bold]")
    console.print(f"  Successfully added: {len(succeeded)} files")
    console.print(f"  Errors: {len(failed)} files")

    if failed:
        console.print()
        console.print("[red]Errors:[/red]")
        for outcome in failed:
            console.print(f"  {escape(outcome.file)}: {escape(outcome.detail or 'unknown error')}")

    if succeeded:
        console.print()
        console.print("[green]Successfully added files:[/green]")
        for outcome in succeeded:
            console.print(f"  {escape(outcome.file)} (ID: {escape(outcome.document_id or '-')})")
            if outcome.message:
                console.print(f"    [dim]{escape(outcome.message)}[/dim]")
        console.print()
        console.print("[dim]Documents are processed in the background. Use 'ragdoll status <id>' to check.[/dim]")


@app.command()
def update(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    title: str = typer.Option(None, "--title", "-t", help="New title for document"),
):
    """Update document metadata."""
    if not title:
        console.print("[yellow]No updates provided. Use --title to update the document title.[/yellow]")
        return

    try:
        result = get_app_context(ctx).backend.update_document(document_id, title=title)
    except BackendError as e:
        fail(f"Failed to update document ID {document_id}: {e}")

    if result.get("success"):
        console.print(f"[green]Document ID {escape(document_id)} updated successfully.[/green]")
        if result.get("message"):
            console.print(f"[dim]{escape(str(result['message']))}[/dim]")
    else:
        fail(f"Failed to update document ID {document_id}.", hint=result.get("message"))


@app.command()
def delete(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Delete without confirmation"),
):
    """Delete a document."""
    if not force:
        console.print(
            f"Are you sure you want to delete document ID {escape(document_id)}? This action cannot be undone."
        )
        if not typer.confirm("Confirm deletion?"):
            console.print("[dim]Deletion cancelled.[/dim]")
            return

    try:
        result = get_app_context(ctx).backend.delete_document(document_id)
    except BackendError as e:
        fail(f"Failed to delete document ID {document_id}: {e}")

    if result.get("success"):
        console.print(f"[green]Document ID {escape(document_id)} deleted successfully.[/green]")
        if result.get("message"):
            console.print(f"[dim]{escape(str(result['message']))}[/dim]")
    else:
        fail(f"Failed to delete document ID {document_id}.", hint=result.get("message"))


@app.command()
def context(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Query to gather context for"),
    limit: int = typer.Option(5, "--limit", "-l", min=1, help="Maximum number of context chunks"),
):
    """Get context for RAG applications."""
    try:
        print_json(get_app_context(ctx).backend.get_context(query, limit=limit))
    except BackendError as e:
        fail(f"Could not get context: {e}")


@app.command()
def enhance(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Prompt to enhance"),
    context_limit: int = typer.Option(5, "--context-limit", "-l", min=1, help="Number of context chunks to include"),
):
    """Enhance a prompt with context."""
    try:
        enhanced = get_app_context(ctx).backend.enhance_prompt(prompt, context_limit=context_limit)
    except BackendError as e:
        fail(f"Could not enhance prompt: {e}")

    if isinstance(enhanced, dict):
        typer.echo(enhanced.get("enhanced_prompt") or prompt)
    else:
        typer.echo(str(enhanced))


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
