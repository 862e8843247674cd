"""File collection, batch add and list enrichment for the document store."""

import glob
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from .backend.client import BackendClient, BackendError
from .models.documents import AddOutcome, AddStatus, EnrichmentOutcome
from .search.fields import as_int, as_text, first_present

logger = logging.getLogger(__name__)

TYPE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "pdf": (".pdf",),
    "docx": (".docx",),
    "txt": (".txt",),
    "md": (".md", ".markdown"),
    "html": (".html", ".htm"),
}


def should_process_file(path: Path, doc_type: Optional[str]) -> bool:
    """Check a file against the --type filter (no filter accepts everything)."""
    if not doc_type:
        return True
    return path.suffix.lower() in TYPE_EXTENSIONS.get(doc_type, ())


def _is_glob(pattern: str) -> bool:
    return "*" in pattern or "?" in pattern


def collect_files_from_directory(directory: Path, recursive: bool, doc_type: Optional[str]) -> list[Path]:
    candidates = directory.rglob("*") if recursive else directory.glob("*")
    return sorted(p for p in candidates if p.is_file() and should_process_file(p, doc_type))


def collect_files(
    paths: Sequence[str],
    recursive: bool = True,
    doc_type: Optional[str] = None,
) -> tuple[list[Path], list[str]]:
    """Expand paths, directories and glob patterns into files to add.

    Args:
        paths: Files, directories or glob patterns (containing * or ?)
        recursive: Descend into subdirectories
        doc_type: Optional document type filter (pdf, docx, txt, md, html)

    Returns:
        Tuple of (files to process, paths that were not found)
    """
    files: list[Path] = []
    missing: list[str] = []

    for raw_path in paths:
        if _is_glob(raw_path):
            for match in sorted(glob.glob(raw_path, recursive=True)):
                match_path = Path(match)
                if match_path.is_file():
                    if should_process_file(match_path, doc_type):
                        files.append(match_path)
                elif match_path.is_dir() and recursive:
                    files.extend(collect_files_from_directory(match_path, recursive, doc_type))
            continue

        path = Path(raw_path)
        if path.is_dir():
            files.extend(collect_files_from_directory(path, recursive, doc_type))
        elif path.is_file():
            files.append(path)
        else:
            missing.append(raw_path)

    return files, missing


def process_single_file(backend: BackendClient, path: Path) -> AddOutcome:
    """Submit one file; a failure becomes an error outcome instead of aborting the batch."""
    try:
        result = backend.add_document(str(path))
    except BackendError as e:
        logger.warning(f"Failed to add {path}: {e}")
        return AddOutcome(file=str(path), status=AddStatus.ERROR, error=str(e))

    succeeded = bool(result.get("success")) if isinstance(result, dict) else False
    return AddOutcome(
        file=str(path),
        status=AddStatus.SUCCESS if succeeded else AddStatus.ERROR,
        document_id=as_text(first_present(result, ("document_id", "id"))),
        message=as_text(first_present(result, ("message",))),
    )


def add_documents(
    backend: BackendClient,
    files: Sequence[Path],
    workers: int = 1,
    on_progress: Optional[Callable[[AddOutcome], None]] = None,
) -> list[AddOutcome]:
    """Add files to the document store, one backend call per file.

    With workers > 1 the calls run on a thread pool and progress is reported
    as each file finishes. Outcomes are returned in input order either way.
    """
    if workers <= 1:
        outcomes = []
        for path in files:
            outcome = process_single_file(backend, path)
            outcomes.append(outcome)
            if on_progress:
                on_progress(outcome)
        return outcomes

    slots: list[Optional[AddOutcome]] = [None] * len(files)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(process_single_file, backend, path): index for index, path in enumerate(files)}
        for future in as_completed(futures):
            index = futures[future]
            slots[index] = future.result()
            if on_progress:
                on_progress(slots[index])
    return [outcome for outcome in slots if outcome is not None]


def enrich_with_status(backend: BackendClient, documents: Sequence[dict[str, Any]]) -> EnrichmentOutcome:
    """Refresh each document's embeddings count from its processing status.

    Best effort: when a status lookup fails, the document keeps the count it
    was listed with and the failure is recorded in the outcome.
    """
    enriched: list[dict[str, Any]] = []
    failures: dict[str, str] = {}

    for document in documents:
        doc = dict(document)
        document_id = as_text(first_present(doc, ("id", "document_id")))
        if document_id is None:
            enriched.append(doc)
            continue
        try:
            status = backend.document_status(document_id)
        except BackendError as e:
            logger.warning(f"Status enrichment failed for document {document_id}; keeping previous count: {e}")
            failures[document_id] = str(e)
        else:
            count = as_int(first_present(status, ("embeddings_count",)))
            if count is not None:
                doc["embeddings_count"] = count
        enriched.append(doc)

    return EnrichmentOutcome(documents=enriched, failures=failures)
