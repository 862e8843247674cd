"""Pydantic models for document store operations."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class AddStatus(str, Enum):
    """Outcome of adding a single file."""

    SUCCESS = "success"
    ERROR = "error"


class AddOutcome(BaseModel):
    """Result of submitting one file to the document store."""

    file: str = Field(description="Path of the submitted file")
    status: AddStatus
    document_id: Optional[str] = Field(default=None)
    message: Optional[str] = Field(default=None)
    error: Optional[str] = Field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.status == AddStatus.SUCCESS

    @property
    def detail(self) -> str:
        return self.error or self.message or ""


class EnrichmentOutcome(BaseModel):
    """Documents after best-effort status enrichment.

    Documents whose status lookup failed keep their previously known
    embeddings count; their ids map to the failure message in `failures`.
    """

    documents: list[dict[str, Any]] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failures
