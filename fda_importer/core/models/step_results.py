"""
Step result models returned by the pipeline components (ephemeral, not persisted).

Every best-effort step reports what it achieved plus the error that stopped it,
so the orchestrator can decide whether to continue.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .submission_category import SubmissionCategory


class FetchResult(BaseModel):
    """
    Outcome of paginating one category of the device API.

    Attributes:
        category: Category that was fetched
        records: Raw records in the order received
        pages: Number of non-empty pages received
        error: Message of the failure that ended pagination early
    """

    category: SubmissionCategory
    records: list[dict[str, Any]] = Field(default_factory=list)
    pages: int = 0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class StoreResult(BaseModel):
    """Outcome of one bulk insert into the devices table."""

    added: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    error: str | None = None


class ExportResult(BaseModel):
    """
    Outcome of exporting the devices table.

    records_written is 0 and written is False when the store was empty or
    the file could not be produced.
    """

    path: Path
    records_written: int = Field(0, ge=0)
    error: str | None = None

    @property
    def written(self) -> bool:
        return self.records_written > 0 and self.error is None


class CategorySummary(BaseModel):
    """Counts for one category within a pipeline run."""

    category: SubmissionCategory
    fetched: int = 0
    transformed: int = 0
    added: int = 0
    skipped: int = 0
    fetch_error: str | None = None
    store_error: str | None = None


class ImportSummary(BaseModel):
    """Summary of a full import run."""

    categories: list[CategorySummary] = Field(default_factory=list)
    approved_count: int | None = None
    export: ExportResult | None = None

    @property
    def total_added(self) -> int:
        return sum(c.added for c in self.categories)

    @property
    def total_skipped(self) -> int:
        return sum(c.skipped for c in self.categories)
