"""
Export result models.

These models wrap the per-file export trees produced by the
orchestrator together with the status of each file, so a batch run can
report completed records and failures side by side.
"""

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from docexport.models.base import ExportStatus


class FileExportResult(BaseModel):
    """Outcome of exporting one file.

    Attributes:
        path: File path as given by the reflector
        status: Completed, failed or skipped
        record: Export tree for the file (completed only)
        error: Why the export is incomplete (failed only)
        error_location: Element that caused the failure, if known
    """

    path: str = Field(..., description="File path as reflected")
    status: ExportStatus = Field(..., description="Export outcome")
    record: Optional[dict[str, Any]] = Field(default=None, description="Export tree")
    error: Optional[str] = Field(default=None, description="Failure description")
    error_location: Optional[str] = Field(
        default=None,
        description="Offending element",
        examples=["function my_func (line 12)", "classes.0.methods.2.line"],
    )

    @model_validator(mode="after")
    def status_matches_payload(self) -> "FileExportResult":
        """A completed result carries a record, a failed one an error."""
        if self.status == ExportStatus.COMPLETED and self.record is None:
            raise ValueError("completed result requires a record")
        if self.status == ExportStatus.FAILED and not self.error:
            raise ValueError("failed result requires an error")
        return self

    @property
    def ok(self) -> bool:
        """True when the export completed."""
        return self.status == ExportStatus.COMPLETED


class ExportRunResult(BaseModel):
    """Ordered results of one batch export run.

    Attributes:
        root: Root path used for relative path computation
        results: One entry per input file, in input order
        cancelled: Whether the run was cancelled before finishing
        started_at: When the run started
        completed_at: When the run finished
    """

    root: str = Field(..., description="Root path")
    results: list[FileExportResult] = Field(default_factory=list, description="Per-file results")
    cancelled: bool = Field(default=False, description="Run was cancelled")
    started_at: datetime = Field(default_factory=datetime.now, description="Run start")
    completed_at: Optional[datetime] = Field(default=None, description="Run end")

    @computed_field
    @property
    def completed_count(self) -> int:
        """Number of completed files."""
        return sum(1 for r in self.results if r.status == ExportStatus.COMPLETED)

    @computed_field
    @property
    def failed_count(self) -> int:
        """Number of failed files."""
        return sum(1 for r in self.results if r.status == ExportStatus.FAILED)

    @computed_field
    @property
    def skipped_count(self) -> int:
        """Number of files skipped after cancellation."""
        return sum(1 for r in self.results if r.status == ExportStatus.SKIPPED)

    def records(self) -> list[dict[str, Any]]:
        """Export trees of all completed files, in input order."""
        return [r.record for r in self.results if r.record is not None]

    def failures(self) -> list[FileExportResult]:
        """Results of files that failed."""
        return [r for r in self.results if r.status == ExportStatus.FAILED]

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize the completed records as a JSON array."""
        return json.dumps(self.records(), indent=indent, default=str)
