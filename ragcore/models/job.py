"""Batch job models for the asynchronous ingestion coordinator.

A :class:`Job` is created when a batch submission is accepted and is
mutated only by :class:`~ragcore.pipeline.job_coordinator.JobCoordinator`.
Callers observe it through snapshots returned by ``get_status``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """Lifecycle states: pending -> processing -> completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ItemOutcome(BaseModel):
    """Result of ingesting one input of a batch job."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(ge=0, description="Index of the input in the job's input list.")
    input: str
    success: bool
    chunks: int = Field(default=0, ge=0)
    error: str | None = None


class JobSummary(BaseModel):
    """Aggregate counts reported once a job completes."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    successful: int = 0
    failed: int = 0
    total_chunks: int = 0


class Job(BaseModel):
    """One asynchronous batch-ingestion request and its tracked lifecycle."""

    id: str
    inputs: list[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    results: list[ItemOutcome] = Field(
        default_factory=list,
        description="Per-input outcomes in completion order.",
    )
    summary: JobSummary | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)
