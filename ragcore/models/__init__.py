"""ragcore domain models -- re-exports all public model classes.

    - rag.py  -- chunks, retrieval results, sources, ingestion requests/results
    - job.py  -- batch job lifecycle, per-input outcomes and summaries
"""

from __future__ import annotations

from ragcore.models.job import ItemOutcome, Job, JobStatus, JobSummary
from ragcore.models.rag import (
    Chunk,
    IngestionRequest,
    IngestionResult,
    RetrievedChunk,
    Source,
    SourceType,
    chunk_id_for,
    infer_source_type,
    source_id_for,
)

__all__ = [
    # rag
    "Chunk",
    "IngestionRequest",
    "IngestionResult",
    "RetrievedChunk",
    "Source",
    "SourceType",
    "chunk_id_for",
    "infer_source_type",
    "source_id_for",
    # job
    "ItemOutcome",
    "Job",
    "JobStatus",
    "JobSummary",
]
