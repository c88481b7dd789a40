"""Batch job coordination for multi-input ingestion."""

from ragcore.pipeline.job_coordinator import JobCoordinator, ProgressCallback, progress_percent

__all__ = ["JobCoordinator", "ProgressCallback", "progress_percent"]
