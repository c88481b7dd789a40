"""Utility modules for ragcore.

- **errors** -- Domain exception hierarchy rooted at RagCoreError; each
  pipeline stage raises its own subclass so callers can handle failures
  granularly.
- **concurrency** -- semaphore-throttled gather and fixed-size grouping used
  by the ingestion service and the batch job coordinator.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **similarity** -- exact cosine similarity and stable top-k ranking for the
  in-memory vector store.
"""

from ragcore.utils.concurrency import grouped, throttled_gather
from ragcore.utils.errors import (
    ContentUnavailableError,
    DimensionMismatchError,
    EmbeddingUnavailableError,
    IngestionError,
    InvalidConfigurationError,
    InvalidQueryError,
    JobFaultError,
    NoExtractableContentError,
    RagCoreError,
    UnsupportedContentTypeError,
    VectorStoreError,
)
from ragcore.utils.logging import configure_logging, get_logger
from ragcore.utils.similarity import cosine_similarity, rank_by_similarity

__all__ = [
    "ContentUnavailableError",
    "DimensionMismatchError",
    "EmbeddingUnavailableError",
    "IngestionError",
    "InvalidConfigurationError",
    "InvalidQueryError",
    "JobFaultError",
    "NoExtractableContentError",
    "RagCoreError",
    "UnsupportedContentTypeError",
    "VectorStoreError",
    "configure_logging",
    "cosine_similarity",
    "get_logger",
    "grouped",
    "rank_by_similarity",
    "throttled_gather",
]
