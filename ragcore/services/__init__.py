"""Business-logic services for ragcore.

- **ingestion** -- load, chunk, embed and store one origin.
- **source_registry** -- lists and removes sources as a view over the
  vector store's metadata.
- **retriever** -- embeds a query and returns the closest chunks.
"""

from ragcore.services.retriever import Retriever
from ragcore.services.source_registry import SourceRegistry, infer_source_type

__all__ = ["Retriever", "SourceRegistry", "infer_source_type"]
