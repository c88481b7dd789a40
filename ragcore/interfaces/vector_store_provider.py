"""Abstract base class for vector-store service providers.

Defines the contract for storing, querying and deleting embedded chunks.
Implementations may wrap ChromaDB (persistent, local), an in-process list
(tests and throwaway sessions) or any other vector database.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ragcore.models.rag import Chunk, RetrievedChunk


# Concrete implementations (ragcore/providers/vector_store/):
#   ChromaDBProvider     -- persists to CHROMADB_PERSIST_DIR
#   InMemoryVectorStore  -- exact cosine ranking, lost on exit
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by the RAG pipeline.

    Every stored chunk carries a ``source`` metadata entry holding its
    parent source key; :meth:`delete_by_key` removes all chunks sharing
    that key.  All query and mutation methods are async.
    """

    @abstractmethod
    async def add_chunks(
        self,
        chunks: list[Chunk],
        embeddings: list[list[float]],
    ) -> int:
        """Upsert pre-embedded chunks into the store.

        Parameters
        ----------
        chunks:
            The chunks to store.  Each chunk's ``chunk_id`` is the primary
            key; an existing entry with the same id is overwritten.
        embeddings:
            Vectors corresponding positionally to *chunks*.

        Returns
        -------
        int
            The number of chunks written.

        Raises
        ------
        ValueError
            If ``len(chunks) != len(embeddings)``.
        ragcore.utils.errors.VectorStoreError
            If the store operation fails.
        """

    @abstractmethod
    async def query(
        self,
        query_embedding: list[float],
        top_k: int = 10,
    ) -> list[RetrievedChunk]:
        """Return up to *top_k* chunks ranked by cosine similarity, best first.

        An empty store yields an empty list.

        Raises
        ------
        ragcore.utils.errors.DimensionMismatchError
            If the query vector length differs from the stored vectors.
        ragcore.utils.errors.VectorStoreError
            If the backend query fails.
        """

    @abstractmethod
    async def delete_by_key(self, source_key: str) -> bool:
        """Delete every chunk whose ``source`` metadata equals *source_key*.

        Returns ``True`` when at least one chunk was removed.
        """

    @abstractmethod
    async def list_source_keys(self) -> set[str]:
        """Return the distinct ``source`` metadata values present in the store."""

    @abstractmethod
    async def list_all_metadata(self) -> list[tuple[str, dict[str, Any]]]:
        """Return ``(chunk_id, metadata)`` for every stored chunk.

        Used by the source registry to reconcile its view with what the
        store actually holds.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of stored chunks."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"`` or ``"memory"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is reachable."""
