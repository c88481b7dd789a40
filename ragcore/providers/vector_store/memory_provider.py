"""In-process vector store with exact cosine-similarity ranking.

Holds every chunk and its vector in a dict keyed by ``chunk_id``.  Suitable
for tests, throwaway sessions and small corpora; contents are lost when the
process exits.  Each instance is independent: there is no module-level
store, and contents are cleared only by :meth:`InMemoryVectorStore.reset`.
"""

from __future__ import annotations

from typing import Any

import structlog

from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
from ragcore.models.rag import Chunk, RetrievedChunk
from ragcore.utils.errors import DimensionMismatchError
from ragcore.utils.similarity import rank_by_similarity

logger = structlog.get_logger(logger_name=__name__)


class InMemoryVectorStore(IVectorStoreProvider):
    """Vector store backed by a plain dict, ranked with :func:`rank_by_similarity`.

    Insertion order is preserved (an upsert of an existing id keeps its
    original slot), so equal-score results come back in the order their
    chunks were first stored.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Chunk, list[float]]] = {}
        self._dimension: int | None = None

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def add_chunks(
        self,
        chunks: list[Chunk],
        embeddings: list[list[float]],
    ) -> int:
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"chunks and embeddings length mismatch: {len(chunks)} != {len(embeddings)}"
            )
        if not chunks:
            return 0

        expected = self._dimension if self._dimension is not None else len(embeddings[0])
        for vector in embeddings:
            if len(vector) != expected:
                raise DimensionMismatchError(
                    message=f"Cannot store a {len(vector)}-dim vector in a {expected}-dim store",
                    provider_name=self.get_provider_name(),
                )

        for chunk, vector in zip(chunks, embeddings):
            self._entries[chunk.chunk_id] = (chunk, list(vector))
        self._dimension = expected

        logger.debug("memory_store_add_chunks", count=len(chunks), total=len(self._entries))
        return len(chunks)

    async def query(
        self,
        query_embedding: list[float],
        top_k: int = 10,
    ) -> list[RetrievedChunk]:
        ranked = rank_by_similarity(query_embedding, self._entries.values(), top_k)
        return [
            RetrievedChunk(chunk=chunk, score=score, formatted_citation=chunk.citation)
            for chunk, score in ranked
        ]

    async def delete_by_key(self, source_key: str) -> bool:
        doomed = [
            chunk_id
            for chunk_id, (chunk, _vector) in self._entries.items()
            if chunk.source_key == source_key
        ]
        for chunk_id in doomed:
            del self._entries[chunk_id]
        if not self._entries:
            self._dimension = None

        logger.info("memory_store_delete_by_key", source_key=source_key, deleted_count=len(doomed))
        return bool(doomed)

    async def list_source_keys(self) -> set[str]:
        return {chunk.source_key for chunk, _vector in self._entries.values()}

    async def list_all_metadata(self) -> list[tuple[str, dict[str, Any]]]:
        return [
            (chunk_id, chunk.to_metadata())
            for chunk_id, (chunk, _vector) in self._entries.items()
        ]

    async def count(self) -> int:
        return len(self._entries)

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Drop every stored chunk."""
        self._entries.clear()
        self._dimension = None
