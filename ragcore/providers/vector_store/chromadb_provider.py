"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
Uses cosine distance for similarity search.  Fully local, free, and
Python-native -- no external service required.
"""

from __future__ import annotations

import os
from typing import Any

# ChromaDB's bundled PostHog client can clash with the installed posthog
# version ("capture() takes 1 positional argument but 3 were given").
# Telemetry is switched off before chromadb is imported:
#   1. ANONYMIZED_TELEMETRY env var
#   2. posthog.disabled = True
#   3. Settings(anonymized_telemetry=False) passed to PersistentClient
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
from ragcore.models.rag import Chunk, RetrievedChunk
from ragcore.utils.errors import DimensionMismatchError, VectorStoreError

logger = structlog.get_logger(logger_name=__name__)

_PAGE_SIZE = 5000


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that must never run.

    ragcore always passes pre-computed vectors to ``upsert`` and ``query``.
    Supplying this stops ChromaDB from downloading its default ONNX model
    when the collection is created.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "ragcore uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    One collection per deployment.  Chunk ids are the ChromaDB primary
    keys, so re-adding a chunk overwrites it.  Similarity is reported as
    ``1 - cosine distance``.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "myrag-collection",
    ) -> None:
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        try:
            self._client = chromadb.PersistentClient(
                path=persist_directory,
                settings=chromadb.config.Settings(anonymized_telemetry=False),
            )
            # Collections created by an older ChromaDB with the default
            # embedding function reject a different one; reopen without it.
            try:
                self._collection = self._client.get_or_create_collection(
                    name=collection_name,
                    metadata={"hnsw:space": "cosine"},
                    embedding_function=_NoopEmbeddingFunction(),
                )
            except ValueError:
                self._collection = self._client.get_or_create_collection(
                    name=collection_name,
                    metadata={"hnsw:space": "cosine"},
                )
        except Exception as exc:
            raise VectorStoreError(
                message=f"Could not open ChromaDB collection {collection_name!r}: {exc}",
                provider_name="chromadb",
            ) from exc

        logger.info(
            "chromadb_collection_opened",
            path=persist_directory,
            collection=collection_name,
            count=self._collection.count(),
        )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def add_chunks(
        self,
        chunks: list[Chunk],
        embeddings: list[list[float]],
        batch_size: int = 500,
    ) -> int:
        """Upsert pre-embedded chunks in batches of *batch_size*."""
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"chunks and embeddings length mismatch: {len(chunks)} != {len(embeddings)}"
            )
        if not chunks:
            return 0

        stored_dim = self._stored_dimension()
        if stored_dim is not None and len(embeddings[0]) != stored_dim:
            raise DimensionMismatchError(
                message=(
                    f"Cannot store {len(embeddings[0])}-dim vectors in a collection "
                    f"holding {stored_dim}-dim vectors"
                ),
                provider_name=self.get_provider_name(),
            )

        try:
            total_stored = 0
            for start in range(0, len(chunks), batch_size):
                batch_chunks = chunks[start : start + batch_size]
                self._collection.upsert(
                    ids=[c.chunk_id for c in batch_chunks],
                    embeddings=embeddings[start : start + batch_size],
                    documents=[c.text for c in batch_chunks],
                    metadatas=[c.to_metadata() for c in batch_chunks],
                )
                total_stored += len(batch_chunks)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB add_chunks failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_add_chunks",
            count=total_stored,
            batches=(len(chunks) + batch_size - 1) // batch_size,
        )
        return total_stored

    async def query(
        self,
        query_embedding: list[float],
        top_k: int = 10,
    ) -> list[RetrievedChunk]:
        if top_k <= 0:
            return []

        try:
            total = self._collection.count()
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if total == 0:
            return []

        stored_dim = self._stored_dimension()
        if stored_dim is not None and len(query_embedding) != stored_dim:
            raise DimensionMismatchError(
                message=(
                    f"Query vector has {len(query_embedding)} dimensions, "
                    f"collection holds {stored_dim}-dim vectors"
                ),
                provider_name=self.get_provider_name(),
            )

        try:
            results = self._collection.query(
                query_embeddings=[query_embedding],
                n_results=min(top_k, total),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = results["ids"][0] if results["ids"] else []
        documents = results["documents"][0] if results["documents"] else [""] * len(ids)
        metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(ids)
        distances = results["distances"][0] if results["distances"] else [1.0] * len(ids)

        retrieved: list[RetrievedChunk] = []
        for chunk_id, text, meta, distance in zip(ids, documents, metadatas, distances, strict=True):
            chunk = Chunk.from_metadata(chunk_id, dict(meta or {}), text or "")
            retrieved.append(
                RetrievedChunk(
                    chunk=chunk,
                    score=1.0 - float(distance),
                    formatted_citation=chunk.citation,
                )
            )
        # ChromaDB already orders by distance; a stable sort keeps its tie order.
        retrieved.sort(key=lambda rc: rc.score, reverse=True)

        logger.info(
            "chromadb_query",
            results_count=len(retrieved),
            top_score=retrieved[0].score if retrieved else 0.0,
        )
        return retrieved

    async def delete_by_key(self, source_key: str) -> bool:
        try:
            existing = self._collection.get(where={"source": source_key}, include=[])
            count = len(existing["ids"]) if existing["ids"] else 0
            if count > 0:
                self._collection.delete(where={"source": source_key})
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB delete_by_key failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_delete_by_key", source_key=source_key, deleted_count=count)
        return count > 0

    async def list_source_keys(self) -> set[str]:
        rows = await self.list_all_metadata()
        return {str(meta["source"]) for _chunk_id, meta in rows if meta.get("source")}

    async def list_all_metadata(self) -> list[tuple[str, dict[str, Any]]]:
        """Scan the collection in 5K-row pages (SQLite bind-parameter limit)."""
        rows: list[tuple[str, dict[str, Any]]] = []
        offset = 0
        try:
            while True:
                page = self._collection.get(
                    include=["metadatas"], limit=_PAGE_SIZE, offset=offset
                )
                ids = page["ids"] or []
                if not ids:
                    break
                metadatas = page["metadatas"] or [{}] * len(ids)
                for chunk_id, meta in zip(ids, metadatas, strict=True):
                    rows.append((chunk_id, dict(meta or {})))
                if len(ids) < _PAGE_SIZE:
                    break
                offset += _PAGE_SIZE
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB list_all_metadata failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return rows

    async def count(self) -> int:
        try:
            return self._collection.count()
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _stored_dimension(self) -> int | None:
        """Return the length of one stored vector, or ``None`` when empty."""
        try:
            sample = self._collection.peek(limit=1)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB peek failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        embeddings = sample.get("embeddings") if sample else None
        if embeddings is None or len(embeddings) == 0:
            return None
        return len(embeddings[0])
