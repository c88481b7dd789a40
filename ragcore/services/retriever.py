"""Query-time retrieval: embed the question, rank stored chunks.

:class:`Retriever` is the read side of the pipeline.  It validates the
query before any embedding call so an empty question never costs an API
round-trip, then asks the vector store for the closest chunks.
"""

from __future__ import annotations

import structlog

from ragcore.interfaces.embedding_provider import IEmbeddingProvider
from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
from ragcore.models.rag import RetrievedChunk
from ragcore.utils.errors import InvalidQueryError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_K = 10


class Retriever:
    """Top-k semantic search over the vector store."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        default_k: int = _DEFAULT_K,
    ) -> None:
        if default_k <= 0:
            raise InvalidQueryError(message=f"default_k must be positive, got {default_k}")
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._default_k = default_k

    async def retrieve(self, query: str, k: int | None = None) -> list[RetrievedChunk]:
        """Return up to *k* chunks most similar to *query*, best first.

        Raises
        ------
        InvalidQueryError
            If *query* is empty or whitespace-only, or *k* is not positive.
        """
        if not query or not query.strip():
            raise InvalidQueryError(message="Query must not be empty")
        top_k = self._default_k if k is None else k
        if top_k <= 0:
            raise InvalidQueryError(message=f"k must be positive, got {top_k}")

        query_embedding = await self._embedding_provider.embed_single(query.strip())
        results = await self._vector_store.query(query_embedding, top_k=top_k)

        logger.info(
            "retrieval_complete",
            query_length=len(query),
            k=top_k,
            results_count=len(results),
            top_score=round(results[0].score, 4) if results else None,
        )
        return results

    @staticmethod
    def format_context(results: list[RetrievedChunk]) -> str:
        """Render results as numbered, cited passages for an answer prompt.

        ::

            [1] handbook.pdf #3 (score 0.912)
            <chunk text>
        """
        blocks = [
            f"[{position}] {rc.formatted_citation or rc.chunk.citation} "
            f"(score {rc.score:.3f})\n{rc.chunk.text}"
            for position, rc in enumerate(results, start=1)
        ]
        return "\n\n".join(blocks)
