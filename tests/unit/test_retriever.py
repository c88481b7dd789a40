"""Unit tests for query-time retrieval."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from ragcore.interfaces.embedding_provider import IEmbeddingProvider
from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
from ragcore.models.rag import RetrievedChunk
from ragcore.providers.vector_store.memory_provider import InMemoryVectorStore
from ragcore.services.ingestion.ingestion_service import IngestionService
from ragcore.services.retriever import Retriever
from ragcore.utils.errors import InvalidQueryError
from tests.conftest import FakeEmbeddingProvider, make_chunk


def _mock_retriever(default_k: int = 10) -> tuple[Retriever, MagicMock, MagicMock]:
    embedder = MagicMock(spec=IEmbeddingProvider)
    embedder.embed_single = AsyncMock(return_value=[1.0, 0.0])
    store = MagicMock(spec=IVectorStoreProvider)
    store.query = AsyncMock(return_value=[])
    return Retriever(embedder, store, default_k=default_k), embedder, store


class TestRetrieverValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    async def test_blank_query_never_embeds(self, query: str) -> None:
        retriever, embedder, store = _mock_retriever()

        with pytest.raises(InvalidQueryError):
            await retriever.retrieve(query)

        embedder.embed_single.assert_not_awaited()
        store.query.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [0, -3])
    async def test_non_positive_k(self, k: int) -> None:
        retriever, embedder, _ = _mock_retriever()
        with pytest.raises(InvalidQueryError):
            await retriever.retrieve("refunds", k=k)
        embedder.embed_single.assert_not_awaited()

    def test_invalid_default_k(self) -> None:
        with pytest.raises(InvalidQueryError):
            Retriever(MagicMock(spec=IEmbeddingProvider), MagicMock(spec=IVectorStoreProvider), default_k=0)

    @pytest.mark.asyncio
    async def test_default_k_and_stripped_query(self) -> None:
        retriever, embedder, store = _mock_retriever(default_k=7)

        await retriever.retrieve("  refund policy  ")

        embedder.embed_single.assert_awaited_once_with("refund policy")
        store.query.assert_awaited_once_with([1.0, 0.0], top_k=7)


class TestRetrieverRanking:
    @pytest.mark.asyncio
    async def test_best_match_first(
        self,
        ingestion_service: IngestionService,
        embedding_provider: FakeEmbeddingProvider,
        memory_store: InMemoryVectorStore,
    ) -> None:
        await ingestion_service.ingest_text("Refunds are issued within five business days.", name="refunds")
        await ingestion_service.ingest_text("The cafeteria opens at eight every morning.", name="cafeteria")
        await ingestion_service.ingest_text("Parking permits renew each January.", name="parking")
        retriever = Retriever(embedding_provider, memory_store)

        results = await retriever.retrieve("how many business days for refunds", k=2)

        assert len(results) == 2
        assert results[0].chunk.source_key == "refunds"
        assert results[0].score > results[1].score
        assert results[0].formatted_citation == "refunds #1"

    @pytest.mark.asyncio
    async def test_empty_store(self, embedding_provider: FakeEmbeddingProvider) -> None:
        retriever = Retriever(embedding_provider, InMemoryVectorStore())
        assert await retriever.retrieve("anything", k=5) == []


class TestFormatContext:
    def test_numbered_cited_blocks(self) -> None:
        results = [
            RetrievedChunk(
                chunk=make_chunk("handbook.pdf", 2, text="Refunds take five days."),
                score=0.9123,
                formatted_citation="handbook.pdf #3",
            ),
            RetrievedChunk(chunk=make_chunk("faq", 0, text="Ask support."), score=0.5),
        ]

        assert Retriever.format_context(results) == (
            "[1] handbook.pdf #3 (score 0.912)\nRefunds take five days.\n\n"
            "[2] faq #1 (score 0.500)\nAsk support."
        )

    def test_no_results(self) -> None:
        assert Retriever.format_context([]) == ""
