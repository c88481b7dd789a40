"""Shared pytest fixtures for the ragcore test suite."""

from __future__ import annotations

import hashlib
import logging
import math
import re
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from ragcore.interfaces.content_provider import IContentProvider
from ragcore.interfaces.embedding_provider import IEmbeddingProvider
from ragcore.models.rag import Chunk, SourceType, chunk_id_for
from ragcore.providers.content.file_content_provider import FileContentProvider
from ragcore.providers.vector_store.memory_provider import InMemoryVectorStore
from ragcore.services.ingestion.chunker import TextChunker
from ragcore.services.ingestion.ingestion_service import IngestionService
from ragcore.services.source_registry import SourceRegistry

EMBEDDING_DIM = 64

_WORD = re.compile(r"[a-z0-9]+")


def bag_of_words_vector(text: str, dim: int = EMBEDDING_DIM) -> list[float]:
    """Deterministic unit vector: each lowercase word adds 1 to a hashed bucket.

    Texts sharing words point in similar directions, so ranking tests can
    reason about which chunk should win.  Text without words maps to the
    zero vector.
    """
    vector = [0.0] * dim
    for word in _WORD.findall(text.lower()):
        bucket = int.from_bytes(hashlib.sha256(word.encode("utf-8")).digest()[:4], "big") % dim
        vector[bucket] += 1.0
    norm = math.sqrt(sum(v * v for v in vector))
    if norm == 0.0:
        return vector
    return [v / norm for v in vector]


class FakeEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider that records its calls."""

    def __init__(self, batching: bool = True) -> None:
        self._batching = batching
        self.embed_calls: list[list[str]] = []
        self.single_calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.embed_calls.append(list(texts))
        return [bag_of_words_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.single_calls.append(text)
        return bag_of_words_vector(text)

    def get_dimension(self) -> int:
        return EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "fake-embedding"

    def is_available(self) -> bool:
        return True

    def supports_batching(self) -> bool:
        return self._batching


def make_chunk(
    source_key: str = "notes.txt",
    index: int = 0,
    text: str = "test text",
    source_type: SourceType = SourceType.FILE,
    source_name: str = "",
    metadata: dict[str, str] | None = None,
) -> Chunk:
    return Chunk(
        chunk_id=chunk_id_for(source_key, index),
        text=text,
        index=index,
        source_key=source_key,
        source_type=source_type,
        source_name=source_name or source_key,
        metadata=metadata or {},
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def registry(memory_store: InMemoryVectorStore) -> SourceRegistry:
    return SourceRegistry(memory_store)


@pytest.fixture
def web_provider() -> MagicMock:
    """A web content provider that serves canned page text."""
    mock = MagicMock(spec=IContentProvider)
    mock.load = AsyncMock(return_value="Refunds are processed within five business days.")
    mock.supports.return_value = True
    mock.get_provider_name.return_value = "web"
    return mock


@pytest.fixture
def ingestion_service(
    embedding_provider: FakeEmbeddingProvider,
    memory_store: InMemoryVectorStore,
    registry: SourceRegistry,
    web_provider: MagicMock,
) -> IngestionService:
    return IngestionService(
        chunker=TextChunker(chunk_size=200, overlap=40),
        subtitle_chunker=TextChunker(chunk_size=120, overlap=20),
        embedding_provider=embedding_provider,
        vector_store=memory_store,
        registry=registry,
        file_provider=FileContentProvider(),
        web_provider=web_provider,
    )


@pytest.fixture(autouse=True)
def _restore_logging_config():
    """Undo any structlog / root-logger configuration a test applied."""
    root_handlers = list(logging.getLogger().handlers)
    root_level = logging.getLogger().level
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers[:] = root_handlers
    root.setLevel(root_level)
