"""Orchestrator for ingesting one origin into the vector store.

Pipeline stages: **load -> chunk -> embed -> store -> register**.

:class:`IngestionService` coordinates its collaborators (content
providers, chunkers, embedding provider, vector store, source registry)
without any of them knowing about each other.  Every origin follows the
same flow:

    1. IContentProvider -- reads the file or fetches the URL (text is used as given)
    2. TextChunker -- splits the text into overlapping windows; subtitle
       text uses the smaller subtitle windows
    3. IEmbeddingProvider -- one vector per chunk
    4. IVectorStoreProvider -- replaces any earlier chunks of the same
       source, then upserts the new ones
    5. SourceRegistry -- records the source's display name and creation time

Steps run strictly in order; a failure at any step aborts the rest and
surfaces as :class:`~ragcore.utils.errors.IngestionError` with the
original error chained.  Success is never reported unless the chunks
were embedded and stored.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from ragcore.models.rag import IngestionRequest, IngestionResult, Source, SourceType
from ragcore.services.ingestion.chunker import TextChunker
from ragcore.services.ingestion.subtitle_parser import parse_vtt
from ragcore.utils.concurrency import throttled_gather
from ragcore.utils.errors import (
    ContentUnavailableError,
    EmbeddingUnavailableError,
    IngestionError,
    NoExtractableContentError,
    RagCoreError,
)

if TYPE_CHECKING:
    from ragcore.interfaces.content_provider import IContentProvider
    from ragcore.interfaces.embedding_provider import IEmbeddingProvider
    from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
    from ragcore.services.source_registry import SourceRegistry

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_EMBED_CONCURRENCY = 4


def generate_text_key() -> str:
    """Return a fresh source key for pasted text: ``text-<epoch-ms>-<hex>``."""
    return f"text-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class IngestionService:
    """Runs the load -> chunk -> embed -> store pipeline for one origin.

    Parameters
    ----------
    chunker:
        Chunker for generic text, files and web pages.
    subtitle_chunker:
        Chunker for subtitle-derived text.
    embedding_provider:
        Produces one vector per chunk.
    vector_store:
        Destination for chunks and vectors.
    registry:
        Informed of every successfully stored source.
    file_provider / web_provider:
        Raw content readers.  Ingesting a file or URL without the matching
        provider fails with :class:`ContentUnavailableError`.
    embed_concurrency:
        Ceiling on in-flight single-text embedding calls when the provider
        does not batch.
    """

    def __init__(
        self,
        chunker: TextChunker,
        subtitle_chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        registry: SourceRegistry,
        file_provider: IContentProvider | None = None,
        web_provider: IContentProvider | None = None,
        embed_concurrency: int = _DEFAULT_EMBED_CONCURRENCY,
    ) -> None:
        self._chunker = chunker
        self._subtitle_chunker = subtitle_chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._registry = registry
        self._file_provider = file_provider
        self._web_provider = web_provider
        self._embed_semaphore = asyncio.Semaphore(embed_concurrency)
        self._in_flight: set[str] = set()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def ingest_text(
        self,
        text: str,
        name: str | None = None,
        declared_type: SourceType | None = None,
    ) -> IngestionResult:
        """Ingest pasted text.  *name* doubles as the source key when given."""
        return await self.ingest(IngestionRequest(text=text, name=name, declared_type=declared_type))

    async def ingest_file(
        self,
        file_path: str,
        declared_type: SourceType | None = None,
    ) -> IngestionResult:
        """Ingest a local file; its file name is the source key."""
        return await self.ingest(IngestionRequest(file_path=file_path, declared_type=declared_type))

    async def ingest_url(
        self,
        url: str,
        declared_type: SourceType | None = None,
    ) -> IngestionResult:
        """Ingest a web page or remote PDF; the URL is the source key."""
        return await self.ingest(IngestionRequest(url=url, declared_type=declared_type))

    async def ingest(self, request: IngestionRequest) -> IngestionResult:
        """Ingest one origin and return how many chunks were written.

        Raises
        ------
        IngestionError
            On any failure, including a second concurrent ingestion of a
            source key that is already in flight.
        """
        start = time.monotonic()
        source_key, source_type, source_name = self._identify(request)

        if source_key in self._in_flight:
            raise IngestionError(
                message=f"Source {source_key!r} is already being ingested",
            )
        self._in_flight.add(source_key)
        try:
            written = await self._run(request, source_key, source_type, source_name)
        except IngestionError:
            raise
        except RagCoreError as exc:
            logger.warning(
                "ingestion_failed",
                source_key=source_key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise IngestionError(message=exc.message, provider_name=exc.provider_name) from exc
        except Exception as exc:
            logger.warning(
                "ingestion_failed",
                source_key=source_key,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise IngestionError(message=str(exc)) from exc
        finally:
            self._in_flight.discard(source_key)

        elapsed = round(time.monotonic() - start, 3)
        logger.info(
            "ingestion_complete",
            source_key=source_key,
            source_type=source_type.value,
            chunks=written,
            time_s=elapsed,
        )
        return IngestionResult(
            source_key=source_key,
            source_name=source_name,
            source_type=source_type,
            chunk_count=written,
            ingestion_time=elapsed,
        )

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    @staticmethod
    def _identify(request: IngestionRequest) -> tuple[str, SourceType, str]:
        """Derive ``(source_key, source_type, display_name)`` for *request*."""
        if request.file_path is not None:
            key = Path(request.file_path).name
            inferred = SourceType.VTT if key.lower().endswith(".vtt") else SourceType.FILE
            return key, request.declared_type or inferred, request.name or key
        if request.url is not None:
            key = request.url
            return key, request.declared_type or SourceType.WEBSITE, request.name or key
        key = request.name or generate_text_key()
        return key, request.declared_type or SourceType.TEXT, key

    async def _load(self, request: IngestionRequest, source_type: SourceType) -> str:
        if request.text is not None:
            raw = request.text
            parsed = False
        elif request.file_path is not None:
            if self._file_provider is None:
                raise ContentUnavailableError(message="No file content provider configured")
            raw = await self._file_provider.load(request.file_path)
            parsed = request.file_path.lower().endswith(".vtt")
        else:
            if self._web_provider is None:
                raise ContentUnavailableError(message="No web content provider configured")
            raw = await self._web_provider.load(request.url or "")
            parsed = False

        # A caption track supplied as text or under another extension.
        if source_type == SourceType.VTT and not parsed:
            raw = parse_vtt(raw)
        return raw

    async def _embed(self, texts: list[str]) -> list[list[float]]:
        if self._embedding_provider.supports_batching():
            vectors = await self._embedding_provider.embed(texts)
        else:
            vectors = await throttled_gather(
                [self._embedding_provider.embed_single(t) for t in texts],
                self._embed_semaphore,
                return_exceptions=False,
            )
        if len(vectors) != len(texts):
            raise EmbeddingUnavailableError(
                message=f"Expected {len(texts)} embeddings, received {len(vectors)}",
                provider_name=self._embedding_provider.get_provider_name(),
            )
        return vectors

    async def _run(
        self,
        request: IngestionRequest,
        source_key: str,
        source_type: SourceType,
        source_name: str,
    ) -> int:
        raw = await self._load(request, source_type)
        if not raw or not raw.strip():
            raise NoExtractableContentError(message=f"No extractable content in {request.label}")

        created_at = datetime.now(timezone.utc)
        chunker = self._subtitle_chunker if source_type == SourceType.VTT else self._chunker
        chunks = chunker.chunk(
            raw,
            source_key=source_key,
            source_type=source_type,
            source_name=source_name,
            metadata={"created_at": created_at.isoformat()},
        )
        if not chunks:
            raise NoExtractableContentError(message=f"No extractable content in {request.label}")

        vectors = await self._embed([c.text for c in chunks])

        # Re-ingesting a source replaces its chunks rather than mixing old and new.
        replaced = await self._vector_store.delete_by_key(source_key)
        written = await self._vector_store.add_chunks(chunks, vectors)

        self._registry.add(
            Source.from_key(
                source_key,
                source_type,
                name=source_name,
                created_at=created_at,
                chunk_count=written,
            )
        )
        logger.debug(
            "ingestion_stored",
            source_key=source_key,
            chunks=written,
            replaced_existing=replaced,
        )
        return written
