"""Composition root: wires settings, providers and services together.

:func:`build_components` is the single place that chooses concrete
adapters.  Everything downstream receives its collaborators through
constructor injection, so tests and scripts can swap any of them::

    components = build_components(Settings(vector_store_backend="memory"))
    result = await components["ingestion_service"].ingest_text("hello world")
    hits = await components["retriever"].retrieve("greeting")
    await close_components(components)
"""

from __future__ import annotations

from typing import Any

import structlog

from ragcore.config.settings import Settings
from ragcore.interfaces.embedding_provider import IEmbeddingProvider
from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
from ragcore.pipeline.job_coordinator import JobCoordinator
from ragcore.providers.content.file_content_provider import FileContentProvider
from ragcore.providers.content.web_content_provider import WebContentProvider
from ragcore.services.ingestion.chunker import TextChunker
from ragcore.services.ingestion.ingestion_service import IngestionService
from ragcore.services.ingestion.subtitle_parser import SubtitleParser
from ragcore.services.retriever import Retriever
from ragcore.services.source_registry import SourceRegistry

logger = structlog.get_logger(logger_name=__name__)


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    from ragcore.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

    provider = OpenAIEmbeddingProvider(settings=app_settings)
    if not provider.is_available():
        logger.warning(
            "embedding_provider_unconfigured",
            provider=provider.get_provider_name(),
            msg="OPENAI_API_KEY is not set; ingestion and retrieval calls will fail.",
        )
    return provider


def _build_vector_store(app_settings: Settings) -> IVectorStoreProvider:
    """Return the configured backend; ``memory`` is the local fallback."""
    if app_settings.vector_store_backend == "memory":
        from ragcore.providers.vector_store.memory_provider import InMemoryVectorStore

        return InMemoryVectorStore()

    # Deferred: importing chromadb is slow and patches telemetry globals.
    from ragcore.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
    )


def build_components(
    custom_settings: Settings | None = None,
    embedding_provider: IEmbeddingProvider | None = None,
    vector_store: IVectorStoreProvider | None = None,
) -> dict[str, Any]:
    """Construct every service with its dependencies injected.

    Parameters
    ----------
    custom_settings:
        Application settings.  Uses the module-level ``settings`` if not provided.
    embedding_provider / vector_store:
        Optional pre-built adapters that replace the configured ones.

    Returns
    -------
    dict[str, Any]
        Keys: ``settings``, ``embedding_provider``, ``vector_store``,
        ``registry``, ``file_provider``, ``web_provider``,
        ``ingestion_service``, ``job_coordinator``, ``retriever``.
    """
    if custom_settings is None:
        from ragcore.config import settings

        custom_settings = settings

    app_settings = custom_settings
    embedding_provider = embedding_provider or _build_embedding_provider(app_settings)
    vector_store = vector_store or _build_vector_store(app_settings)

    registry = SourceRegistry(vector_store)
    file_provider = FileContentProvider(subtitle_parser=SubtitleParser())
    web_provider = WebContentProvider(timeout=app_settings.http_timeout)

    ingestion_service = IngestionService(
        chunker=TextChunker(app_settings.chunk_size, app_settings.chunk_overlap),
        subtitle_chunker=TextChunker(
            app_settings.subtitle_chunk_size, app_settings.subtitle_chunk_overlap
        ),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        registry=registry,
        file_provider=file_provider,
        web_provider=web_provider,
    )
    job_coordinator = JobCoordinator(
        ingestion_service,
        group_size=app_settings.batch_group_size,
        group_pause=app_settings.batch_group_pause,
    )
    retriever = Retriever(
        embedding_provider,
        vector_store,
        default_k=app_settings.retrieval_top_k,
    )

    logger.info(
        "components_built",
        embedding_provider=embedding_provider.get_provider_name(),
        vector_store=vector_store.get_provider_name(),
    )
    return {
        "settings": app_settings,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "registry": registry,
        "file_provider": file_provider,
        "web_provider": web_provider,
        "ingestion_service": ingestion_service,
        "job_coordinator": job_coordinator,
        "retriever": retriever,
    }


async def close_components(components: dict[str, Any]) -> None:
    """Drain queued jobs and release network clients."""
    await components["job_coordinator"].shutdown()
    await components["web_provider"].aclose()
