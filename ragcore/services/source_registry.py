"""Source registry: one logical entry per ingested origin.

The registry is a *view* over the vector store, not a cache.  Every
:meth:`SourceRegistry.list` call scans the store's metadata and groups
chunks by their ``source`` key, so the result always matches what the
store holds, including chunks written by another process or before a
restart.  Explicit registrations made by the ingestion pipeline only
supply details the metadata may lack (display name, creation time); a
registration whose chunks are gone is dropped on the next scan.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from ragcore.interfaces.vector_store_provider import IVectorStoreProvider
from ragcore.models.rag import Source, SourceType, infer_source_type, source_id_for

logger = structlog.get_logger(logger_name=__name__)

__all__ = ["SourceRegistry", "infer_source_type"]

_UNKNOWN_TIME = datetime.fromtimestamp(0, tz=timezone.utc)


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SourceRegistry:
    """Lists, resolves and removes sources stored in a vector store.

    Parameters
    ----------
    vector_store:
        The store whose ``source`` metadata defines which sources exist.
    """

    def __init__(self, vector_store: IVectorStoreProvider) -> None:
        self._vs = vector_store
        self._registered: dict[str, Source] = {}

    def add(self, source: Source) -> None:
        """Record *source* after its chunks were stored successfully."""
        self._registered[source.source_key] = source
        logger.debug("source_registered", source_key=source.source_key, source_id=source.id)

    async def list(self) -> list[Source]:
        """Return every source present in the vector store.

        Ordered by creation time, then source key.
        """
        groups: dict[str, dict[str, Any]] = {}
        for _chunk_id, meta in await self._vs.list_all_metadata():
            key = str(meta.get("source") or "")
            if not key:
                continue
            group = groups.get(key)
            if group is None:
                group = groups[key] = {"meta": meta, "count": 0}
            group["count"] += 1

        # Registrations for keys no longer in the store are stale.
        for stale in set(self._registered) - set(groups):
            del self._registered[stale]

        sources = [self._build_source(key, g["meta"], g["count"]) for key, g in groups.items()]
        sources.sort(key=lambda s: (s.created_at, s.source_key))
        return sources

    async def get(self, key_or_id: str) -> Source | None:
        """Resolve a source by its opaque id or its source key."""
        for source in await self.list():
            if key_or_id in (source.id, source.source_key):
                return source
        return None

    async def remove(self, key_or_id: str) -> bool:
        """Delete a source and all of its chunks.

        Accepts either the opaque id or the source key.  Returns ``False``
        when nothing matches; removing twice is not an error.
        """
        source = await self.get(key_or_id)
        if source is None:
            logger.info("source_remove_not_found", key_or_id=key_or_id)
            return False

        deleted = await self._vs.delete_by_key(source.source_key)
        self._registered.pop(source.source_key, None)
        logger.info(
            "source_removed",
            source_key=source.source_key,
            source_id=source.id,
            chunks=source.chunk_count,
        )
        return deleted

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_source(self, key: str, meta: dict[str, Any], count: int) -> Source:
        registered = self._registered.get(key)
        try:
            source_type = SourceType(meta.get("type"))
        except ValueError:
            source_type = registered.type if registered else infer_source_type(key)

        if registered is not None:
            name = registered.name
            created_at = registered.created_at
        else:
            name = str(meta.get("name") or key)
            created_at = _parse_timestamp(meta.get("created_at")) or _UNKNOWN_TIME

        return Source(
            id=source_id_for(key),
            type=source_type,
            name=name,
            source_key=key,
            created_at=created_at,
            chunk_count=count,
        )
