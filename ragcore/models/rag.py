"""RAG data models: chunks, retrieval results, sources and ingestion requests.

Defines Pydantic v2 models for the ingestion/retrieval core.  Value objects
use frozen config so a chunk cannot change between the moment it is
embedded and the moment it is stored.

Flow through the system:

    1. INGESTION: an :class:`IngestionRequest` names one origin (text, file
       path or URL).  Its raw text is split into :class:`Chunk` windows.
    2. EMBEDDING: each chunk's text becomes one vector.
    3. STORAGE: chunk + vector + metadata are upserted into the vector store.
    4. RETRIEVAL: a query vector is ranked against stored vectors, yielding
       :class:`RetrievedChunk` results.

A :class:`Source` is the logical origin of a set of chunks, identified by
its ``source_key`` (file name, URL, or generated text id).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Fixed namespace so source and chunk ids are reproducible across processes.
_ID_NAMESPACE = uuid.UUID("6f1d3c1e-5a0b-4c36-9d0e-7b6a1f0c2e44")


class SourceType(str, Enum):
    """Kind of origin a chunk came from."""

    TEXT = "text"
    FILE = "file"
    WEBSITE = "website"
    VTT = "vtt"


_URL_PREFIXES = ("http://", "https://")
_FILE_EXTENSIONS = (".pdf", ".csv", ".txt", ".md")

# Characters of pasted text shown in an unnamed request's label.
_LABEL_SNIPPET = 40


def infer_source_type(source_key: str) -> SourceType:
    """Guess a source type from the shape of its key.

    Only a fallback for stored chunks that lack a ``type`` metadata entry;
    stored metadata always wins.  URLs are websites, ``.vtt`` names are
    subtitles, known document extensions are files, anything else is text.
    """
    lowered = source_key.lower()
    if lowered.startswith(_URL_PREFIXES):
        return SourceType.WEBSITE
    if lowered.endswith(".vtt"):
        return SourceType.VTT
    if lowered.endswith(_FILE_EXTENSIONS):
        return SourceType.FILE
    return SourceType.TEXT


def source_id_for(source_key: str) -> str:
    """Return the stable opaque id of the source identified by *source_key*."""
    return uuid.uuid5(_ID_NAMESPACE, source_key).hex


def chunk_id_for(source_key: str, index: int) -> str:
    """Return the stable vector-store primary key of chunk *index* of a source."""
    return uuid.uuid5(_ID_NAMESPACE, f"{source_key}#{index}").hex


# ---------------------------------------------------------------------------
# Chunk -- the unit of embedding and retrieval.
# ---------------------------------------------------------------------------
class Chunk(BaseModel):
    """A bounded-length slice of source text, ready for embedding and storage."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Vector-store primary key, derived from source key and index.")
    text: str = Field(description="The chunk's textual content.")
    index: int = Field(ge=0, description="Ordinal position of the chunk within its source.")
    source_key: str = Field(description="Dedup identity of the parent source (file name, URL, text id).")
    source_type: SourceType
    source_name: str = Field(default="", description="Display name of the parent source.")
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="Extra string metadata persisted alongside the chunk.",
    )

    @property
    def citation(self) -> str:
        """Human-readable reference, e.g. ``"handbook.pdf #3"`` (1-based)."""
        return f"{self.source_name or self.source_key} #{self.index + 1}"

    def to_metadata(self) -> dict[str, str | int]:
        """Flatten into the metadata dict persisted by vector stores.

        The reserved keys ``source``, ``type``, ``index`` and ``name`` always
        win over same-named entries in :attr:`metadata`.
        """
        return {
            **self.metadata,
            "source": self.source_key,
            "type": self.source_type.value,
            "index": self.index,
            "name": self.source_name,
        }

    @classmethod
    def from_metadata(cls, chunk_id: str, metadata: dict[str, Any], text: str) -> Chunk:
        """Rebuild a chunk from a vector store's ``(id, metadata, document)`` row."""
        reserved = {"source", "type", "index", "name"}
        source_key = str(metadata.get("source", ""))
        try:
            source_type = SourceType(metadata.get("type"))
        except ValueError:
            source_type = infer_source_type(source_key)
        return cls(
            chunk_id=chunk_id,
            text=text,
            index=int(metadata.get("index", 0)),
            source_key=source_key,
            source_type=source_type,
            source_name=str(metadata.get("name") or source_key),
            metadata={k: str(v) for k, v in metadata.items() if k not in reserved},
        )


# ---------------------------------------------------------------------------
# RetrievedChunk -- a ranked search result.
# ---------------------------------------------------------------------------
class RetrievedChunk(BaseModel):
    """A chunk returned from a vector-store query with its similarity score."""

    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    score: float = Field(description="Cosine similarity between the query and this chunk.")
    formatted_citation: str = Field(
        default="",
        description='Human-readable citation, e.g. "handbook.pdf #3".',
    )


# ---------------------------------------------------------------------------
# Source -- one logical ingested origin.
# ---------------------------------------------------------------------------
class Source(BaseModel):
    """A logical origin of ingested content, as listed by the source registry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque unique identifier (stable hash of the source key).")
    type: SourceType
    name: str = Field(description="Display name.")
    source_key: str = Field(description="Dedup identity: file name, URL, or generated text id.")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    chunk_count: int = Field(default=0, ge=0)

    @classmethod
    def from_key(
        cls,
        source_key: str,
        source_type: SourceType,
        name: str | None = None,
        created_at: datetime | None = None,
        chunk_count: int = 0,
    ) -> Source:
        return cls(
            id=source_id_for(source_key),
            type=source_type,
            name=name or source_key,
            source_key=source_key,
            created_at=created_at or datetime.now(timezone.utc),
            chunk_count=chunk_count,
        )


# ---------------------------------------------------------------------------
# IngestionRequest / IngestionResult -- pipeline input and output.
# ---------------------------------------------------------------------------
class IngestionRequest(BaseModel):
    """One origin to ingest: exactly one of ``text``, ``file_path`` or ``url``."""

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    file_path: str | None = None
    url: str | None = None
    declared_type: SourceType | None = Field(
        default=None,
        description="Overrides the type inferred from the origin (e.g. force vtt).",
    )
    name: str | None = Field(default=None, description="Optional display name / text source key.")

    @model_validator(mode="after")
    def _exactly_one_origin(self) -> IngestionRequest:
        given = [v for v in (self.text, self.file_path, self.url) if v is not None]
        if len(given) != 1:
            raise ValueError("exactly one of text, file_path or url must be provided")
        return self

    @property
    def label(self) -> str:
        """Short human-readable description used in logs and job outcomes."""
        if self.file_path is not None:
            return self.file_path
        if self.url is not None:
            return self.url
        if self.name:
            return self.name
        snippet = " ".join((self.text or "").split())
        if len(snippet) > _LABEL_SNIPPET:
            snippet = snippet[:_LABEL_SNIPPET].rstrip() + "..."
        return f"text: {snippet}" if snippet else "text: (empty)"


class IngestionResult(BaseModel):
    """Summary of a single successful ingestion run."""

    model_config = ConfigDict(frozen=True)

    source_key: str
    source_name: str
    source_type: SourceType
    chunk_count: int = Field(default=0, ge=0, description="Number of chunks written to the store.")
    ingestion_time: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds.")
